# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Doctor policy: site-customisable whitelists and thresholds for the checks.

Every installation has its own set of known-harmless leftovers (filesystem
drivers dropping dylibs into the prefix, vendor ``*-config`` scripts, ...).
A ``DoctorPolicy`` captures what counts as benign and which checks run.

Usage
-----
    from cellar_doctor.core.doctor_policy import DoctorPolicy

    # Load built-in defaults
    policy = DoctorPolicy.default()

    # Load a site policy (merges on top of defaults)
    policy = DoctorPolicy.from_yaml("my_policy.yaml")

    # Dump the current (including default) policy for editing
    policy.to_yaml("generated_policy.yaml")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..config.constants import DoctorConstants
from .exceptions import PolicyError

logger = logging.getLogger(__name__)

_DEFAULT_POLICY_PATH = DoctorConstants.DEFAULT_POLICY_PATH


# ---------------------------------------------------------------------------
# Data classes for each policy section
# ---------------------------------------------------------------------------


@dataclass
class StrayFilesPolicy:
    """Whitelists of files that may live unmanaged in the prefix."""

    dylibs: list[str] = field(default_factory=list)
    static_libs: list[str] = field(default_factory=list)
    pkgconfig: list[str] = field(default_factory=list)
    libtool_archives: list[str] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)


@dataclass
class PathPolicy:
    """Controls the PATH-related checks."""

    # System directory whose tools managed ones should shadow
    system_bin_dir: str = "/usr/bin"
    # Directories whose ``*-config`` scripts are expected (compared case-insensitively)
    config_script_dirs: list[str] = field(default_factory=list)
    # Prefix-relative directories that are obsolete on PATH
    obsolete_path_dirs: list[str] = field(default_factory=lambda: ["share/python", "share/python3"])
    # Prefix of external command files whose names must be unique across PATH
    external_command_prefix: str = "cellar-"


@dataclass
class EnvironmentPolicy:
    """Controls environment-variable and host-software checks."""

    obsolete_env_vars: list[str] = field(default_factory=list)
    problem_frameworks: list[str] = field(default_factory=list)


@dataclass
class VersionControlPolicy:
    """Controls the git checks."""

    minimum_git_version: str = "1.7.10"
    origin_pattern: str = r"cellar-doctor/cellar(\.git)?$"
    canonical_origin: str = "https://github.com/cellar-doctor/cellar.git"
    outdated_after_hours: int = 24
    default_branch: str = "master"


@dataclass
class ExecutionPolicy:
    """Controls how the runner executes checks."""

    # Overrides the configured per-call timeout for external tools
    external_timeout_seconds: float | None = None


# ---------------------------------------------------------------------------
# The top-level policy object
# ---------------------------------------------------------------------------


@dataclass
class DoctorPolicy:
    """Site diagnostic policy – everything that should be customisable."""

    # Metadata
    policy_name: str = "default"
    policy_version: str = "1.0"

    # Sections
    stray_files: StrayFilesPolicy = field(default_factory=StrayFilesPolicy)
    path: PathPolicy = field(default_factory=PathPolicy)
    environment: EnvironmentPolicy = field(default_factory=EnvironmentPolicy)
    version_control: VersionControlPolicy = field(default_factory=VersionControlPolicy)
    execution: ExecutionPolicy = field(default_factory=ExecutionPolicy)
    disabled_checks: set[str] = field(default_factory=set)

    # -----------------------------------------------------------------------
    # Construction helpers
    # -----------------------------------------------------------------------

    @classmethod
    def default(cls) -> DoctorPolicy:
        """Load the built-in default policy that ships with the package."""
        return cls.from_yaml(_DEFAULT_POLICY_PATH)

    @classmethod
    def from_yaml(cls, path: str | Path) -> DoctorPolicy:
        """
        Load a policy from a YAML file.

        The YAML is first merged on top of the built-in defaults so that
        users only need to specify the sections they want to override.

        Raises:
            FileNotFoundError: If *path* does not exist.
            PolicyError: If the file is not a YAML mapping.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")

        try:
            with open(path) as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise PolicyError(f"Invalid YAML in policy file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise PolicyError(f"Policy file {path} must contain a mapping, got {type(raw).__name__}")

        # If this IS the default file, just parse directly
        if path.resolve() == _DEFAULT_POLICY_PATH.resolve():
            return cls._from_dict(raw)

        merged = cls._deep_merge(cls._load_default_raw(), raw)
        return cls._from_dict(merged)

    def to_yaml(self, path: str | Path) -> None:
        """Dump the full policy to a YAML file for editing."""
        data = self._to_dict()
        with open(path, "w") as fh:
            fh.write("# Cellar Doctor – Policy\n")
            fh.write("# Only include sections you want to override; omitted sections\n")
            fh.write("# will use the built-in defaults.\n\n")
            yaml.dump(data, fh, default_flow_style=False, sort_keys=False, width=120)

    def is_enabled(self, check_name: str) -> bool:
        return check_name not in self.disabled_checks

    # -----------------------------------------------------------------------
    # Internal parsing
    # -----------------------------------------------------------------------

    @classmethod
    def _load_default_raw(cls) -> dict[str, Any]:
        if _DEFAULT_POLICY_PATH.exists():
            with open(_DEFAULT_POLICY_PATH) as fh:
                return yaml.safe_load(fh) or {}
        return {}

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Recursively merge *override* into *base*.

        Lists in the override **replace** the base list, so a site can
        narrow a whitelist without repeating every entry.
        """
        result = dict(base)
        for key, val in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(val, dict):
                result[key] = DoctorPolicy._deep_merge(result[key], val)
            else:
                result[key] = val
        return result

    @classmethod
    def _from_dict(cls, d: dict[str, Any]) -> DoctorPolicy:
        sf = d.get("stray_files", {}) or {}
        pa = d.get("path", {}) or {}
        en = d.get("environment", {}) or {}
        vc = d.get("version_control", {}) or {}
        ex = d.get("execution", {}) or {}

        defaults = VersionControlPolicy()
        timeout = ex.get("external_timeout_seconds")

        return cls(
            policy_name=d.get("policy_name", "default"),
            policy_version=str(d.get("policy_version", "1.0")),
            stray_files=StrayFilesPolicy(
                dylibs=list(sf.get("dylibs", [])),
                static_libs=list(sf.get("static_libs", [])),
                pkgconfig=list(sf.get("pkgconfig", [])),
                libtool_archives=list(sf.get("libtool_archives", [])),
                headers=list(sf.get("headers", [])),
            ),
            path=PathPolicy(
                system_bin_dir=pa.get("system_bin_dir", "/usr/bin"),
                config_script_dirs=list(pa.get("config_script_dirs", [])),
                obsolete_path_dirs=list(pa.get("obsolete_path_dirs", ["share/python", "share/python3"])),
                external_command_prefix=pa.get("external_command_prefix", "cellar-"),
            ),
            environment=EnvironmentPolicy(
                obsolete_env_vars=list(en.get("obsolete_env_vars", [])),
                problem_frameworks=list(en.get("problem_frameworks", [])),
            ),
            version_control=VersionControlPolicy(
                minimum_git_version=str(vc.get("minimum_git_version", defaults.minimum_git_version)),
                origin_pattern=vc.get("origin_pattern", defaults.origin_pattern),
                canonical_origin=vc.get("canonical_origin", defaults.canonical_origin),
                outdated_after_hours=int(vc.get("outdated_after_hours", defaults.outdated_after_hours)),
                default_branch=vc.get("default_branch", defaults.default_branch),
            ),
            execution=ExecutionPolicy(
                external_timeout_seconds=float(timeout) if timeout is not None else None,
            ),
            disabled_checks=set(d.get("disabled_checks", []) or []),
        )

    def _to_dict(self) -> dict[str, Any]:
        return {
            "policy_name": self.policy_name,
            "policy_version": self.policy_version,
            "stray_files": {
                "dylibs": self.stray_files.dylibs,
                "static_libs": self.stray_files.static_libs,
                "pkgconfig": self.stray_files.pkgconfig,
                "libtool_archives": self.stray_files.libtool_archives,
                "headers": self.stray_files.headers,
            },
            "path": {
                "system_bin_dir": self.path.system_bin_dir,
                "config_script_dirs": self.path.config_script_dirs,
                "obsolete_path_dirs": self.path.obsolete_path_dirs,
                "external_command_prefix": self.path.external_command_prefix,
            },
            "environment": {
                "obsolete_env_vars": self.environment.obsolete_env_vars,
                "problem_frameworks": self.environment.problem_frameworks,
            },
            "version_control": {
                "minimum_git_version": self.version_control.minimum_git_version,
                "origin_pattern": self.version_control.origin_pattern,
                "canonical_origin": self.version_control.canonical_origin,
                "outdated_after_hours": self.version_control.outdated_after_hours,
                "default_branch": self.version_control.default_branch,
            },
            "execution": {
                "external_timeout_seconds": self.execution.external_timeout_seconds,
            },
            "disabled_checks": sorted(self.disabled_checks),
        }
