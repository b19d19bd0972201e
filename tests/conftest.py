# Copyright 2026 Cisco Systems, Inc. and its affiliates
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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from cellar_doctor.config.config import DoctorConfig
from cellar_doctor.core.context import RunContext
from cellar_doctor.core.doctor_policy import DoctorPolicy
from cellar_doctor.core.exceptions import ExternalToolUnavailable
from cellar_doctor.core.metadata import InMemoryMetadataProvider
from cellar_doctor.core.models import BuildOptions, DependencyEdge, DependencyKind, Package

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

project_root = Path(__file__).parent.parent
env_file = project_root / ".env"

if env_file.exists():
    load_dotenv(env_file)


# ---------------------------------------------------------------------------
# Fakes for external collaborators
# ---------------------------------------------------------------------------


class FakeMountFacility:
    """Mount facility returning canned ``df -P`` output.

    A scoped query answers with the line of the longest mount point that
    contains the path, like ``df`` does.  Paths listed in *nonexistent*
    behave like ``df`` on a missing path.
    """

    def __init__(self, mounts: list[tuple[str, str]], nonexistent=(), unavailable: bool = False):
        self.mounts = mounts
        self.nonexistent = {str(p) for p in nonexistent}
        self.unavailable = unavailable
        self.calls: list[str | None] = []

    @staticmethod
    def _line(device: str, mount_point: str) -> str:
        return f"{device}   489562928 440803616  48247312    91%    {mount_point}"

    def list_mounts(self, path=None) -> str:
        self.calls.append(None if path is None else str(path))
        if self.unavailable:
            raise ExternalToolUnavailable(["df", "-P"], "No such file or directory")

        header = "Filesystem 512-blocks Used Available Capacity Mounted on"
        if path is None:
            return "\n".join([header] + [self._line(d, m) for d, m in self.mounts]) + "\n"

        path = str(path)
        if path in self.nonexistent:
            raise ExternalToolUnavailable(["df", "-P", path], "exited with status 1")
        candidates = [(d, m) for d, m in self.mounts if path == m or path.startswith(m.rstrip("/") + "/")]
        if not candidates:
            return header + "\n"
        device, mount_point = max(candidates, key=lambda dm: len(dm[1]))
        return f"{header}\n{self._line(device, mount_point)}\n"


class FakeCommandRunner:
    """Stand-in for :func:`cellar_doctor.core.system.run_external`.

    Responses are keyed by the full command tuple; a value that is an
    exception instance is raised.  Unknown commands behave like a missing
    tool.
    """

    def __init__(self, responses: dict[tuple[str, ...], object] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[dict] = []

    def __call__(self, command, *, timeout, cwd=None, env=None, merge_stderr=False) -> str:
        self.calls.append({"command": list(command), "timeout": timeout, "cwd": cwd, "merge_stderr": merge_stderr})
        response = self.responses.get(tuple(command))
        if response is None:
            raise ExternalToolUnavailable(list(command), "not stubbed")
        if isinstance(response, BaseException):
            raise response
        return response


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_package(tmp_path: Path):
    """Factory fixture for :class:`Package` objects.

    Usage::

        a = make_package("a", deps=["c", ("b", "optional")], options=["with-b"])
        c = make_package("c", installed=False)

    Installed packages get one (not created) version prefix under
    *tmp_path*.
    """

    def _make(
        name: str,
        deps=(),
        installed: bool = True,
        keg_only: bool = False,
        options=(),
        full_name: str | None = None,
    ) -> Package:
        edges = []
        for dep in deps:
            if isinstance(dep, tuple):
                dep_name, kind = dep
            else:
                dep_name, kind = dep, DependencyKind.REQUIRED
            edges.append(DependencyEdge(dependent=name, name=dep_name, kind=kind))
        prefixes = (tmp_path / "Cellar" / name / "1.0",) if installed else ()
        return Package(
            name=name,
            installed_prefixes=prefixes,
            keg_only=keg_only,
            dependencies=tuple(edges),
            build_options=BuildOptions(frozenset(options)),
            full_name=full_name,
        )

    return _make


@pytest.fixture
def make_provider():
    """Factory fixture for an :class:`InMemoryMetadataProvider`."""

    def _make(*packages: Package) -> InMemoryMetadataProvider:
        return InMemoryMetadataProvider(packages)

    return _make


@pytest.fixture
def fake_df():
    """Factory fixture for a :class:`FakeMountFacility`.

    Usage::

        facility = fake_df([("/dev/disk1", "/"), ("/dev/disk2", "/Volumes/data")])
    """

    def _make(mounts=(("/dev/disk1", "/"),), nonexistent=(), unavailable: bool = False) -> FakeMountFacility:
        return FakeMountFacility(list(mounts), nonexistent=nonexistent, unavailable=unavailable)

    return _make


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory fixture for a :class:`DoctorConfig` rooted in *tmp_path*.

    The prefix, temp and home directories exist; the Cellar, cache and
    logs directories do not.  ``PATH`` puts the prefix's bin first.
    """

    def _make(environ: dict[str, str] | None = None, **overrides) -> DoctorConfig:
        prefix = Path(overrides.pop("prefix", tmp_path / "prefix"))
        prefix.mkdir(parents=True, exist_ok=True)
        temp = tmp_path / "tmp"
        temp.mkdir(exist_ok=True)
        home = tmp_path / "home"
        home.mkdir(exist_ok=True)

        env = {
            "PATH": os.pathsep.join([str(prefix / "bin"), "/usr/bin", "/bin"]),
            "HOME": str(home),
            "SHELL": "/bin/bash",
        }
        env.update(environ or {})

        values = {
            "prefix": prefix,
            "repository": prefix,
            "cellar": prefix / "Cellar",
            "temp": temp,
            "cache": tmp_path / "cache",
            "logs": tmp_path / "logs",
            "external_timeout_seconds": 5.0,
        }
        values.update(overrides)
        return DoctorConfig(environ=env, **values)

    return _make


@pytest.fixture
def make_context(make_config, make_provider, fake_df):
    """Factory fixture for a :class:`RunContext` with every collaborator faked.

    Usage::

        ctx = make_context(environ={"TMPDIR": "/nope"})
        ctx = make_context(provider=make_provider(pkg), responses={("git", "--version"): "git version 2.40.0"})
    """

    def _make(
        config: DoctorConfig | None = None,
        policy: DoctorPolicy | None = None,
        provider=None,
        mount_facility=None,
        responses: dict[tuple[str, ...], object] | None = None,
        environ: dict[str, str] | None = None,
        **config_overrides,
    ) -> RunContext:
        return RunContext(
            config=config or make_config(environ=environ, **config_overrides),
            policy=policy or DoctorPolicy.default(),
            provider=provider if provider is not None else make_provider(),
            mount_facility=mount_facility or fake_df(),
            command_runner=FakeCommandRunner(responses),
        )

    return _make


@pytest.fixture
def make_executable():
    """Factory fixture creating an executable stub file."""

    def _make(directory: Path, name: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text("#!/bin/sh\nexit 0\n")
        path.chmod(0o755)
        return path

    return _make
