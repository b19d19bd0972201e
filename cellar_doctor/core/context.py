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
Per-run context handed to every check.

A :class:`RunContext` lives for exactly one diagnostic run.  It gives checks
the configuration, policy and collaborators they need, and it is the only
channel through which one check may pass state to a later one.  Fields that
are written by one check and read by another are declared explicitly below,
with the writer and readers named, because the runner's fixed order is what
makes them valid.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..config.config import DoctorConfig
from .dependency_graph import DependencyGraphAnalyzer
from .doctor_policy import DoctorPolicy
from .metadata import CellarMetadataProvider, PackageMetadataProvider
from .system import run_external, which
from .volumes import DfMountFacility, MountFacility, VolumeResolver

logger = logging.getLogger(__name__)

CommandRunner = Callable[..., str]


@dataclass
class RunContext:
    """Configuration, collaborators and shared scratch space for one run."""

    config: DoctorConfig = field(default_factory=DoctorConfig)
    policy: DoctorPolicy = field(default_factory=DoctorPolicy.default)
    provider: PackageMetadataProvider | None = None
    mount_facility: MountFacility | None = None
    command_runner: CommandRunner = run_external

    # Written by check_user_path_1; read by check_user_path_2
    seen_prefix_bin: bool = False
    # Written by check_user_path_1; read by check_user_path_3
    seen_prefix_sbin: bool = False

    scratch: dict[str, Any] = field(default_factory=dict)

    _analyzer: DependencyGraphAnalyzer | None = field(default=None, repr=False)

    def __post_init__(self):
        if self.provider is None:
            self.provider = CellarMetadataProvider(self.config.cellar)
        if self.mount_facility is None:
            self.mount_facility = DfMountFacility(timeout=self.external_timeout)

    # -- Scratch space -------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        self.scratch[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.scratch.get(key, default)

    # -- Environment -----------------------------------------------------------

    @property
    def prefix(self) -> Path:
        return self.config.prefix

    @property
    def environ(self):
        return self.config.environ

    @property
    def paths(self) -> list[str]:
        """``PATH`` entries in order."""
        return self.config.search_path

    @property
    def external_timeout(self) -> float:
        override = self.policy.execution.external_timeout_seconds
        return override if override is not None else self.config.external_timeout_seconds

    def which(self, name: str) -> Path | None:
        """Locate *name* on the run's ``PATH``."""
        return which(name, self.paths)

    def run(self, command: Sequence[str], *, cwd: str | Path | None = None, merge_stderr: bool = False) -> str:
        """Run an external tool bounded by the run's timeout."""
        return self.command_runner(
            list(command),
            timeout=self.external_timeout,
            cwd=cwd,
            env=dict(self.environ),
            merge_stderr=merge_stderr,
        )

    # -- Collaborators -------------------------------------------------------

    def dependency_analyzer(self) -> DependencyGraphAnalyzer:
        """The run's analyzer; traversals are memoized across checks."""
        if self._analyzer is None:
            self._analyzer = DependencyGraphAnalyzer(self.provider)
        return self._analyzer

    def volume_resolver(self) -> VolumeResolver:
        """A resolver over a freshly captured mount table."""
        return VolumeResolver(self.mount_facility)
