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
Data models for installed packages, volumes and diagnostic results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class DependencyKind(str, Enum):
    """How a dependency edge is declared."""

    REQUIRED = "required"
    BUILD = "build"
    OPTIONAL = "optional"
    RECOMMENDED = "recommended"


@dataclass(frozen=True)
class DependencyEdge:
    """A declared dependency from one package on another."""

    dependent: str  # Name of the package declaring the dependency
    name: str  # Name of the dependency being referenced
    kind: DependencyKind = DependencyKind.REQUIRED

    def __post_init__(self):
        """Accept plain strings for ``kind`` (e.g. from install receipts)."""
        if not isinstance(self.kind, DependencyKind):
            object.__setattr__(self, "kind", DependencyKind(self.kind))


@dataclass(frozen=True)
class BuildOptions:
    """The options an installed package was built with (its "tab").

    Optional dependencies are selected with ``with-<name>``; recommended
    dependencies are on unless ``without-<name>`` was used.
    """

    used_options: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.used_options, frozenset):
            object.__setattr__(self, "used_options", frozenset(self.used_options))

    def with_option(self, name: str) -> bool:
        """Whether ``with-<name>`` (or the bare option name) was used."""
        return f"with-{name}" in self.used_options or name in self.used_options

    def without_option(self, name: str) -> bool:
        """Whether ``without-<name>`` was used."""
        return f"without-{name}" in self.used_options

    def selects(self, edge: DependencyEdge) -> bool:
        """Whether the optional or recommended dependency *edge* was built in."""
        if edge.kind is DependencyKind.RECOMMENDED:
            return not self.without_option(edge.name)
        return self.with_option(edge.name)


@dataclass
class Package:
    """An installable unit and what is known about its installation."""

    name: str
    installed_prefixes: tuple[Path, ...] = ()
    keg_only: bool = False
    dependencies: tuple[DependencyEdge, ...] = ()
    build_options: BuildOptions = field(default_factory=BuildOptions)
    full_name: str | None = None

    def __post_init__(self):
        """Normalize collections and default ``full_name``."""
        self.installed_prefixes = tuple(Path(p) for p in self.installed_prefixes)
        self.dependencies = tuple(self.dependencies)
        if self.full_name is None:
            self.full_name = self.name

    @property
    def any_version_installed(self) -> bool:
        """Whether at least one installed version-prefix exists."""
        return len(self.installed_prefixes) > 0

    @property
    def is_installed(self) -> bool:
        return self.any_version_installed


@dataclass(frozen=True)
class Volume:
    """A mounted filesystem as reported by the mount facility."""

    device: str
    mount_point: str


@dataclass
class CheckResult:
    """Outcome of one check in a diagnostic run."""

    check: str  # Name of the check that produced this result
    message: str | None = None  # Multi-line advisory; None means no issue
    position: int = 0  # Position of the check in the run order
    failed: bool = False  # True when the runner recovered an exception from the check

    @property
    def has_issue(self) -> bool:
        return self.message is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "check": self.check,
            "message": self.message,
            "position": self.position,
            "failed": self.failed,
        }


@dataclass
class DiagnosticReport:
    """Ordered advisories from one diagnostic run."""

    results: list[CheckResult] = field(default_factory=list)
    checks_run: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_clean(self) -> bool:
        """True when no check produced an advisory."""
        return not self.results

    @property
    def failures(self) -> list[CheckResult]:
        """Results that stand for a check that could not complete."""
        return [r for r in self.results if r.failed]

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.results if r.message is not None]

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "is_clean": self.is_clean,
            "advisory_count": len(self.results),
            "failure_count": len(self.failures),
            "advisories": [r.to_dict() for r in self.results],
            "checks_run": self.checks_run,
            "duration_seconds": self.duration_seconds,
            "duration_ms": int(self.duration_seconds * 1000),
            "timestamp": self.timestamp.isoformat(),
        }
