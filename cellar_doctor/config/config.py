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
Configuration class for Cellar Doctor.

Locates the managed installation (prefix, repository, Cellar, temp, cache and
log directories) and holds the read-only environment snapshot that checks
inspect.
"""

import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

from .constants import DoctorConstants


@dataclass
class DoctorConfig:
    """
    Configuration for a diagnostic run.

    Any location left as ``None`` is filled from the environment (or derived
    from the prefix) in ``__post_init__``.
    """

    prefix: Path | None = None
    repository: Path | None = None
    cellar: Path | None = None
    temp: Path | None = None
    cache: Path | None = None
    logs: Path | None = None

    external_timeout_seconds: float | None = None

    # Read-only snapshot of the environment the checks see
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))

    def __post_init__(self):
        """Load configuration from the environment snapshot if not provided."""
        env = self.environ

        if self.prefix is None:
            self.prefix = Path(env.get("CELLAR_DOCTOR_PREFIX") or DoctorConstants.DEFAULT_PREFIX)
        self.prefix = Path(self.prefix)

        if self.repository is None:
            repo = env.get("CELLAR_DOCTOR_REPOSITORY")
            self.repository = Path(repo) if repo else self.prefix
        self.repository = Path(self.repository)

        if self.cellar is None:
            cellar = env.get("CELLAR_DOCTOR_CELLAR")
            self.cellar = Path(cellar) if cellar else self.prefix / "Cellar"
        self.cellar = Path(self.cellar)

        if self.temp is None:
            temp = Path(env.get("CELLAR_DOCTOR_TEMP") or DoctorConstants.DEFAULT_TEMP)
            self.temp = temp if temp.is_dir() else Path(tempfile.gettempdir())
        self.temp = Path(self.temp)

        if self.cache is None:
            self.cache = Path(env.get("CELLAR_DOCTOR_CACHE") or DoctorConstants.DEFAULT_CACHE).expanduser()
        self.cache = Path(self.cache)

        if self.logs is None:
            self.logs = Path(env.get("CELLAR_DOCTOR_LOGS") or DoctorConstants.DEFAULT_LOGS).expanduser()
        self.logs = Path(self.logs)

        if self.external_timeout_seconds is None:
            raw = env.get("CELLAR_DOCTOR_EXTERNAL_TIMEOUT")
            try:
                self.external_timeout_seconds = float(raw) if raw else DoctorConstants.DEFAULT_EXTERNAL_TIMEOUT
            except ValueError:
                self.external_timeout_seconds = DoctorConstants.DEFAULT_EXTERNAL_TIMEOUT

    @property
    def library(self) -> Path:
        """Directory holding the package manager's own code."""
        return self.repository / "Library"

    @property
    def linked_kegs(self) -> Path:
        """Directory with one entry per package linked into the prefix."""
        return self.library / "LinkedKegs"

    @property
    def search_path(self) -> list[str]:
        """The ``PATH`` entries in order, empty entries dropped."""
        return [p for p in self.environ.get("PATH", "").split(os.pathsep) if p]

    @classmethod
    def from_env(cls) -> "DoctorConfig":
        """
        Create configuration from environment variables.

        Returns:
            DoctorConfig instance with values from environment
        """
        return cls()

    @classmethod
    def from_file(cls, config_file: Path) -> "DoctorConfig":
        """
        Load configuration from a .env file.

        Values in the file overlay the process environment; the process
        environment itself is left untouched.

        Args:
            config_file: Path to .env file

        Returns:
            DoctorConfig instance
        """
        env = dict(os.environ)
        if Path(config_file).exists():
            env.update({k: v for k, v in dotenv_values(config_file).items() if v is not None})
        return cls(environ=env)
