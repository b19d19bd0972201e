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
Mapping filesystem paths to the volume they are mounted on.

The mount facility is ``df -P``; each data line looks like::

    /dev/disk0s2   489562928 440803616  48247312    91%    /

Only the mount point is used.  A volume is identified by its index in one
snapshot of the full mount table, so two paths are on the same volume when
they index to the same position within one resolver.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

from ..config.constants import DoctorConstants
from .exceptions import ExternalToolError
from .models import Volume
from .system import run_external

logger = logging.getLogger(__name__)

NOT_FOUND = DoctorConstants.VOLUME_NOT_FOUND

_DF_LINE_RE = re.compile(r"^(.+?)\s+[0-9]+\s+[0-9]+\s+[0-9]+\s+[0-9]{1,3}%\s+(.+)$")


def parse_mount_lines(output: str) -> list[Volume]:
    """Parse ``df -P`` output into volumes, skipping the header and noise."""
    volumes: list[Volume] = []
    for line in output.splitlines():
        match = _DF_LINE_RE.match(line.rstrip())
        if match:
            volumes.append(Volume(device=match.group(1), mount_point=match.group(2)))
    return volumes


class MountFacility(Protocol):
    """Source of ``df -P`` style lines, optionally scoped to one path."""

    def list_mounts(self, path: str | Path | None = None) -> str: ...


class DfMountFacility:
    """Runs ``/bin/df -P`` with a bounded wait."""

    def __init__(self, executable: str = "/bin/df", timeout: float = DoctorConstants.DEFAULT_EXTERNAL_TIMEOUT):
        self.executable = executable
        self.timeout = timeout

    def list_mounts(self, path: str | Path | None = None) -> str:
        args = [self.executable, "-P"]
        if path is not None:
            args.append(str(path))
        return run_external(args, timeout=self.timeout)


class VolumeResolver:
    """Answers "which volume does this path belong to?".

    The full mount table is captured once, when the resolver is created;
    every :meth:`volume_of` answer indexes into that snapshot.  Create a new
    resolver for each logical resolution pass.
    """

    def __init__(self, facility: MountFacility | None = None):
        self.facility = facility or DfMountFacility()
        self._table: list[Volume] = self.mounts()

    @property
    def table(self) -> list[Volume]:
        """The mount table snapshot indices refer to."""
        return list(self._table)

    def mount_table(self) -> list[Volume]:
        """Capture and return a fresh copy of the full mount table."""
        return self.mounts()

    def mounts(self, path: str | Path | None = None) -> list[Volume]:
        """Volumes reported by the facility, scoped to *path* when given.

        Returns an empty list when the facility is unavailable or the path
        does not exist.
        """
        try:
            output = self.facility.list_mounts(path)
        except ExternalToolError as e:
            logger.debug("Mount facility unavailable for %s: %s", path or "all volumes", e)
            return []
        return parse_mount_lines(output)

    def volume_of(self, path: str | Path) -> int:
        """Index of the volume holding *path*, or ``NOT_FOUND``."""
        scoped = self.mounts(path)
        if not scoped:
            return NOT_FOUND

        target = scoped[0]
        for index, volume in enumerate(self._table):
            if volume.mount_point == target.mount_point:
                return index
        logger.debug("Volume %s for %s is not in the mount table", target.mount_point, path)
        return NOT_FOUND

    def same_volume(self, first: str | Path, second: str | Path) -> bool | None:
        """Whether two paths share a volume; ``None`` when either is unknown."""
        a = self.volume_of(first)
        b = self.volume_of(second)
        if a == NOT_FOUND or b == NOT_FOUND:
            return None
        return a == b


def resolve_volume(path: str | Path, facility: MountFacility | None = None) -> int:
    """Index of the volume holding *path* in a freshly captured mount table."""
    return VolumeResolver(facility).volume_of(path)
