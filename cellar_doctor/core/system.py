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
Helpers for talking to the host system: running external tools with a
bounded wait, and locating executables on a ``PATH``.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from ..config.constants import DoctorConstants
from .exceptions import ExternalToolTimeout, ExternalToolUnavailable

logger = logging.getLogger(__name__)


def run_external(
    command: Sequence[str],
    *,
    timeout: float = DoctorConstants.DEFAULT_EXTERNAL_TIMEOUT,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
    merge_stderr: bool = False,
) -> str:
    """Run *command* and return its standard output.

    Args:
        command: Program and arguments.
        timeout: Seconds to wait before giving up on the process.
        cwd: Working directory for the process.
        env: Environment for the process (defaults to the current one).
        merge_stderr: Append standard error to the returned text.

    Raises:
        ExternalToolUnavailable: The program is missing, not executable, or
            exited with a non-zero status.
        ExternalToolTimeout: The program did not finish within *timeout*.
    """
    args = list(command)
    logger.debug("Running %s (timeout %ss)", " ".join(args), timeout)
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
            cwd=cwd,
            env=env,
        )
    except subprocess.TimeoutExpired:
        logger.warning("%s did not finish within %ss", args[0], timeout)
        raise ExternalToolTimeout(args, timeout) from None
    except subprocess.CalledProcessError as e:
        raise ExternalToolUnavailable(args, f"exited with status {e.returncode}") from e
    except OSError as e:
        logger.debug("Cannot run %s: %s", args[0], e)
        raise ExternalToolUnavailable(args, str(e)) from e

    if merge_stderr:
        return result.stdout + result.stderr
    return result.stdout


def which(name: str, search_path: Sequence[str] | None = None) -> Path | None:
    """Return the first executable called *name* on *search_path*.

    ``search_path`` defaults to the process ``PATH``.
    """
    if search_path is None:
        search_path = [p for p in os.environ.get("PATH", "").split(os.pathsep) if p]
    for directory in search_path:
        candidate = Path(directory) / name
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return candidate
    return None


def is_writable(path: Path) -> bool:
    """Whether the real user may write to *path*."""
    return os.access(path, os.W_OK)
