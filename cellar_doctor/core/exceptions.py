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

"""Cellar Doctor exceptions.

This module defines custom exceptions for Cellar Doctor operations.
All exceptions inherit from CellarDoctorError for easy catching.

None of these is fatal to a diagnostic run: the runner recovers anything a
check raises and reports it as a generic advisory.

Example:
    >>> from cellar_doctor.core.system import run_external
    >>> from cellar_doctor.core.exceptions import ExternalToolUnavailable
    >>>
    >>> try:
    ...     out = run_external(["git", "--version"], timeout=5)
    ... except ExternalToolUnavailable:
    ...     out = None
"""


class CellarDoctorError(Exception):
    """Base exception for all Cellar Doctor errors."""

    pass


class PackageUnavailableError(CellarDoctorError):
    """Raised when a dependency name does not map to a known package.

    The dependency analyzer treats this as evidence that the dependency is
    missing rather than as a fault.
    """

    def __init__(self, name: str):
        super().__init__(f"No available package with the name '{name}'")
        self.name = name


class ExternalToolError(CellarDoctorError):
    """Base class for failures of an external command."""

    def __init__(self, command: list[str] | tuple[str, ...], message: str):
        super().__init__(f"{command[0] if command else '<empty>'}: {message}")
        self.command = list(command)


class ExternalToolUnavailable(ExternalToolError):
    """Raised when an external tool is missing or exits unsuccessfully.

    This can indicate:
    - The binary is not installed or not on PATH
    - The binary is not executable
    - The tool ran but returned a non-zero exit status
    """

    pass


class ExternalToolTimeout(ExternalToolError):
    """Raised when an external tool does not finish within its timeout."""

    def __init__(self, command: list[str] | tuple[str, ...], timeout: float):
        super().__init__(command, f"timed out after {timeout:g}s")
        self.timeout = timeout


class CheckExecutionError(CellarDoctorError):
    """Raised (and recovered) when an individual check fails.

    The runner wraps the original exception so the failing check's name
    travels with it.
    """

    def __init__(self, check_name: str, original: BaseException):
        super().__init__(f"{type(original).__name__}: {original}")
        self.check_name = check_name
        self.original = original


class PolicyError(CellarDoctorError):
    """Raised when a policy file cannot be interpreted."""

    pass
