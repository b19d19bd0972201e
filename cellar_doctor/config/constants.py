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
Constants for Cellar Doctor.
"""

from pathlib import Path

try:
    from .._version import __version__ as PACKAGE_VERSION
except Exception:  # pragma: no cover
    PACKAGE_VERSION = "0.0.0-dev"


class DoctorConstants:
    """Constants used throughout the diagnostic run."""

    VERSION = PACKAGE_VERSION

    # Project paths
    PACKAGE_ROOT = Path(__file__).parent.parent

    # Resource paths
    DATA_DIR = PACKAGE_ROOT / "data"
    DEFAULT_POLICY_PATH = DATA_DIR / "default_policy.yaml"

    # Default locations of a managed installation
    DEFAULT_PREFIX = "/usr/local"
    DEFAULT_TEMP = "/tmp"
    DEFAULT_CACHE = "~/Library/Caches/cellar-doctor"
    DEFAULT_LOGS = "~/Library/Logs/cellar-doctor"

    # External calls (git, df, python) are bounded by this many seconds
    DEFAULT_EXTERNAL_TIMEOUT = 10.0

    # Directories created under the prefix when packages are linked
    TOP_LEVEL_DIRECTORIES = ("bin", "etc", "include", "lib", "sbin", "share", "var", "Frameworks")
    PRUNEABLE_DIRECTORIES = ("bin", "etc", "include", "lib", "sbin", "share", "Frameworks", "opt")

    # Returned by the volume resolver when a path cannot be placed on a volume
    VOLUME_NOT_FOUND = -1

    # Command users run to manage packages, quoted in advisories
    MANAGER_COMMAND = "brew"

    # Name of the per-version build record inside an installed prefix
    INSTALL_RECEIPT = "INSTALL_RECEIPT.json"

