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
Centralized check registration.

Every entry point (CLI, library callers, tests) **must** build the check list
through the helpers in this module so that:

* The registration order, which later checks depend on, is defined once.
* The ``disabled_checks`` policy setting is respected everywhere.
* Adding or removing a check only requires a change here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..checks import (
    access_checks,
    environment_checks,
    git_checks,
    package_checks,
    path_checks,
    python_checks,
    stray_file_checks,
    volume_checks,
)
from .doctor_policy import DoctorPolicy
from .runner import CheckRunner, CheckUnit, check_unit

logger = logging.getLogger(__name__)


def all_checks() -> list[CheckUnit]:
    """Every built-in check, in the order it must run."""
    return [
        # -- PATH and environment ---------------------------------------------
        check_unit(environment_checks.check_for_installed_developer_tools, category="environment"),
        check_unit(path_checks.check_path_for_trailing_slashes, category="path"),
        check_unit(
            environment_checks.check_for_macgpg2,
            category="environment",
            description="MacGPG2 left behind by the package installer.",
        ),
        check_unit(path_checks.check_user_path_1, category="path", writes=("seen_prefix_bin", "seen_prefix_sbin")),
        check_unit(path_checks.check_user_path_2, category="path", reads=("seen_prefix_bin",)),
        check_unit(path_checks.check_user_path_3, category="path", reads=("seen_prefix_sbin",)),
        check_unit(path_checks.check_for_old_share_python_in_path, category="path"),
        check_unit(path_checks.check_for_config_scripts, category="path"),
        check_unit(path_checks.check_for_external_cmd_name_conflict, category="path"),
        check_unit(environment_checks.check_dyld_vars, category="environment"),
        check_unit(environment_checks.check_user_curlrc, category="environment"),
        check_unit(environment_checks.check_tmpdir, category="environment"),
        check_unit(environment_checks.check_for_old_env_vars, category="environment"),
        check_unit(
            path_checks.check_for_non_prefixed_coreutils,
            category="path",
            description="Unprefixed GNU coreutils on PATH.",
        ),
        check_unit(path_checks.check_for_non_prefixed_findutils, category="path"),
        check_unit(
            environment_checks.check_for_pydistutils_cfg_in_home,
            category="environment",
            description="A .pydistutils.cfg in $HOME.",
        ),
        check_unit(path_checks.check_which_pkg_config, category="path"),
        # -- Stray files ----------------------------------------------------------
        check_unit(stray_file_checks.check_for_stray_dylibs, category="stray_files"),
        check_unit(stray_file_checks.check_for_stray_static_libs, category="stray_files"),
        check_unit(stray_file_checks.check_for_stray_pcs, category="stray_files"),
        check_unit(stray_file_checks.check_for_stray_las, category="stray_files"),
        check_unit(stray_file_checks.check_for_stray_headers, category="stray_files"),
        check_unit(environment_checks.check_for_other_frameworks, category="stray_files"),
        check_unit(stray_file_checks.check_for_gettext, category="stray_files"),
        check_unit(stray_file_checks.check_for_iconv, category="stray_files"),
        # -- Filesystem access ----------------------------------------------------
        check_unit(access_checks.check_access_prefix_directories, category="access"),
        check_unit(access_checks.check_access_site_packages, category="access"),
        check_unit(access_checks.check_access_repository, category="access", description="Repository not writable."),
        check_unit(access_checks.check_access_cache, category="access", description="Download cache not writable."),
        check_unit(access_checks.check_access_logs, category="access", description="Log directory not writable."),
        check_unit(access_checks.check_access_cellar, category="access", description="Cellar not writable."),
        check_unit(access_checks.check_tmpdir_sticky_bit, category="access"),
        check_unit(access_checks.check_prefix_location, category="access"),
        check_unit(access_checks.check_for_symlinked_cellar, category="access", description="Cellar is a symlink."),
        check_unit(access_checks.check_for_broken_symlinks, category="access"),
        # -- Volumes --------------------------------------------------------------
        check_unit(volume_checks.check_for_multiple_volumes, category="volumes"),
        check_unit(volume_checks.check_filesystem_case_sensitive, category="volumes"),
        # -- Packages -------------------------------------------------------------
        check_unit(package_checks.check_missing_deps, category="packages"),
        check_unit(package_checks.check_for_linked_keg_only_brews, category="packages"),
        check_unit(package_checks.check_for_unlinked_but_not_keg_only, category="packages"),
        # -- Version control --------------------------------------------------------
        check_unit(git_checks.check_for_git, category="git"),
        check_unit(git_checks.check_git_version, category="git"),
        check_unit(git_checks.check_git_newline_settings, category="git"),
        check_unit(git_checks.check_git_origin, category="git"),
        check_unit(git_checks.check_git_status, category="git"),
        check_unit(git_checks.check_for_outdated_installation, category="git"),
        # -- Interpreters -----------------------------------------------------------
        check_unit(python_checks.check_for_enthought_python, category="python", description="Enthought on PATH."),
        check_unit(python_checks.check_for_library_python, category="python", description="Python in /Library."),
        check_unit(python_checks.check_for_bad_python_symlink, category="python"),
        check_unit(python_checks.check_for_anaconda, category="python"),
        check_unit(python_checks.check_for_pth_support, category="python"),
    ]


def build_checks(policy: DoctorPolicy, names: Iterable[str] | None = None) -> list[CheckUnit]:
    """Build the ordered check list for a run.

    Args:
        policy: The active doctor policy; ``disabled_checks`` are left out.
        names: Run only these checks.  Checks that write context fields a
            selected check reads are pulled in as well.

    Returns:
        Checks in registration order.

    Raises:
        ValueError: If *names* contains an unknown check.
    """
    registered = all_checks()
    by_name = {c.name: c for c in registered}

    if names is None:
        wanted = set(by_name)
    else:
        wanted = set(names)
        unknown = sorted(wanted - set(by_name))
        if unknown:
            raise ValueError(f"Unknown check(s): {', '.join(unknown)}")
        wanted |= _writers_for(registered, wanted)

    selected = [c for c in registered if c.name in wanted and policy.is_enabled(c.name)]

    # A reader whose writer is disabled would see the field's default
    present = {fld for c in selected for fld in c.writes}
    kept = []
    for check in selected:
        orphaned = [fld for fld in check.reads if fld not in present]
        if orphaned:
            logger.warning("Skipping %s: no enabled check provides %s", check.name, ", ".join(orphaned))
            continue
        kept.append(check)
    return kept


def _writers_for(registered: list[CheckUnit], wanted: set[str]) -> set[str]:
    needed = {fld for c in registered if c.name in wanted for fld in c.reads}
    return {c.name for c in registered if needed.intersection(c.writes)}


def build_runner(policy: DoctorPolicy, names: Iterable[str] | None = None) -> CheckRunner:
    """A :class:`CheckRunner` over :func:`build_checks`."""
    return CheckRunner(build_checks(policy, names))
