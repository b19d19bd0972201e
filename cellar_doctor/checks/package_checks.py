# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Checks on installed packages: missing dependencies and link state."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from cellar_doctor.config.constants import DoctorConstants

from ._helpers import advisory, inject_file_list, is_linked

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext
    from cellar_doctor.core.models import Package


def check_missing_deps(ctx: RunContext) -> str | None:
    """Installed packages whose runtime dependencies are not installed."""
    if not ctx.config.cellar.exists():
        return None

    missing: set[str] = set()
    for deps in ctx.dependency_analyzer().missing_dependencies().values():
        missing.update(deps)
    if not missing:
        return None

    cmd = DoctorConstants.MANAGER_COMMAND
    return advisory(
        f"""
        Some installed packages are missing dependencies.
        You should `{cmd} install` the missing dependencies:
          {cmd} install {" ".join(sorted(missing))}

        Run `cellar-doctor missing` for more details.
        """
    )


def _is_linked_into_prefix(ctx: RunContext, package: Package) -> bool:
    """Whether any file of *package* is symlinked into the prefix."""
    for installed in package.installed_prefixes:
        for dirpath, dirnames, filenames in os.walk(installed):
            for name in [*dirnames, *filenames]:
                src = Path(dirpath) / name
                dst = ctx.prefix / src.relative_to(installed)
                if dst.is_symlink() and dst.resolve() == src.resolve():
                    return True
    return False


def check_for_linked_keg_only_brews(ctx: RunContext) -> str | None:
    """Keg-only packages that are linked into the prefix anyway."""
    if not ctx.config.cellar.exists():
        return None

    linked = [
        pkg.full_name for pkg in ctx.provider.installed_packages() if pkg.keg_only and _is_linked_into_prefix(ctx, pkg)
    ]
    if not linked:
        return None

    cmd = DoctorConstants.MANAGER_COMMAND
    return inject_file_list(
        linked,
        advisory(
            f"""
            Some keg-only packages are linked into the prefix.
            Linking a keg-only package, such as gettext, with `{cmd} link <package>`
            will cause other packages to detect it during the `./configure` step.
            This may cause problems when compiling those other packages.

            Binaries provided by keg-only packages may override system binaries
            with other strange results.

            You may wish to `{cmd} unlink` these packages:
            """
        ),
    )


def check_for_unlinked_but_not_keg_only(ctx: RunContext) -> str | None:
    """Installed packages that should be linked but are not."""
    unlinked = [
        pkg.name for pkg in ctx.provider.installed_packages() if not pkg.keg_only and not is_linked(ctx, pkg.name)
    ]
    if not unlinked:
        return None

    return inject_file_list(
        unlinked,
        advisory(
            f"""
            You have unlinked kegs in your Cellar
            Leaving kegs unlinked can lead to build-trouble and cause packages that depend on
            those kegs to fail to run properly once built. Run `{DoctorConstants.MANAGER_COMMAND} link` on these:
            """
        ),
    )
