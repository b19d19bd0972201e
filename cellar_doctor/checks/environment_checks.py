# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Environment-variable and host-software checks."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from ._helpers import LEGACY_PREFIX, advisory, inject_file_list

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext

DEVELOPER_TOOLS = ("cc", "gcc", "clang")

MACGPG2_PREFIX = LEGACY_PREFIX / "MacGPG2"
MACGPG2_SUSPECTS = (
    Path("/Applications/start-gpg-agent.app"),
    Path("/Library/Receipts/libiconv1.pkg"),
    MACGPG2_PREFIX,
)


def check_dyld_vars(ctx: RunContext) -> str | None:
    """``DYLD_*`` variables set in the environment."""
    dyld_vars = sorted(k for k in ctx.environ if k.startswith("DYLD_"))
    if not dyld_vars:
        return None

    message = inject_file_list(
        [f"{var}: {ctx.environ[var]}" for var in dyld_vars],
        advisory(
            """
            Setting DYLD_* vars can break dynamic linking.
            Set variables:
            """
        ),
    )
    if "DYLD_INSERT_LIBRARIES" in dyld_vars:
        message += advisory(
            """

            Setting DYLD_INSERT_LIBRARIES can cause Go builds to fail.
            Having this set is common if you use this software:
              http://asepsis.binaryage.com/
            """
        )
    return message


def check_user_curlrc(ctx: RunContext) -> str | None:
    """A ``.curlrc`` that may change how downloads behave."""
    found = any(
        ctx.environ.get(var) and (Path(ctx.environ[var]) / ".curlrc").exists() for var in ("CURL_HOME", "HOME")
    )
    if not found:
        return None

    return advisory(
        """
        You have a curlrc file
        If you have trouble downloading packages, then maybe this is the problem?
        If the following command doesn't work, then try removing your curlrc:
          curl https://github.com
        """
    )


def check_tmpdir(ctx: RunContext) -> str | None:
    """``TMPDIR`` pointing at a directory that does not exist."""
    tmpdir = ctx.environ.get("TMPDIR")
    if tmpdir is None or os.path.isdir(tmpdir):
        return None
    return f"TMPDIR {tmpdir!r} doesn't exist.\n"


def check_for_old_env_vars(ctx: RunContext) -> str | None:
    """Environment variables that are no longer used."""
    stale = [var for var in ctx.policy.environment.obsolete_env_vars if ctx.environ.get(var)]
    if not stale:
        return None

    return "".join(
        advisory(
            f"""
            `{var}` is no longer used
            Info files are no longer deleted by default; you may
            remove this environment variable.
            """
        )
        for var in stale
    )


def check_for_pydistutils_cfg_in_home(ctx: RunContext) -> str | None:
    home = ctx.environ.get("HOME")
    if not home or not (Path(home) / ".pydistutils.cfg").exists():
        return None

    return advisory(
        """
        A .pydistutils.cfg file was found in $HOME, which may cause Python
        builds to fail. See:
          https://bugs.python.org/issue6138
          https://bugs.python.org/issue4655
        """
    )


def check_for_other_frameworks(ctx: RunContext) -> str | None:
    """Frameworks known to be picked up by CMake builds."""
    found = [f for f in ctx.policy.environment.problem_frameworks if os.path.exists(f)]
    if not found:
        return None

    return inject_file_list(
        found,
        advisory(
            """
            Some frameworks can be picked up by CMake's build system and likely
            cause the build to fail. To compile CMake, you may wish to move these
            out of the way:
            """
        ),
    )


def check_for_installed_developer_tools(ctx: RunContext) -> str | None:
    """No C compiler on PATH."""
    if any(ctx.which(tool) is not None for tool in DEVELOPER_TOOLS):
        return None

    return advisory(
        """
        No developer tools installed.
        Install a C compiler (gcc or clang) with your system's package manager,
        then run this check again.
        """
    )


# A MacGPG2 from the package installer drops files into the legacy prefix
def check_for_macgpg2(ctx: RunContext) -> str | None:
    if (MACGPG2_PREFIX / "share" / "gnupg" / "VERSION").exists():
        return None
    if not any(suspect.exists() for suspect in MACGPG2_SUSPECTS):
        return None

    return advisory(
        f"""
        You may have installed MacGPG2 via the package installer.
        Several other checks will turn up problems, such as stray dylibs in
        {LEGACY_PREFIX} and permissions issues with share and man in {LEGACY_PREFIX}/.
        """
    )
