# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Ownership, permission and layout checks on the managed directories."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from cellar_doctor.config.constants import DoctorConstants
from cellar_doctor.core.system import is_writable

from ._helpers import advisory, inject_file_list

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext

# Subtrees where every directory must stay writable
_SUBTREES = ("share/locale", "share/man")


def _chown_advisory(directory: Path, reason: str = "") -> str:
    text = f"{directory} isn't writable.\n"
    if reason:
        text += reason
    text += advisory(
        f"""

        You should change the ownership and permissions of {directory}
        back to your user account.
          sudo chown -R $(whoami) {directory}
        """
    )
    return text


def _unwritable_subdirs(base: Path) -> list[Path]:
    cant_write = []
    for dirpath, _dirnames, _filenames in os.walk(base):
        if not is_writable(Path(dirpath)):
            cant_write.append(Path(dirpath))
    return sorted(cant_write)


def check_access_prefix_directories(ctx: RunContext) -> str | None:
    """Top-level prefix directories, and their locale and man subtrees, that aren't writable."""
    messages = []
    relative = [*DoctorConstants.TOP_LEVEL_DIRECTORIES, "lib/pkgconfig", "opt"]
    for rel in relative:
        directory = ctx.prefix / rel
        if directory.exists() and not is_writable(directory):
            messages.append(
                _chown_advisory(
                    directory,
                    advisory(
                        """
                        This can happen if you "sudo make install" software that isn't managed
                        by the package manager. If a package tries to write a file to this
                        directory, the install will fail during the link step.
                        """
                    ),
                )
            )

    for rel in _SUBTREES:
        target = ctx.prefix / rel
        if not target.is_dir():
            continue
        cant_write = _unwritable_subdirs(target)
        if cant_write:
            messages.append(
                inject_file_list(
                    cant_write,
                    advisory(
                        f"""
                        Some directories in {target} aren't writable.
                        This can happen if you "sudo make install" software that isn't managed
                        by the package manager. If a package tries to add files to one of these
                        directories, then the install will fail during the link step.

                        You should `sudo chown -R $(whoami)` them:
                        """
                    ),
                )
            )

    return "\n".join(messages) if messages else None


def check_access_repository(ctx: RunContext) -> str | None:
    repository = ctx.config.repository
    if not repository.exists() or is_writable(repository):
        return None
    return _chown_advisory(repository)


def check_access_cache(ctx: RunContext) -> str | None:
    cache = ctx.config.cache
    if not cache.exists() or is_writable(cache):
        return None
    cmd = DoctorConstants.MANAGER_COMMAND
    return _chown_advisory(
        cache,
        advisory(
            f"""
            This can happen if you run `{cmd} install` or `{cmd} fetch` as another user.
            Downloaded files are cached in this location.
            """
        ),
    )


def check_access_logs(ctx: RunContext) -> str | None:
    logs = ctx.config.logs
    if not logs.exists() or is_writable(logs):
        return None
    return _chown_advisory(logs, "Debugging logs are written to this location.\n")


def check_access_cellar(ctx: RunContext) -> str | None:
    cellar = ctx.config.cellar
    if not cellar.exists() or is_writable(cellar):
        return None
    return _chown_advisory(cellar)


def check_tmpdir_sticky_bit(ctx: RunContext) -> str | None:
    """A world-writable temp directory without the sticky bit."""
    temp = ctx.config.temp
    try:
        mode = temp.stat().st_mode
    except FileNotFoundError:
        return None
    world_writable = mode & 0o777 == 0o777
    if not world_writable or mode & stat.S_ISVTX:
        return None

    return advisory(
        f"""
        {temp} is world-writable but does not have the sticky bit set.
        Please execute `sudo chmod +t {temp}` in your Terminal.
        """
    )


def check_prefix_location(ctx: RunContext) -> str | None:
    """An installation outside the default prefix."""
    default = DoctorConstants.DEFAULT_PREFIX
    if str(ctx.prefix) == default:
        return None

    return advisory(
        f"""
        Your installation is not in {default}
        You can install anywhere you want, but some packages may only build
        correctly if you install in {default}. Sorry!
        """
    )


def check_for_symlinked_cellar(ctx: RunContext) -> str | None:
    cellar = ctx.config.cellar
    if not cellar.exists() or not cellar.is_symlink():
        return None

    return advisory(
        f"""
        Symlinked Cellars can cause problems.
        Your Cellar is a symlink: {cellar}
               which resolves to: {cellar.resolve()}

        The recommended installations are either:
        (A) Have Cellar be a real directory inside of your prefix
        (B) Symlink "bin/{DoctorConstants.MANAGER_COMMAND}" into your prefix, but don't symlink "Cellar".

        A symlinked Cellar can cause problems when two packages install to
        locations that are mapped on top of each other during the linking step.
        """
    )


def check_for_broken_symlinks(ctx: RunContext) -> str | None:
    """Symlinks in the linked directories whose target is gone."""
    broken = []
    for rel in DoctorConstants.PRUNEABLE_DIRECTORIES:
        directory = ctx.prefix / rel
        if not directory.is_dir():
            continue
        for dirpath, dirnames, filenames in os.walk(directory):
            for name in [*dirnames, *filenames]:
                path = Path(dirpath) / name
                if path.is_symlink() and not path.exists():
                    broken.append(path)
    if not broken:
        return None

    return inject_file_list(
        sorted(broken),
        f"Broken symlinks were found. Remove them with `{DoctorConstants.MANAGER_COMMAND} cleanup --prune-prefix`:\n",
    )


def check_access_site_packages(ctx: RunContext) -> str | None:
    """Managed ``site-packages`` directories that are not writable."""
    candidates = sorted((ctx.prefix / "lib").glob("python*/site-packages"))
    denied = [p for p in candidates if p.is_dir() and not is_writable(p)]
    if not denied:
        return None

    cmd = DoctorConstants.MANAGER_COMMAND
    return "\n".join(
        _chown_advisory(
            site_packages,
            advisory(
                f"""
                This can happen if you "sudo pip install" software that isn't managed
                by `{cmd}`. If you install a package with Python modules, the install
                will fail during the link step.
                """
            ),
        )
        for site_packages in denied
    )
