# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Checks that need to know which volume a path lives on."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from cellar_doctor.core.volumes import NOT_FOUND

from ._helpers import advisory, unique

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext


def check_for_multiple_volumes(ctx: RunContext) -> str | None:
    """The Cellar and the temp directory on different volumes."""
    cellar = ctx.config.cellar
    if not cellar.exists():
        return None

    resolver = ctx.volume_resolver()
    where_cellar = resolver.volume_of(cellar.resolve())
    where_tmp = resolver.volume_of(ctx.config.temp.resolve())
    if NOT_FOUND in (where_cellar, where_tmp) or where_cellar == where_tmp:
        return None

    return advisory(
        """
        Your Cellar and TEMP directories are on different volumes.
        macOS won't move relative symlinks across volumes unless the target file already
        exists. Packages known to be affected by this are Git and Narwhal.

        You should set the "CELLAR_DOCTOR_TEMP" environment variable to a suitable
        directory on the same volume as your Cellar.
        """
    )


def _looks_case_sensitive(directory: Path) -> bool:
    # Both spellings exist on a case-insensitive filesystem
    upper = Path(str(directory).upper())
    lower = Path(str(directory).lower())
    return directory.exists() and not (upper.exists() and lower.exists())


def check_filesystem_case_sensitive(ctx: RunContext) -> str | None:
    """Managed directories on a case-sensitive filesystem."""
    config = ctx.config
    candidates = unique(str(d) for d in (config.prefix, config.repository, config.cellar, config.temp))
    sensitive = [Path(d) for d in candidates if _looks_case_sensitive(Path(d))]
    if not sensitive:
        return None

    resolver = ctx.volume_resolver()
    volumes = []
    for directory in sensitive:
        mounts = resolver.mounts(directory)
        if mounts:
            volumes.extend(m.mount_point for m in mounts)
        else:
            volumes.append(str(directory))

    return advisory(
        f"""
        The filesystem on {",".join(unique(volumes))} appears to be case-sensitive.
        The default macOS filesystem is case-insensitive. Please report any apparent problems.
        """
    )
