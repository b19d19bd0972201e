# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Stray-file checks.

Unmanaged libraries, pkg-config files and headers dropped into the prefix
are picked up by builds.  Whitelists of known-harmless files come from the
``stray_files`` section of the policy.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from cellar_doctor.config.constants import DoctorConstants
from cellar_doctor.core.stray_files import scan_stray_files

from ._helpers import advisory, find_relative_paths, inject_file_list, is_linked, try_resolve

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext


def _stray_advisory(ctx: RunContext, subdir: str, pattern: str, whitelist: Sequence[str], kind: str) -> str | None:
    directory = ctx.prefix / subdir
    files = scan_stray_files(directory, pattern, whitelist)
    if not files:
        return None

    return inject_file_list(
        files,
        advisory(
            f"""
            Unmanaged {kind} were found in {directory}.
            If you didn't put them there on purpose they could cause problems when
            building packages, and may need to be deleted.

            Unexpected {kind}:
            """
        ),
    )


def check_for_stray_dylibs(ctx: RunContext) -> str | None:
    """Unmanaged dylibs in ``lib``."""
    return _stray_advisory(ctx, "lib", "*.dylib", ctx.policy.stray_files.dylibs, "dylibs")


def check_for_stray_static_libs(ctx: RunContext) -> str | None:
    """Unmanaged static libraries in ``lib``."""
    return _stray_advisory(ctx, "lib", "*.a", ctx.policy.stray_files.static_libs, "static libraries")


def check_for_stray_pcs(ctx: RunContext) -> str | None:
    """Unmanaged pkg-config files in ``lib/pkgconfig``."""
    return _stray_advisory(ctx, "lib/pkgconfig", "*.pc", ctx.policy.stray_files.pkgconfig, ".pc files")


def check_for_stray_las(ctx: RunContext) -> str | None:
    """Unmanaged libtool archives in ``lib``."""
    return _stray_advisory(ctx, "lib", "*.la", ctx.policy.stray_files.libtool_archives, ".la files")


def check_for_stray_headers(ctx: RunContext) -> str | None:
    """Unmanaged headers anywhere under ``include``."""
    return _stray_advisory(ctx, "include", "**/*.h", ctx.policy.stray_files.headers, "header files")


def check_for_gettext(ctx: RunContext) -> str | None:
    """gettext files at a system prefix that the package manager does not own."""
    found = find_relative_paths(ctx, "lib/libgettextlib.dylib", "lib/libintl.dylib", "include/libintl.h")
    if not found:
        return None

    # A linked, managed gettext is reported by check_for_linked_keg_only_brews
    gettext = try_resolve(ctx, "gettext")
    owned_prefix = str(ctx.config.cellar / "gettext")
    managed = all(str(path.resolve()).startswith(owned_prefix) for path in found)
    if gettext is not None and is_linked(ctx, "gettext") and managed:
        return None

    return inject_file_list(
        found,
        advisory(
            """
            gettext files detected at a system prefix.
            These files can cause compilation and link failures, especially if they
            are compiled with improper architectures. Consider removing these files:
            """
        ),
    )


def check_for_iconv(ctx: RunContext) -> str | None:
    """libiconv files at a system prefix, or a linked libiconv package."""
    found = find_relative_paths(ctx, "lib/libiconv.dylib", "include/iconv.h")
    if not found:
        return None

    libiconv = try_resolve(ctx, "libiconv")
    if libiconv is not None and is_linked(ctx, "libiconv"):
        if libiconv.keg_only:
            return None
        return advisory(
            f"""
            A libiconv package is installed and linked.
            This will break builds that expect the system libiconv. Unlink it:
              {DoctorConstants.MANAGER_COMMAND} unlink libiconv
            """
        )

    return inject_file_list(
        found,
        advisory(
            """
            libiconv files detected at a system prefix other than /usr.
            Packages expect to link against the system libiconv in /usr. libiconv in
            other prefixes can cause compile or link failure, especially if compiled
            with improper architectures. It was either installed by a user or by some
            other third party software.

            Consider deleting these files:
            """
        ),
    )
