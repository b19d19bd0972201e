# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Checks on the user's ``PATH``.

``check_user_path_1`` walks ``PATH`` once and records whether the prefix's
``bin`` and ``sbin`` were seen; ``check_user_path_2`` and
``check_user_path_3`` read those fields and must run after it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from ._helpers import advisory, inject_file_list, shell_profile, try_resolve, unique

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext
    from cellar_doctor.core.models import Package


def _path_export_hint(ctx: RunContext, directory: str) -> str:
    return f"echo 'export PATH=\"{directory}:$PATH\"' >> {shell_profile(ctx.environ)}"


def check_path_for_trailing_slashes(ctx: RunContext) -> str | None:
    """PATH entries that end in a slash."""
    bad_paths = [p for p in ctx.paths if p.endswith("/")]
    if not bad_paths:
        return None

    return inject_file_list(
        bad_paths,
        advisory(
            """
            Some directories in your PATH end in a slash.
            Directories in your PATH should not end in a slash. This can break other
            doctor checks. The following directories should be edited:
            """
        ),
    )


def check_user_path_1(ctx: RunContext) -> str | None:
    """The system bin directory shadowing tools from the prefix."""
    ctx.seen_prefix_bin = False
    ctx.seen_prefix_sbin = False

    system_bin = ctx.policy.path.system_bin_dir
    prefix_bin = str(ctx.prefix / "bin")
    prefix_sbin = str(ctx.prefix / "sbin")
    message = ""

    for p in ctx.paths:
        if p == system_bin:
            if ctx.seen_prefix_bin or message:
                continue
            # Only complain when something is actually shadowed
            bin_dir = Path(prefix_bin)
            names = sorted(child.name for child in bin_dir.iterdir()) if bin_dir.is_dir() else []
            conflicts = [name for name in names if (Path(system_bin) / name).exists()]
            if conflicts:
                message = inject_file_list(
                    conflicts,
                    advisory(
                        f"""
                        {system_bin} occurs before {prefix_bin}
                        This means that system-provided programs will be used instead of those
                        provided by the package manager. The following tools exist at both paths:
                        """
                    ),
                )
                message += advisory(
                    f"""

                    Consider setting your PATH so that {prefix_bin}
                    occurs before {system_bin}. Here is a one-liner:
                      {_path_export_hint(ctx, prefix_bin)}
                    """
                )
        elif p == prefix_bin:
            ctx.seen_prefix_bin = True
        elif p == prefix_sbin:
            ctx.seen_prefix_sbin = True

    return message or None


def check_user_path_2(ctx: RunContext) -> str | None:
    """The prefix's bin directory missing from PATH."""
    if ctx.seen_prefix_bin:
        return None

    return advisory(
        f"""
        The bin directory of {ctx.prefix} was not found in your PATH.
        Consider setting the PATH for example like so
          {_path_export_hint(ctx, str(ctx.prefix / "bin"))}
        """
    )


def check_user_path_3(ctx: RunContext) -> str | None:
    """The prefix's sbin directory missing from PATH while it holds executables."""
    if ctx.seen_prefix_sbin:
        return None

    sbin = ctx.prefix / "sbin"
    if not sbin.is_dir() or not any(sbin.iterdir()):
        return None

    return advisory(
        f"""
        The sbin directory of {ctx.prefix} was not found in your PATH but you have
        installed packages that put executables in {sbin}.
        Consider setting the PATH for example like so
          {_path_export_hint(ctx, str(sbin))}
        """
    )


def check_for_old_share_python_in_path(ctx: RunContext) -> str | None:
    """Obsolete script directories still listed in PATH."""
    obsolete = [str(ctx.prefix / d) for d in ctx.policy.path.obsolete_path_dirs]
    on_path = [d for d in obsolete if d in ctx.paths]
    if not on_path:
        return None

    message = "".join(f"{d} is not needed in PATH.\n" for d in on_path)
    message += advisory(
        f"""

        Python scripts installed with `pip` used to be placed in the directories
        above, but they now install into {ctx.prefix / "bin"}, so these entries can
        be removed from your PATH. You can delete anything except 'Extras' from
        them and reinstall affected Python packages with `pip install --upgrade`.
        """
    )
    return message


def check_for_config_scripts(ctx: RunContext) -> str | None:
    """``*-config`` scripts outside the system and managed directories."""
    cellar = ctx.config.cellar
    if not cellar.exists():
        return None
    real_cellar = str(cellar.resolve())

    whitelist = {d.lower() for d in ctx.policy.path.config_script_dirs}
    whitelist.update({str(ctx.prefix / "bin").lower(), str(ctx.prefix / "sbin").lower()})

    scripts: list[str] = []
    for p in ctx.paths:
        if p.lower() in whitelist or not os.path.isdir(p):
            continue
        realpath = str(Path(p).resolve())
        if realpath.startswith((real_cellar, str(cellar))):
            continue
        scripts.extend(str(Path(p) / c.name) for c in sorted(Path(p).glob("*-config")))

    if not scripts:
        return None

    return inject_file_list(
        scripts,
        advisory(
            """
            "config" scripts exist outside your system or managed directories.
            `./configure` scripts often look for *-config scripts to determine if
            software packages are installed, and what additional flags to use when
            compiling and linking.

            Having additional scripts in your PATH can confuse software installed by
            the package manager if the config script overrides a system or managed
            script of the same name. We found the following "config" scripts:
            """
        ),
    )


def check_for_external_cmd_name_conflict(ctx: RunContext) -> str | None:
    """External commands with the same name in more than one PATH directory."""
    cmd_prefix = ctx.policy.path.external_command_prefix
    candidates = unique(str(c) for p in ctx.paths for c in sorted(Path(p).glob(f"{cmd_prefix}*")))
    commands = [c for c in candidates if os.path.isfile(c) and os.access(c, os.X_OK)]

    by_name: dict[str, list[str]] = {}
    for cmd in commands:
        by_name.setdefault(os.path.basename(cmd), []).append(cmd)

    conflicts = {name: paths for name, paths in by_name.items() if len(paths) > 1}
    if not conflicts:
        return None

    message = "You have external commands with conflicting names.\n"
    for name, paths in conflicts.items():
        message += inject_file_list(paths, f"\nFound command `{name}` in the following places:\n")
    return message


def check_which_pkg_config(ctx: RunContext) -> str | None:
    """A ``pkg-config`` on PATH that is not the managed one."""
    binary = ctx.which("pkg-config")
    if binary is None:
        return None

    mono_config = Path(ctx.policy.path.system_bin_dir) / "pkg-config"
    if mono_config.exists() and "Mono.framework" in str(mono_config.resolve()):
        return advisory(
            f"""
            You have an unmanaged 'pkg-config' in your PATH:
              {mono_config} => {mono_config.resolve()}

            This was most likely created by the Mono installer. `./configure` may
            have problems finding installed packages using this other pkg-config.

            Mono no longer installs this file as of 3.0.4. You should
            `sudo rm {mono_config}` and upgrade to the latest version of Mono.
            """
        )

    if str(binary) != str(ctx.prefix / "bin" / "pkg-config"):
        return advisory(
            f"""
            You have an unmanaged 'pkg-config' in your PATH:
              {binary}

            `./configure` may have problems finding installed packages using
            this other pkg-config.
            """
        )
    return None


def _gnubin_dirs(ctx: RunContext, package: Package) -> set[str]:
    """The ``libexec/gnubin`` directories of *package*, through opt and its newest keg."""
    return {
        str(ctx.prefix / "opt" / package.name / "libexec" / "gnubin"),
        str(package.installed_prefixes[-1] / "libexec" / "gnubin"),
    }


def check_for_non_prefixed_coreutils(ctx: RunContext) -> str | None:
    coreutils = try_resolve(ctx, "coreutils")
    if coreutils is None or not coreutils.any_version_installed:
        return None
    if not _gnubin_dirs(ctx, coreutils).intersection(ctx.paths):
        return None

    return "Putting non-prefixed coreutils in your path can cause gmp builds to fail.\n"


def check_for_non_prefixed_findutils(ctx: RunContext) -> str | None:
    """findutils' unprefixed names on PATH, or built with ``--default-names``."""
    findutils = try_resolve(ctx, "findutils")
    if findutils is None or not findutils.any_version_installed:
        return None
    default_names = findutils.build_options.with_option("default-names")
    if not default_names and not _gnubin_dirs(ctx, findutils).intersection(ctx.paths):
        return None

    return "Putting non-prefixed findutils in your path can cause python builds to fail.\n"
