# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Checks for Python installations that interfere with builds."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from cellar_doctor.core.exceptions import ExternalToolUnavailable

from ._helpers import advisory

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext

LIBRARY_PYTHON = Path("/Library/Frameworks/Python.framework")

_PYTHON_MAJOR_RE = re.compile(r"Python (\d+)\.")

PYTHON_VERSION_SCRIPT = "import sys; print('%d.%d' % sys.version_info[:2])"
USER_SITE_SCRIPT = "import site; print(site.getusersitepackages())"


def check_for_enthought_python(ctx: RunContext) -> str | None:
    if ctx.which("enpkg") is None:
        return None

    return advisory(
        """
        Enthought Python was found in your PATH.
        This can cause build problems, as this software installs its own
        copies of iconv and libxml2 into directories that are picked up by
        other build systems.
        """
    )


def check_for_library_python(ctx: RunContext) -> str | None:
    if not LIBRARY_PYTHON.exists():
        return None

    return advisory(
        f"""
        Python is installed at {LIBRARY_PYTHON}

        Only the system-provided Python or a managed Python are supported for
        building. In particular, Pythons installed to /Library can interfere
        with other software installs.
        """
    )


def check_for_bad_python_symlink(ctx: RunContext) -> str | None:
    """``python`` pointing at something other than Python 2."""
    python = ctx.which("python")
    if python is None:
        return None

    try:
        output = ctx.run([str(python), "-V"], merge_stderr=True)
    except ExternalToolUnavailable:
        return None
    match = _PYTHON_MAJOR_RE.search(output)
    # No version at all is a different problem
    if match is None or match.group(1) == "2":
        return None

    return advisory(
        f"""
        python is symlinked to python{match.group(1)}
        This will confuse build scripts and in general lead to subtle breakage.
        """
    )


def check_for_anaconda(ctx: RunContext) -> str | None:
    """The ``python`` on PATH living inside an Anaconda installation."""
    anaconda = ctx.which("anaconda")
    python = ctx.which("python")
    if anaconda is None or python is None:
        return None

    try:
        executable = ctx.run([str(python), "-c", "import sys; sys.stdout.write(sys.executable)"]).strip()
    except ExternalToolUnavailable:
        return None
    if not executable:
        return None

    if Path(executable).resolve().parent != anaconda.resolve().parent:
        return None

    return advisory(
        """
        Anaconda is known to frequently break builds, including Vim and
        MacVim, due to bundling many duplicates of system and managed tools.

        If you encounter a build failure please temporarily remove Anaconda
        from your PATH and attempt the build again prior to reporting the
        failure. Thanks!
        """
    )


def managed_site_packages(prefix: Path, version: str) -> Path:
    """The site-packages directory managed packages install into for Python *version*."""
    return prefix / "lib" / f"python{version}" / "site-packages"


def in_sys_path_script(directory: Path) -> str:
    """A one-liner that exits non-zero unless *directory* is on ``sys.path``."""
    return (
        "import os, sys; "
        f"[os.path.realpath(p) for p in sys.path].index(os.path.realpath({str(directory)!r}))"
    )


def _python_succeeds(ctx: RunContext, python: Path, script: str) -> bool:
    try:
        ctx.run([str(python), "-c", script])
    except ExternalToolUnavailable:
        return False
    return True


def site_dir_script(directory: Path) -> str:
    """A one-liner that exits non-zero unless *directory* is a site directory.

    A site directory is one of ``site.getsitepackages()`` or the user site, or
    one named by a ``.pth`` file in those; only site directories have their
    own ``.pth`` files executed.
    """
    return (
        "import glob, os, site, sys; "
        f"d = {str(directory)!r}; "
        "known = [os.path.realpath(p) for p in site.getsitepackages() + [site.getusersitepackages()]]; "
        "pth = [f for k in known for f in glob.glob(os.path.join(k, '*.pth'))]; "
        "sys.exit(0 if os.path.realpath(d) in known or any(d in open(f).read() for f in pth) else 1)"
    )


def check_for_pth_support(ctx: RunContext) -> str | None:
    """The managed site-packages is on ``sys.path`` but its ``.pth`` files are ignored."""
    python = ctx.which("python")
    if python is None:
        return None

    try:
        version = ctx.run([str(python), "-c", PYTHON_VERSION_SCRIPT]).strip()
    except ExternalToolUnavailable:
        return None
    site_packages = managed_site_packages(ctx.prefix, version)
    if not version or not site_packages.is_dir():
        return None
    if _python_succeeds(ctx, python, site_dir_script(site_packages)):
        return None
    if not _python_succeeds(ctx, python, in_sys_path_script(site_packages)):
        return None

    try:
        user_site = ctx.run([str(python), "-c", USER_SITE_SCRIPT]).strip()
    except ExternalToolUnavailable:
        user_site = ""
    user_site = user_site or "$(python -m site --user-site)"

    return advisory(
        f"""
        Your default Python does not recognize the managed site-packages
        directory as a special site-packages directory, which means that .pth
        files will not be followed. This means you will not be able to import
        some modules after installing them, like wxpython. To fix this for the
        current user, you can run:
          mkdir -p {user_site}
          echo 'import site; site.addsitedir("{site_packages}")' >> {user_site}/cellar.pth
        """
    )
