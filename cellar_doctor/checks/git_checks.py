# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Version-control checks on the package manager's repository.

Every ``git`` invocation goes through :meth:`RunContext.run` and is bounded
by the run's external timeout.  A ``git`` that exits non-zero is treated as
"no answer"; a ``git`` that hangs raises and is reported by the runner.
"""

from __future__ import annotations

import logging
import re
import time
from typing import TYPE_CHECKING

from packaging.version import InvalidVersion, Version

from cellar_doctor.config.constants import DoctorConstants
from cellar_doctor.core.exceptions import ExternalToolUnavailable

from ._helpers import advisory, try_resolve

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext

logger = logging.getLogger(__name__)

_GIT_VERSION_RE = re.compile(r"git version (\d+(?:\.\d+)*)")
_SHA_RE = re.compile(r"^([a-f0-9]{40})", re.MULTILINE)

# Cached ``git --version`` output; an empty string means git is unusable
_GIT_VERSION_KEY = "git.version"


def git_version(ctx: RunContext) -> str | None:
    """The installed git version, or ``None`` when git is not usable."""
    cached = ctx.get(_GIT_VERSION_KEY)
    if cached is not None:
        return cached or None

    version = ""
    if ctx.which("git") is not None:
        try:
            match = _GIT_VERSION_RE.search(ctx.run(["git", "--version"]))
        except ExternalToolUnavailable as e:
            logger.debug("git is not usable: %s", e)
            match = None
        if match:
            version = match.group(1)
    ctx.set(_GIT_VERSION_KEY, version)
    return version or None


def git_available(ctx: RunContext) -> bool:
    return git_version(ctx) is not None


def _git_output(ctx: RunContext, *args: str) -> str | None:
    """Stripped output of ``git <args>`` in the repository, or ``None`` if git failed."""
    try:
        return ctx.run(["git", *args], cwd=ctx.config.repository).strip()
    except ExternalToolUnavailable:
        return None


def _has_git_checkout(ctx: RunContext) -> bool:
    return (ctx.config.repository / ".git").is_dir()


def check_for_git(ctx: RunContext) -> str | None:
    """git missing from PATH."""
    if git_available(ctx):
        return None

    return advisory(
        f"""
        Git could not be found in your PATH.
        The package manager uses Git for several internal functions, and some
        packages use Git checkouts instead of stable tarballs. You may want to
        install Git:
          {DoctorConstants.MANAGER_COMMAND} install git
        """
    )


def check_git_version(ctx: RunContext) -> str | None:
    """A git too old to talk HTTPS to GitHub."""
    current = git_version(ctx)
    if current is None:
        return None

    minimum = ctx.policy.version_control.minimum_git_version
    try:
        if Version(current) >= Version(minimum):
            return None
    except InvalidVersion:
        logger.debug("Cannot compare git version %r with %r", current, minimum)
        return None

    git = try_resolve(ctx, "git")
    action = "upgrade" if git is not None and git.any_version_installed else "install"
    return advisory(
        f"""
        An outdated version ({current}) of Git was detected in your PATH.
        Git {minimum} or newer is required to perform checkouts over HTTPS from GitHub.
        Please upgrade:
          {DoctorConstants.MANAGER_COMMAND} {action} git
        """
    )


def check_git_newline_settings(ctx: RunContext) -> str | None:
    """``core.autocrlf`` set to ``true``."""
    if not git_available(ctx):
        return None

    autocrlf = _git_output(ctx, "config", "--get", "core.autocrlf")
    if autocrlf != "true":
        return None

    return advisory(
        f"""
        Suspicious Git newline settings found.

        The detected Git newline settings will cause checkout problems:
          core.autocrlf = {autocrlf}

        If you are not routinely dealing with Windows-based projects,
        consider removing these by running:
          git config --global core.autocrlf input
        """
    )


def check_git_origin(ctx: RunContext) -> str | None:
    """A missing or non-canonical ``origin`` remote."""
    if not git_available(ctx) or not _has_git_checkout(ctx):
        return None

    vc = ctx.policy.version_control
    origin = _git_output(ctx, "config", "--get", "remote.origin.url")

    if not origin:
        return advisory(
            f"""
            Missing git origin remote.

            Without a correctly configured origin, the package manager won't update
            properly. You can solve this by adding the remote:
              cd {ctx.config.repository}
              git remote add origin {vc.canonical_origin}
            """
        )

    if re.search(vc.origin_pattern, origin):
        return None

    return advisory(
        f"""
        Suspicious git origin remote found.

        With a non-standard origin, the package manager won't pull updates from
        the main repository. The current git origin is:
          {origin}

        Unless you have compelling reasons, consider setting the
        origin remote to point at the main repository, located at:
          {vc.canonical_origin}
        """
    )


def check_git_status(ctx: RunContext) -> str | None:
    """Uncommitted changes to the package manager's own code."""
    if not git_available(ctx):
        return None

    status = _git_output(ctx, "status", "--untracked-files=all", "--porcelain", "--", "Library/")
    if not status:
        return None

    return advisory(
        f"""
        You have uncommitted modifications to the package manager
        If this is a surprise to you, then you should stash these modifications.
        Stashing returns the repository to a pristine state but can be undone
        should you later need to do so for some reason.
          cd {ctx.config.library} && git stash && git clean -d -f
        """
    )


def check_for_outdated_installation(ctx: RunContext) -> str | None:
    """No update for longer than the configured threshold."""
    if not git_available(ctx):
        return None

    vc = ctx.policy.version_control
    checkout = _has_git_checkout(ctx)
    if checkout:
        raw = _git_output(ctx, "log", "-1", "--format=%ct", "HEAD")
        try:
            timestamp = int(raw or 0)
        except ValueError:
            timestamp = 0
    elif ctx.config.library.exists():
        timestamp = int(ctx.config.library.stat().st_mtime)
    else:
        return None

    if time.time() - timestamp <= vc.outdated_after_hours * 60 * 60:
        return None

    if checkout:
        branch = vc.default_branch
        local = _git_output(ctx, "rev-parse", "-q", "--verify", f"refs/remotes/origin/{branch}")
        remote_out = _git_output(ctx, "ls-remote", "origin", f"refs/heads/{branch}") or ""
        remote = _SHA_RE.search(remote_out)
        if remote is None or local == remote.group(1):
            return None

    return advisory(
        f"""
        Your installation is outdated.
        You haven't updated for at least {vc.outdated_after_hours} hours. This is a long time!
        To update, run `{DoctorConstants.MANAGER_COMMAND} update`.
        """
    )
