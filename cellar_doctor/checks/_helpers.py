# Copyright 2026 Cisco Systems, Inc. and its affiliates
# SPDX-License-Identifier: Apache-2.0

"""Shared helper utilities for the check modules."""

from __future__ import annotations

import textwrap
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from cellar_doctor.core.exceptions import PackageUnavailableError

if TYPE_CHECKING:
    from cellar_doctor.core.context import RunContext
    from cellar_doctor.core.models import Package

# Unmanaged software historically installed here regardless of the prefix
LEGACY_PREFIX = Path("/usr/local")


def advisory(text: str) -> str:
    """Dedent a triple-quoted advisory and make sure it ends with a newline."""
    text = textwrap.dedent(text)
    if text.startswith("\n"):
        text = text[1:]
    return text if text.endswith("\n") else text + "\n"


def inject_file_list(items: Iterable[object], header: str) -> str:
    """Append one indented line per item to *header*."""
    lines = [header.rstrip("\n")]
    lines.extend(f"    {item}" for item in items)
    return "\n".join(lines) + "\n"


def unique(items: Iterable[str]) -> list[str]:
    """Drop repeats, keeping first occurrences in order."""
    seen: set[str] = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def find_relative_paths(ctx: RunContext, *relative_paths: str) -> list[Path]:
    """Existing files at *relative_paths* under the prefix or ``/usr/local``."""
    roots = unique([str(ctx.prefix), str(LEGACY_PREFIX)])
    found = []
    for root in roots:
        for rel in relative_paths:
            candidate = Path(root) / rel
            if candidate.exists():
                found.append(candidate)
    return found


def shell_profile(environ: Mapping[str, str]) -> str:
    """The startup file a user of ``$SHELL`` would edit."""
    shell = Path(environ.get("SHELL", "")).name
    if shell == "zsh":
        return "~/.zshrc"
    if shell == "bash":
        return "~/.bash_profile"
    if shell == "fish":
        return "~/.config/fish/config.fish"
    return "~/.profile"


def try_resolve(ctx: RunContext, name: str) -> Package | None:
    """Resolve *name* through the run's provider, or ``None`` if unknown."""
    try:
        return ctx.provider.resolve(name)
    except PackageUnavailableError:
        return None


def is_linked(ctx: RunContext, name: str) -> bool:
    """Whether the package *name* is linked into the prefix."""
    return (ctx.config.linked_kegs / name).is_dir()
