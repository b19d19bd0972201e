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
Whitelist-filtered directory scan for files left behind by unmanaged installs.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


def _glob_relative(root: Path, pattern: str) -> set[Path]:
    # Dotfiles only match a pattern that names them explicitly, as in the shell
    dot_ok = any(part.startswith(".") for part in Path(pattern).parts)
    matches = (p.relative_to(root) for p in root.glob(pattern))
    return {rel for rel in matches if dot_ok or not any(part.startswith(".") for part in rel.parts)}


def scan_stray_files(root: str | Path, pattern: str, whitelist: Iterable[str] = ()) -> list[Path]:
    """Return regular files under *root* matching *pattern* but no whitelist entry.

    Both *pattern* and the whitelist entries are glob patterns relative to
    *root* and may use ``**`` for recursive matches.  Symbolic links are
    never reported, and neither are hidden files or anything under a hidden
    directory unless *pattern* names a dot component itself.  A missing
    *root* yields an empty list.

    Returns:
        Absolute paths, sorted.
    """
    root = Path(root)
    if not root.is_dir():
        return []

    allowed: set[Path] = set()
    for white in whitelist:
        allowed |= _glob_relative(root, white)

    strays = []
    for rel in _glob_relative(root, pattern):
        if rel in allowed:
            continue
        full = root / rel
        if full.is_symlink() or not full.is_file():
            continue
        strays.append(full)
    return sorted(strays)
