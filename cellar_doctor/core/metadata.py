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
Package metadata providers.

The diagnostic core only reads package metadata through the narrow
:class:`PackageMetadataProvider` interface:

* ``installed_packages()`` – every package with a rack in the Cellar
* ``resolve(name)`` – the package a dependency name refers to
* ``build_options(package)`` – the options the package was built with

Two providers ship with the package.  :class:`InMemoryMetadataProvider` wraps
a list of :class:`Package` objects (tests, embedding callers), and
:class:`CellarMetadataProvider` reads an on-disk Cellar where every rack
directory holds one directory per installed version, each carrying an
``INSTALL_RECEIPT.json``::

    {
        "used_options": ["with-foo"],
        "keg_only": false,
        "dependencies": [{"name": "bar", "kind": "required"}]
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

from packaging.version import InvalidVersion, Version

from ..config.constants import DoctorConstants
from .exceptions import PackageUnavailableError
from .models import BuildOptions, DependencyEdge, Package

logger = logging.getLogger(__name__)


def _version_key(prefix: Path) -> tuple[int, Version, str]:
    """Order keg directories by version; names that do not parse sort first, by name."""
    try:
        return (1, Version(prefix.name), prefix.name)
    except InvalidVersion:
        return (0, Version("0"), prefix.name)


class PackageMetadataProvider(Protocol):
    """Read-only view of installed-package metadata."""

    def installed_packages(self) -> list[Package]:
        """Return every package that has a rack, in name order."""
        ...

    def resolve(self, name: str) -> Package:
        """Return the package *name* refers to.

        Raises:
            PackageUnavailableError: If no package is known by that name.
        """
        ...

    def build_options(self, package: Package) -> BuildOptions:
        """Return the build options recorded for *package*."""
        ...


class InMemoryMetadataProvider:
    """Provider backed by a fixed collection of packages."""

    def __init__(self, packages: Iterable[Package] = ()):
        self._packages: dict[str, Package] = {}
        for pkg in packages:
            self.add(pkg)

    def add(self, package: Package) -> None:
        """Register *package* under both its name and full name."""
        self._packages[package.name] = package
        if package.full_name and package.full_name != package.name:
            self._packages[package.full_name] = package

    def installed_packages(self) -> list[Package]:
        seen: dict[str, Package] = {}
        for pkg in self._packages.values():
            if pkg.any_version_installed:
                seen.setdefault(pkg.name, pkg)
        return [seen[name] for name in sorted(seen)]

    def resolve(self, name: str) -> Package:
        try:
            return self._packages[name]
        except KeyError:
            raise PackageUnavailableError(name) from None

    def build_options(self, package: Package) -> BuildOptions:
        return package.build_options


class CellarMetadataProvider:
    """Provider that reads racks and install receipts from a Cellar directory.

    A dependency name without a rack raises :class:`PackageUnavailableError`;
    a rack without version directories resolves to an uninstalled package.
    Racks are read lazily and cached for the lifetime of the provider.
    """

    def __init__(self, cellar: str | Path):
        self.cellar = Path(cellar)
        self._cache: dict[str, Package] = {}

    def racks(self) -> list[Path]:
        """Every rack directory in the Cellar, sorted by name."""
        if not self.cellar.is_dir():
            return []
        return sorted(p for p in self.cellar.iterdir() if p.is_dir() and not p.name.startswith("."))

    def installed_packages(self) -> list[Package]:
        packages = [self._load_rack(rack) for rack in self.racks()]
        return [pkg for pkg in packages if pkg.any_version_installed]

    def resolve(self, name: str) -> Package:
        rack = self.cellar / name
        if rack.is_dir():
            return self._load_rack(rack)
        if "/" in name:
            # Tap-qualified names ("user/tap/foo") are racked by their short name
            short = name.rsplit("/", 1)[-1]
            if (self.cellar / short).is_dir():
                return self._load_rack(self.cellar / short)
        raise PackageUnavailableError(name)

    def build_options(self, package: Package) -> BuildOptions:
        return package.build_options

    # ------------------------------------------------------------------
    # Rack parsing
    # ------------------------------------------------------------------

    def _load_rack(self, rack: Path) -> Package:
        if rack.name in self._cache:
            return self._cache[rack.name]

        prefixes = sorted((p for p in rack.iterdir() if p.is_dir()), key=_version_key)
        receipt = self._read_receipt(prefixes[-1]) if prefixes else {}

        package = Package(
            name=rack.name,
            full_name=receipt.get("full_name") or rack.name,
            installed_prefixes=tuple(prefixes),
            keg_only=bool(receipt.get("keg_only", False)),
            dependencies=tuple(self._parse_dependencies(rack.name, receipt.get("dependencies", []))),
            build_options=BuildOptions(frozenset(receipt.get("used_options", []))),
        )
        self._cache[rack.name] = package
        return package

    @staticmethod
    def _read_receipt(prefix: Path) -> dict[str, Any]:
        receipt_path = prefix / DoctorConstants.INSTALL_RECEIPT
        if not receipt_path.is_file():
            logger.debug("No install receipt at %s", receipt_path)
            return {}
        try:
            with open(receipt_path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.debug("Unreadable install receipt %s: %s", receipt_path, e)
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _parse_dependencies(dependent: str, raw: list[Any]) -> list[DependencyEdge]:
        edges: list[DependencyEdge] = []
        for entry in raw:
            if isinstance(entry, str):
                edges.append(DependencyEdge(dependent=dependent, name=entry))
                continue
            if not isinstance(entry, dict) or "name" not in entry:
                logger.debug("Skipping malformed dependency entry for %s: %r", dependent, entry)
                continue
            try:
                edges.append(DependencyEdge(dependent=dependent, name=entry["name"], kind=entry.get("kind", "required")))
            except ValueError:
                logger.debug("Unknown dependency kind for %s -> %s: %r", dependent, entry["name"], entry.get("kind"))
        return edges
