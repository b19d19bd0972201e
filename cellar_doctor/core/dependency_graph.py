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
Missing-dependency analysis over installed packages.

The walk is split in two so each half can be tested on its own:

* :func:`prune_decision` is a pure policy – given an edge and the build
  options of the package that declares it, it answers
  :attr:`Traversal.DESCEND` or :attr:`Traversal.SKIP`.
* :func:`walk_dependencies` is a generic depth-first walker that consults a
  policy at every edge and never visits a skipped subtree.

:class:`DependencyGraphAnalyzer` composes the two against a
:class:`~cellar_doctor.core.metadata.PackageMetadataProvider` and keeps the
references that have no installed version.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum

from .exceptions import PackageUnavailableError
from .metadata import PackageMetadataProvider
from .models import BuildOptions, DependencyEdge, DependencyKind, Package

logger = logging.getLogger(__name__)


class Traversal(str, Enum):
    """What the walker does with an edge."""

    DESCEND = "descend"
    SKIP = "skip"


PrunePolicy = Callable[[DependencyEdge, BuildOptions], Traversal]


def prune_decision(edge: DependencyEdge, build_options: BuildOptions) -> Traversal:
    """Decide whether *edge* is relevant at runtime.

    * ``build`` edges are never followed.
    * ``optional`` and ``recommended`` edges are followed only when the
      dependent's build options selected them.
    * ``required`` edges are always followed.
    """
    kind = edge.kind
    if kind is DependencyKind.REQUIRED:
        return Traversal.DESCEND
    if kind is DependencyKind.BUILD:
        return Traversal.SKIP
    if kind is DependencyKind.OPTIONAL or kind is DependencyKind.RECOMMENDED:
        return Traversal.DESCEND if build_options.selects(edge) else Traversal.SKIP
    raise ValueError(f"Unhandled dependency kind: {kind!r}")


def walk_dependencies(
    root: Package,
    provider: PackageMetadataProvider,
    policy: PrunePolicy = prune_decision,
) -> list[DependencyEdge]:
    """Return the edges reachable from *root* that *policy* lets through.

    Edges are returned in depth-first discovery order, one per dependency
    name.  A name is expanded at most once, which also makes dependency
    cycles terminate.  References that cannot be resolved are kept (they
    are what callers look for) but cannot be expanded further.
    """
    reached: list[DependencyEdge] = []
    visited: set[str] = {root.name}

    def _visit(dependent: Package) -> None:
        options = provider.build_options(dependent)
        for edge in dependent.dependencies:
            if policy(edge, options) is Traversal.SKIP:
                logger.debug("Pruned %s -> %s (%s)", dependent.name, edge.name, edge.kind.value)
                continue
            if edge.name in visited:
                continue
            visited.add(edge.name)
            reached.append(edge)
            try:
                child = provider.resolve(edge.name)
            except PackageUnavailableError:
                continue
            visited.add(child.name)
            _visit(child)

    _visit(root)
    return reached


class DependencyGraphAnalyzer:
    """Finds declared dependencies of installed packages that are not installed.

    Read-only over package metadata.  Traversal results are memoized per
    root package for the lifetime of the analyzer, so one analyzer should
    be scoped to a single diagnostic run.
    """

    def __init__(self, provider: PackageMetadataProvider, policy: PrunePolicy = prune_decision):
        self.provider = provider
        self.policy = policy
        self._closures: dict[str, list[DependencyEdge]] = {}

    def runtime_dependencies(self, package: Package) -> list[DependencyEdge]:
        """The pruned transitive dependency edges of *package*."""
        if package.name not in self._closures:
            self._closures[package.name] = walk_dependencies(package, self.provider, self.policy)
        return self._closures[package.name]

    def missing_for(self, package: Package) -> list[str]:
        """Names of the runtime dependencies of *package* with no installed version.

        An unresolvable name counts as missing.
        """
        missing: list[str] = []
        for edge in self.runtime_dependencies(package):
            try:
                dep = self.provider.resolve(edge.name)
            except PackageUnavailableError:
                logger.debug("Unresolved dependency %s of %s", edge.name, package.name)
                missing.append(edge.name)
                continue
            if not dep.any_version_installed:
                missing.append(dep.full_name or dep.name)
        return missing

    def missing_dependencies(self, packages: Iterable[Package] | None = None) -> dict[str, list[str]]:
        """Map each package's full name to its missing dependencies.

        Packages with nothing missing are omitted.

        Args:
            packages: Packages to analyze.  Defaults to every installed package.
        """
        if packages is None:
            packages = self.provider.installed_packages()

        result: dict[str, list[str]] = {}
        for pkg in packages:
            missing = self.missing_for(pkg)
            if missing:
                result[pkg.full_name or pkg.name] = missing
        return result


def compute_missing_dependencies(
    packages: Iterable[Package],
    provider: PackageMetadataProvider,
) -> dict[str, list[str]]:
    """Convenience wrapper around :meth:`DependencyGraphAnalyzer.missing_dependencies`."""
    return DependencyGraphAnalyzer(provider).missing_dependencies(packages)
