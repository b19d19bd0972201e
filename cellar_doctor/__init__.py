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
Cellar Doctor - Diagnose problems with a package manager installation.
"""

try:
    from ._version import __version__
except ImportError:
    __version__ = "0.0.0+unknown"

__author__ = "Cisco Systems, Inc."


def __getattr__(name: str):
    """Lazy-load public API symbols on first access.

    Importing the package (e.g. ``python -m cellar_doctor.cli.cli``) stays
    cheap; the check modules and their collaborators load on first use.
    """
    _lazy_map = {
        "DoctorConfig": (".config.config", "DoctorConfig"),
        "DoctorConstants": (".config.constants", "DoctorConstants"),
        "DoctorPolicy": (".core.doctor_policy", "DoctorPolicy"),
        "RunContext": (".core.context", "RunContext"),
        "CheckRunner": (".core.runner", "CheckRunner"),
        "CheckUnit": (".core.runner", "CheckUnit"),
        "run_diagnostics": (".core.runner", "run_diagnostics"),
        "build_checks": (".core.check_factory", "build_checks"),
        "DependencyGraphAnalyzer": (".core.dependency_graph", "DependencyGraphAnalyzer"),
        "compute_missing_dependencies": (".core.dependency_graph", "compute_missing_dependencies"),
        "VolumeResolver": (".core.volumes", "VolumeResolver"),
        "scan_stray_files": (".core.stray_files", "scan_stray_files"),
        "Package": (".core.models", "Package"),
        "DependencyEdge": (".core.models", "DependencyEdge"),
        "DependencyKind": (".core.models", "DependencyKind"),
        "DiagnosticReport": (".core.models", "DiagnosticReport"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is only called once per symbol
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "CheckRunner",
    "CheckUnit",
    "run_diagnostics",
    "build_checks",
    "RunContext",
    "DependencyGraphAnalyzer",
    "compute_missing_dependencies",
    "VolumeResolver",
    "scan_stray_files",
    "Package",
    "DependencyEdge",
    "DependencyKind",
    "DiagnosticReport",
    "DoctorConfig",
    "DoctorConstants",
    "DoctorPolicy",
]
