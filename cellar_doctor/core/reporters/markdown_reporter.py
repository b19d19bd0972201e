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
Markdown format reporter for diagnostic runs.
"""

from ...core.models import CheckResult, DiagnosticReport


class MarkdownReporter:
    """Generates Markdown format reports."""

    def __init__(self, detailed: bool = True):
        """
        Initialize Markdown reporter.

        Args:
            detailed: If True, list every check that ran
        """
        self.detailed = detailed

    def generate_report(self, report: DiagnosticReport) -> str:
        """
        Generate Markdown report.

        Args:
            report: Outcome of one diagnostic run

        Returns:
            Markdown string
        """
        lines = []

        # Header
        lines.append("# Cellar Doctor Report")
        lines.append("")
        lines.append(f"**Status:** {'[OK] READY TO BREW' if report.is_clean else '[WARNING] ISSUES FOUND'}")
        lines.append(f"**Checks Run:** {len(report.checks_run)}")
        lines.append(f"**Duration:** {report.duration_seconds:.2f}s")
        lines.append(f"**Timestamp:** {report.timestamp.isoformat()}")
        lines.append("")

        # Summary
        lines.append("## Summary")
        lines.append("")
        lines.append(f"- **Advisories:** {len(report.results)}")
        lines.append(f"- **Checks that could not complete:** {len(report.failures)}")
        lines.append("")

        if report.results:
            lines.append("## Advisories")
            lines.append("")
            for result in report.results:
                lines.extend(self._format_result(result))
                lines.append("")
        else:
            lines.append("## [OK] No Issues Found")
            lines.append("")
            lines.append("Your system is ready to brew.")
            lines.append("")

        if self.detailed:
            lines.append("## Checks")
            lines.append("")
            lines.append("The following checks were run, in order:")
            lines.append("")
            for name in report.checks_run:
                lines.append(f"- {name}")
            lines.append("")

        return "\n".join(lines)

    def _format_result(self, result: CheckResult) -> list[str]:
        """Format one advisory."""
        tag = " (could not complete)" if result.failed else ""
        lines = [f"### {result.position + 1}. `{result.check}`{tag}", ""]
        lines.append("```")
        lines.extend((result.message or "").rstrip("\n").splitlines())
        lines.append("```")
        return lines
