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
Check orchestration.

Checks run strictly one after another, in registration order, against a
single :class:`~cellar_doctor.core.context.RunContext`.  Some checks write
context fields that later checks read, so the order is part of the contract:
each :class:`CheckUnit` declares the fields it ``writes`` and ``reads`` and
the runner refuses an order in which a reader comes before its writer.

A check that raises is isolated: the exception is logged, turned into a
generic advisory naming the check, and the run moves on.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .context import RunContext
from .exceptions import CheckExecutionError
from .models import CheckResult, DiagnosticReport

logger = logging.getLogger(__name__)

CheckFunction = Callable[[RunContext], "str | None"]


@dataclass(frozen=True)
class CheckUnit:
    """One advisory check and its declared context coupling."""

    name: str
    func: CheckFunction
    description: str = ""
    category: str = "general"
    writes: tuple[str, ...] = ()  # RunContext fields this check sets
    reads: tuple[str, ...] = ()  # RunContext fields set by an earlier check

    def run(self, context: RunContext) -> str | None:
        return self.func(context)


def check_unit(func: CheckFunction, **kwargs) -> CheckUnit:
    """Build a :class:`CheckUnit` named after *func*, describing it by its docstring."""
    doc = (func.__doc__ or "").strip().splitlines()
    kwargs.setdefault("description", doc[0] if doc else "")
    return CheckUnit(name=func.__name__, func=func, **kwargs)


def failure_message(error: CheckExecutionError) -> str:
    """Generic advisory for a check that could not complete."""
    return f"The check '{error.check_name}' could not be completed: {error}\n"


class CheckRunner:
    """Runs a fixed, ordered list of checks and collects their advisories."""

    def __init__(self, checks: Sequence[CheckUnit]):
        """
        Initialize runner with checks.

        Args:
            checks: Checks in the order they must run.

        Raises:
            ValueError: If two checks share a name, or a check reads a
                context field before the check that writes it.
        """
        self.checks: list[CheckUnit] = list(checks)
        self._validate()

    def _validate(self) -> None:
        names: set[str] = set()
        writers: dict[str, int] = {}
        for index, check in enumerate(self.checks):
            if check.name in names:
                raise ValueError(f"Duplicate check name: '{check.name}'")
            names.add(check.name)
            for fld in check.writes:
                writers.setdefault(fld, index)

        for index, check in enumerate(self.checks):
            for fld in check.reads:
                if fld in writers and writers[fld] > index:
                    writer = self.checks[writers[fld]].name
                    raise ValueError(
                        f"Check '{check.name}' reads '{fld}' before '{writer}' writes it"
                    )

    @property
    def check_names(self) -> list[str]:
        return [c.name for c in self.checks]

    def run_all(self, context: RunContext, *, include_clean: bool = False) -> list[CheckResult]:
        """Execute every check in order.

        Args:
            context: The run's shared context.
            include_clean: Also return results for checks that found nothing.

        Returns:
            Results in registration order.  By default only checks that
            produced an advisory (or failed) appear; an empty list means a
            clean bill of health.
        """
        results: list[CheckResult] = []
        for position, check in enumerate(self.checks):
            result = self._run_one(check, position, context)
            if result.has_issue or include_clean:
                results.append(result)
        return results

    def run(self, context: RunContext) -> DiagnosticReport:
        """Execute every check and wrap the advisories in a report."""
        start = time.time()
        results = self.run_all(context)
        return DiagnosticReport(
            results=results,
            checks_run=self.check_names,
            duration_seconds=time.time() - start,
        )

    def _run_one(self, check: CheckUnit, position: int, context: RunContext) -> CheckResult:
        logger.debug("Running check %s", check.name)
        try:
            message = check.run(context)
            if message is not None and not isinstance(message, str):
                raise TypeError(f"expected an advisory string or None, got {type(message).__name__}")
        except Exception as e:
            error = CheckExecutionError(check.name, e)
            logger.warning("Check %s failed: %s", check.name, error)
            logger.debug("Check %s traceback", check.name, exc_info=True)
            return CheckResult(check=check.name, message=failure_message(error), position=position, failed=True)

        if message is not None and not message.strip():
            message = None
        return CheckResult(check=check.name, message=message, position=position)


def run_diagnostics(checks: Iterable[CheckUnit], context: RunContext) -> list[str]:
    """Run *checks* in order and return their advisory messages."""
    results = CheckRunner(list(checks)).run_all(context)
    return [r.message for r in results if r.message is not None]
