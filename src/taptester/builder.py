"""A small TAP producer in the spirit of Perl's Test::Builder.

Results go to ``output``; failure diagnostics go to ``failure_output``, or to
``todo_output`` for todo tests. All three are plain write sinks so that a
session controller can swap them out and back.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

from .errors import PlanError

logger = logging.getLogger(__name__)

__all__ = ["StdStream", "TapBuilder", "TapResult", "format_failure"]


class StdStream:
    """Writes to whatever ``sys.<name>`` is at the time of the write."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"StdStream({self.name!r})"

    def write(self, text: str) -> int:
        return getattr(sys, self.name).write(text)

    def flush(self) -> None:
        getattr(sys, self.name).flush()


@dataclass(frozen=True, slots=True)
class TapResult:
    ok: bool
    actual_ok: bool | None
    name: str | None = None
    todo: str | None = None


def format_failure(filename: str, line: int, *, todo: bool = False) -> str:
    kind = "Failed (TODO) test" if todo else "Failed test"
    return f"    {kind} ({filename} at line {line})"


class TapBuilder:
    def __init__(self, output=None, failure_output=None, todo_output=None) -> None:
        self.output = output if output is not None else StdStream("stdout")
        self.failure_output = (
            failure_output if failure_output is not None else StdStream("stderr")
        )
        self.todo_output = (
            todo_output if todo_output is not None else StdStream("stdout")
        )
        self.no_ending = False
        self.results: list[TapResult] = []
        self.expected_tests: int | None = None
        self._have_plan = False
        self._no_plan = False
        self._skip_all: str | None = None
        self._finished = False

    @property
    def current_test(self) -> int:
        return len(self.results)

    @current_test.setter
    def current_test(self, num: int) -> None:
        if num < len(self.results):
            del self.results[num:]
            return
        while len(self.results) < num:
            self.results.append(TapResult(ok=True, actual_ok=None))

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.ok)

    def plan(
        self,
        tests: int | None = None,
        *,
        skip_all: str | None = None,
        no_plan: bool = False,
    ) -> None:
        if self._have_plan:
            raise PlanError("You tried to plan twice!")
        if skip_all is not None:
            self._have_plan = True
            self._skip_all = skip_all
            self.expected_tests = 0
            self._print(self.output, f"1..0 # Skip {skip_all}\n")
            return
        if no_plan:
            self._have_plan = True
            self._no_plan = True
            return
        if tests is None:
            raise PlanError("You said to run a plan but didn't say how many tests.")
        if tests <= 0:
            raise PlanError(
                f"You said to run {tests} tests!  You've got to run something."
            )
        self._have_plan = True
        self.expected_tests = tests
        self._print(self.output, f"1..{tests}\n")

    def ok(
        self,
        test: object,
        name: str | None = None,
        *,
        todo: str | None = None,
        level: int = 1,
    ) -> bool:
        passed = bool(test)
        number = self.current_test + 1

        line = "ok" if passed else "not ok"
        line += f" {number}"
        if name:
            line += " - " + name.replace("#", "\\#")
        if todo is not None:
            line += f" # TODO {todo}"
        self.results.append(
            TapResult(
                ok=passed or todo is not None,
                actual_ok=passed,
                name=name,
                todo=todo,
            )
        )
        self._print(self.output, line + "\n")

        if not passed:
            caller = sys._getframe(level)
            message = format_failure(
                caller.f_code.co_filename, caller.f_lineno, todo=todo is not None
            )
            sink = self.todo_output if todo is not None else self.failure_output
            self._print_diag(sink, message)
        return passed

    def diag(self, *messages: object) -> None:
        self._print_diag(self.failure_output, *messages)

    def finish(self) -> int:
        """Emit the end-of-run summary once and return the failure count."""
        if self._finished:
            return self.failed
        self._finished = True
        if self.no_ending or self._skip_all is not None:
            return self.failed

        run = self.current_test
        if run == 0 and not self._have_plan:
            return 0
        if self._no_plan:
            self._print(self.output, f"1..{run}\n")
            self.expected_tests = run

        failed = self.failed
        if self.expected_tests is not None and run != self.expected_tests:
            s = "" if self.expected_tests == 1 else "s"
            self.diag(
                f"Looks like you planned {self.expected_tests} test{s} but ran {run}."
            )
        if failed:
            s = "" if failed == 1 else "s"
            self.diag(f"Looks like you failed {failed} test{s} of {run}.")
        logger.debug("[builder] finished run=%s failed=%s", run, failed)
        return failed

    def _print(self, sink, text: str) -> None:
        sink.write(text)

    def _print_diag(self, sink, *messages: object) -> None:
        text = "".join(str(message) for message in messages)
        if not text:
            return
        lines = text.split("\n")
        if text.endswith("\n"):
            lines.pop()
        self._print(sink, "".join(f"# {line}\n" for line in lines))
