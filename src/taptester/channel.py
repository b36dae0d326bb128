"""Capture channels: write sinks that remember what was expected of them."""

from __future__ import annotations

from typing import Protocol

from .highlight import Highlighter, divergence_index

__all__ = ["CaptureChannel", "OutputSink"]


class OutputSink(Protocol):
    def write(self, text: str) -> int | None: ...

    def flush(self) -> None: ...


class CaptureChannel:
    """Buffers everything written to it next to a declared expectation.

    ``actual`` only grows through :meth:`write` and ``expected`` only through
    :meth:`declare`; :meth:`reset` empties both.
    """

    __slots__ = ("label", "_actual", "_expected")

    def __init__(self, label: str) -> None:
        self.label = label
        self._actual: list[str] = []
        self._expected: list[str] = []

    def __repr__(self) -> str:
        return f"CaptureChannel({self.label!r})"

    @property
    def actual(self) -> str:
        return "".join(self._actual)

    @property
    def expected(self) -> str:
        return "".join(self._expected)

    def declare(self, *lines: str) -> None:
        for line in lines:
            self._expected.append(line if line.endswith("\n") else f"{line}\n")

    def write(self, text: str) -> int:
        self._actual.append(text)
        return len(text)

    def flush(self) -> None:
        return None

    def isatty(self) -> bool:
        return False

    def check(self) -> bool:
        return (self.actual or "") == (self.expected or "")

    def complaint(self, highlighter: Highlighter | None = None) -> str:
        got = self.actual
        wanted = self.expected
        if highlighter is not None:
            index = divergence_index(got, wanted)
            got = highlighter.highlight(got, index)
            wanted = highlighter.highlight(wanted, index)
        return f"{self.label} is '{got}' not '{wanted}' as expected"

    def reset(self) -> None:
        self._actual.clear()
        self._expected.clear()
