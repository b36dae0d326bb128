"""Episode lifecycle: redirect a host runner into capture channels and back."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol

from .channel import CaptureChannel, OutputSink
from .config import TaptesterSettings, load_settings
from .errors import EpisodeActiveError, NotTestingError
from .highlight import Highlighter, select_highlighter

logger = logging.getLogger(__name__)

__all__ = ["HostRunner", "SessionController"]


class HostRunner(Protocol):
    output: OutputSink
    failure_output: OutputSink
    todo_output: OutputSink
    current_test: int
    no_ending: bool
    results: list

    def ok(self, test: Any, name: str | None = None, *, level: int = 1) -> bool: ...

    def diag(self, *messages: object) -> None: ...


@dataclass(frozen=True, slots=True)
class _SavedState:
    output: OutputSink
    failure_output: OutputSink
    todo_output: OutputSink
    current_test: int
    results: tuple


class SessionController:
    """Owns the STDOUT/STDERR capture channels for one host runner.

    The first declaration of an episode swaps the host's sinks for the
    channels; :meth:`finalize` swaps them back and reports whether what was
    captured matches what was declared.
    """

    def __init__(
        self,
        host: HostRunner,
        *,
        settings: TaptesterSettings | None = None,
        highlighter: Highlighter | None = None,
    ) -> None:
        if settings is None:
            settings = load_settings()
        self.host = host
        self.out = CaptureChannel("STDOUT")
        self.err = CaptureChannel("STDERR")
        self.color = settings.color
        self.highlighter = (
            highlighter if highlighter is not None else select_highlighter(settings)
        )
        self._saved: _SavedState | None = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def ensure_started(self) -> None:
        if self._saved is not None:
            return

        host = self.host
        if isinstance(host.output, CaptureChannel):
            raise EpisodeActiveError(
                "Output is already being captured; finish that episode first."
            )

        saved = _SavedState(
            output=host.output,
            failure_output=host.failure_output,
            todo_output=host.todo_output,
            current_test=host.current_test,
            results=tuple(host.results),
        )

        host.output = self.out
        host.failure_output = self.err
        host.todo_output = self.err

        self.out.reset()
        self.err.reset()

        host.current_test = 0
        host.no_ending = True
        self._saved = saved
        logger.debug("[episode] started at test %s", saved.current_test)

    def expect_out(self, *lines: str) -> None:
        self.ensure_started()
        self.out.declare(*lines)

    def expect_err(self, *lines: str) -> None:
        self.ensure_started()
        self.err.declare(*lines)

    def finalize(self, name: str | None = None, *, level: int = 1) -> None:
        if self._saved is None:
            raise NotTestingError()

        self._restore()

        out_ok = self.out.check()
        err_ok = self.err.check()
        passed = out_ok and err_ok
        logger.debug("[episode] finalized name=%r passed=%s", name, passed)

        if self.host.ok(passed, name, level=level + 1):
            return

        highlighter = self.highlighter if self.color else None
        if not out_ok:
            self.host.diag(self.out.complaint(highlighter))
        if not err_ok:
            self.host.diag(self.err.complaint(highlighter))

    def abort(self) -> None:
        if self._saved is None:
            return
        self._restore()
        logger.debug("[episode] aborted")

    @contextmanager
    def episode(self, name: str | None = None) -> Iterator[SessionController]:
        try:
            yield self
        except BaseException:
            self.abort()
            raise
        self.finalize(name, level=3)

    def _restore(self) -> None:
        saved = self._saved
        assert saved is not None
        self._saved = None

        host = self.host
        host.output = saved.output
        host.failure_output = saved.failure_output
        host.todo_output = saved.todo_output
        host.results = list(saved.results)
        host.current_test = saved.current_test
