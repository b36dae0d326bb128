"""Process-wide test-the-tests API.

Typical use::

    from taptester import expect_out, expect_fail, get_builder, verify

    expect_out("not ok 1 - foo")
    expect_fail(+1)
    get_builder().ok(False, "foo")
    verify("fail works")

Once any ``expect_*`` function has been called, everything the default
builder prints is captured until :func:`verify` compares it with the
declared output and reports the result through the original streams.
"""

from __future__ import annotations

import atexit
import sys

from .builder import TapBuilder, format_failure
from .session import SessionController

__all__ = [
    "color",
    "expect_diag",
    "expect_err",
    "expect_fail",
    "expect_out",
    "get_builder",
    "get_controller",
    "line_num",
    "verify",
]

_builder: TapBuilder | None = None
_controller: SessionController | None = None


def get_builder() -> TapBuilder:
    global _builder
    if _builder is None:
        _builder = TapBuilder()
        atexit.register(_builder.finish)
    return _builder


def get_controller() -> SessionController:
    global _controller
    if _controller is None:
        _controller = SessionController(get_builder())
    return _controller


def expect_out(*lines: str) -> None:
    """Declare lines the builder will print to its result stream.

    A newline is added to each line that lacks one, so
    ``expect_out("ok 1", "ok 2")`` is the same as ``expect_out("ok 1\\nok 2")``.
    """
    get_controller().expect_out(*lines)


def expect_err(*lines: str) -> None:
    get_controller().expect_err(*lines)


def expect_fail(offset: int = 0) -> None:
    """Expect the builder's failure diagnostic for the line ``offset`` below."""
    caller = sys._getframe(1)
    message = format_failure(caller.f_code.co_filename, caller.f_lineno + offset)
    get_controller().expect_err(f"# {message}")


def expect_diag(*lines: str) -> None:
    """Expect ``lines`` as ``TapBuilder.diag`` would print them."""
    get_controller().expect_err(*(f"# {line}" for line in lines))


def verify(name: str | None = None) -> None:
    """Compare captured output with the declarations and report one result.

    Raises :class:`~taptester.errors.NotTestingError` if nothing was declared.
    """
    get_controller().finalize(name, level=2)


def line_num(offset: int = 0) -> int:
    return sys._getframe(1).f_lineno + offset


def color(value: bool | None = None) -> bool:
    controller = get_controller()
    if value is not None:
        controller.color = bool(value)
    return controller.color
