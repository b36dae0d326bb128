from __future__ import annotations

__version__ = "0.1.0"

from .api import (  # noqa: E402
    color,
    expect_diag,
    expect_err,
    expect_fail,
    expect_out,
    get_builder,
    get_controller,
    line_num,
    verify,
)
from .errors import NotTestingError  # noqa: E402

__all__ = [
    "NotTestingError",
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
