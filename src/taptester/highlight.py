from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol

from rich.color import ColorSystem
from rich.errors import StyleSyntaxError
from rich.style import Style

from .config import ConfigError, TaptesterSettings

__all__ = [
    "AnsiHighlighter",
    "Highlighter",
    "PlainHighlighter",
    "divergence_index",
    "select_highlighter",
    "strip_ansi",
]

ANSI_SGR_RE = re.compile(r"\x1b\[[0-9;]*m")

COLOR_SYSTEMS: dict[str, ColorSystem] = {
    "standard": ColorSystem.STANDARD,
    "256": ColorSystem.EIGHT_BIT,
    "truecolor": ColorSystem.TRUECOLOR,
}


def divergence_index(got: str, wanted: str) -> int:
    """Return the first index at which ``got`` and ``wanted`` differ.

    Running off the end of either string counts as a difference, so for a
    string and its own prefix this is the prefix length.
    """
    limit = min(len(got), len(wanted))
    index = 0
    while index < limit and got[index] == wanted[index]:
        index += 1
    return index


def strip_ansi(text: str) -> str:
    return ANSI_SGR_RE.sub("", text)


class Highlighter(Protocol):
    def highlight(self, text: str, index: int) -> str: ...


class PlainHighlighter:
    def highlight(self, text: str, index: int) -> str:
        return text


@dataclass(frozen=True, slots=True)
class AnsiHighlighter:
    """Renders the shared prefix and the divergent tail in two rich styles."""

    prefix_style: Style
    divergence_style: Style
    color_system: ColorSystem = ColorSystem.STANDARD

    def highlight(self, text: str, index: int) -> str:
        head = self.prefix_style.render(text[:index], color_system=self.color_system)
        tail = self.divergence_style.render(
            text[index:], color_system=self.color_system
        )
        return head + tail


def _parse_style(value: str, field: str) -> Style:
    try:
        return Style.parse(value)
    except StyleSyntaxError as e:
        raise ConfigError(f"Invalid `{field}` style {value!r}: {e}") from None


def select_highlighter(settings: TaptesterSettings) -> Highlighter:
    if settings.no_color:
        return PlainHighlighter()
    return AnsiHighlighter(
        prefix_style=_parse_style(settings.prefix_style, "prefix_style"),
        divergence_style=_parse_style(settings.divergence_style, "divergence_style"),
        color_system=COLOR_SYSTEMS[settings.color_system],
    )
