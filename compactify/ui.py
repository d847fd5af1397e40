"""Styled terminal output: callouts, summary panels and error lists."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field, replace
from itertools import zip_longest

_ANSI = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

_ACCENT = "#10B981"
_SUBTLE = "#3F3F46"
_DIM_TEXT = "#A1A1AA"
_WHITE_TEXT = "#F4F4F5"
_ERR_BG = "#7F1D1D"
_WARN_BORDER = "#F59E0B"
_WARN_TEXT = "#FEF3C7"
_ERROR_BORDER = "#EF4444"
_ERR_TEXT = "#FEE2E2"
_SUCCESS_BORDER = "#10B981"
_SUCCESS_TEXT = "#F0FDF4"


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences."""
    return _ANSI.sub("", text)


def _char_width(ch: str) -> int:
    if unicodedata.combining(ch) or unicodedata.category(ch) in ("Mn", "Me", "Cf"):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def _visible_width(text: str) -> int:
    return sum(_char_width(ch) for ch in strip_ansi(text))


def _pad_right(text: str, width: int) -> str:
    return text + " " * max(width - _visible_width(text), 0)


def _rgb(color: str) -> str:
    return ";".join(str(int(color[i:i + 2], 16)) for i in (1, 3, 5))


@dataclass(frozen=True)
class _Style:
    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    width: int = 0
    padding: tuple[int, int, int, int] = (0, 0, 0, 0)
    margin: tuple[int, int, int, int] = (0, 0, 0, 0)

    def _paint(self, text: str) -> str:
        codes = []
        if self.bold:
            codes.append("1")
        if self.fg:
            codes.append("38;2;" + _rgb(self.fg))
        if self.bg:
            codes.append("48;2;" + _rgb(self.bg))
        if not codes or not text:
            return text
        return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"

    def render(self, text: str) -> str:
        lines = text.split("\n")
        top, right, bottom, left = self.padding
        inner = max(self.width - left - right, 0)
        block = max([_visible_width(line) for line in lines] + [inner])
        full = block + left + right
        body = [" " * left + _pad_right(line, block) + " " * right for line in lines]
        body = [" " * full] * top + body + [" " * full] * bottom
        m_top, m_right, m_bottom, m_left = self.margin
        body = [" " * m_left + self._paint(line) + " " * m_right for line in body]
        blank = " " * (full + m_left + m_right)
        return "\n".join([blank] * m_top + body + [blank] * m_bottom)


_CALLOUT_ICON = _Style(bold=True, margin=(0, 2, 0, 0))
_TITLE = _Style(fg=_ACCENT, bold=True, margin=(0, 0, 1, 0))
_LABEL = _Style(fg=_DIM_TEXT, width=12)
_VALUE = _Style(fg=_WHITE_TEXT, bold=True)
_HERO = _Style(fg=_ACCENT, bold=True)
_PANEL = _Style(width=30)
_DIVIDER = _Style(fg=_SUBTLE)
_FOOTER_TITLE = replace(_TITLE, margin=(1, 0, 1, 0))
_FOOTER_LINE = _Style(fg=_DIM_TEXT)
_BOX_PADDING = _Style(padding=(1, 2, 1, 2))
_BOX_BORDER = _Style(fg=_SUBTLE)
_ERROR_HEADER = _Style(
    fg=_WHITE_TEXT, bg=_ERR_BG, bold=True, padding=(0, 1, 0, 1), margin=(2, 0, 0, 2)
)
_ERROR_SYMBOL = _Style(fg=_ERR_TEXT, margin=(0, 1, 0, 4))
_ERROR_PATH = _Style(fg=_DIM_TEXT)
_ERROR_MSG = _Style(fg=_WHITE_TEXT, bold=True)
_ERROR_ITEM = _Style(margin=(0, 0, 0, 1))


def _join_horizontal(*blocks: str) -> str:
    """Place blocks side by side, aligned at the top."""
    split = [block.split("\n") for block in blocks]
    widths = [max(_visible_width(line) for line in lines) for lines in split]
    rows = (
        "".join(_pad_right(cell, width) for cell, width in zip(row, widths))
        for row in zip_longest(*split, fillvalue="")
    )
    return "\n".join(rows)


def _box(content: str) -> str:
    padded = _BOX_PADDING.render(content).split("\n")
    width = max(_visible_width(line) for line in padded)
    side = _BOX_BORDER.render("│")
    lines = [_BOX_BORDER.render("╭" + "─" * width + "╮")]
    lines.extend(side + _pad_right(line, width) + side for line in padded)
    lines.append(_BOX_BORDER.render("╰" + "─" * width + "╯"))
    return "\n".join(lines)


def _callout(icon: str, message: str, border_color: str, text_color: str) -> str:
    icon_part = replace(_CALLOUT_ICON, fg=text_color).render(icon)
    text_part = _Style(fg=text_color).render(message)
    inner = _Style(padding=(0, 2, 0, 2)).render(_join_horizontal(icon_part, text_part))
    border = _Style(fg=border_color).render("┃")
    bordered = "\n".join(border + line for line in inner.split("\n"))
    return _Style(margin=(1, 0, 1, 0)).render(bordered)


def warn(message: str) -> str:
    return _callout("⚠️", message, _WARN_BORDER, _WARN_TEXT)


def error(message: str) -> str:
    return _callout("❌", message, _ERROR_BORDER, _ERR_TEXT)


def success(message: str) -> str:
    return _callout("✅", message, _SUCCESS_BORDER, _SUCCESS_TEXT)


@dataclass(frozen=True)
class Item:
    label: str
    value: str
    is_highlighted: bool = False


@dataclass(frozen=True)
class Panel:
    title: str = ""
    items: list[Item] = field(default_factory=list)


def render_panel(panel: Panel) -> str:
    """A titled column of label/value rows, 30 cells wide."""
    lines = [_TITLE.render(panel.title)]
    for item in panel.items:
        style = _HERO if item.is_highlighted else _VALUE
        lines.append(_LABEL.render(item.label) + style.render(item.value))
    return _PANEL.render("\n".join(lines))


def _render_footer(title: str, line: str, width: int) -> str:
    return "\n".join(
        [
            _DIVIDER.render("─" * width),
            _FOOTER_TITLE.render(title),
            _FOOTER_LINE.render(line),
        ]
    )


def render_dashboard(left: Panel, right: Panel, footer_title: str, footer_line: str) -> str:
    """Two panels side by side in a rounded box, with an optional footer."""
    body = _join_horizontal(render_panel(left), render_panel(right))
    if not footer_title:
        return _box(body)
    width = max(_visible_width(line) for line in body.split("\n"))
    content = "\n".join([body, "", _render_footer(footer_title, footer_line, width)])
    return _box(content)


def render_error_list(errors: list) -> str:
    """A header with the error count and one line per error; empty without errors."""
    if not errors:
        return ""
    parts = [_ERROR_HEADER.render(f" {len(errors)} ERRORS DETECTED ") + "\n"]
    for err in errors:
        message = str(err)
        path, sep, rest = message.partition(": ")
        if sep:
            formatted = _ERROR_PATH.render(path) + ": " + _ERROR_MSG.render(rest)
        else:
            formatted = _ERROR_MSG.render(message)
        line = _join_horizontal(_ERROR_SYMBOL.render("❌"), formatted)
        parts.append(_ERROR_ITEM.render(line) + "\n")
    return "".join(parts)