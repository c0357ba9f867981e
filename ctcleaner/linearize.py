"""
Script linearization for LuaScript / AssemblerScript fields.

Responsibilities:
- merge Lua lines into one logical line, joined by a single space
- never merge inside a "..." string or a [[...]] literal
- keep {$lua} / {$asm} / [ENABLE] / [DISABLE] on their own lines
- turn "-- comment" into "--[[ comment]]" so merging cannot swallow code
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from .rules import (
    ASM_BLOCK,
    DISABLE_SECTION,
    ENABLE_SECTION,
    LUA_BLOCK,
    LUA_COMMENT,
    LUA_MULTILINE_CLOSE,
    LUA_MULTILINE_OPEN,
)

_LINE_BREAKS = re.compile(r"\r\n?")


@dataclass(frozen=True)
class Marker:
    text: str
    case_sensitive: bool = True

    def at(self, text: str, pos: int) -> bool:
        chunk = text[pos:pos + len(self.text)]
        if self.case_sensitive:
            return chunk == self.text
        return chunk.lower() == self.text.lower()


COMMENT = Marker(LUA_COMMENT)
MULTILINE_OPEN = Marker(LUA_MULTILINE_OPEN)
MULTILINE_CLOSE = Marker(LUA_MULTILINE_CLOSE)
SCRIPT_BLOCK = Marker(LUA_BLOCK, case_sensitive=False)
RAW_BLOCK = Marker(ASM_BLOCK, case_sensitive=False)
ENABLE = Marker(ENABLE_SECTION, case_sensitive=False)
DISABLE = Marker(DISABLE_SECTION, case_sensitive=False)


@dataclass
class ScanState:
    """Per-call scanner flags. Quote and literal tracking are independent."""

    always_active: bool = False
    in_script_mode: bool = False
    transitioning: bool = False
    in_multiline_literal: bool = False
    in_quoted_string: bool = False

    @property
    def active(self) -> bool:
        return self.in_script_mode or self.always_active

    @property
    def can_merge(self) -> bool:
        return self.active and not self.in_quoted_string and not self.in_multiline_literal

    def open_literal(self) -> None:
        self.in_multiline_literal = True

    def close_literal(self) -> None:
        self.in_multiline_literal = False

    def enter_script(self) -> None:
        self.in_script_mode = True
        self.transitioning = True

    def enter_raw(self) -> None:
        self.in_script_mode = False
        self.transitioning = True

    def enter_section(self) -> None:
        self.transitioning = True


# First match wins. (marker, needs active script mode, ScanState method)
_MARKER_TABLE = (
    (MULTILINE_OPEN, True, "open_literal"),
    (MULTILINE_CLOSE, True, "close_literal"),
    (SCRIPT_BLOCK, False, "enter_script"),
    (RAW_BLOCK, False, "enter_raw"),
    (ENABLE, False, "enter_section"),
    (DISABLE, False, "enter_section"),
)
_MARKER_LEADS = frozenset(marker.text[0] for marker, _, _ in _MARKER_TABLE)

# Markers that always keep the line break in front of them.
_STANDALONE = (RAW_BLOCK, ENABLE, DISABLE)


def _match_marker(state: ScanState, line: str, pos: int) -> None:
    for marker, needs_active, action in _MARKER_TABLE:
        if needs_active and not state.active:
            continue
        if marker.at(line, pos):
            getattr(state, action)()
            return


def _wrap_comment(line: str, pos: int) -> str:
    body = pos + len(COMMENT.text)
    return line[:body] + MULTILINE_OPEN.text + line[body:] + MULTILINE_CLOSE.text


def _scan_line(state: ScanState, line: str, after: int) -> str:
    # `after` is the number of characters left in the text past this line.
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            state.in_quoted_string = not state.in_quoted_string
        if ch in _MARKER_LEADS:
            _match_marker(state, line, i)
        if (
            state.can_merge
            and COMMENT.at(line, i)
            and len(line) - i + after >= 4
            and not MULTILINE_OPEN.at(line, i + len(COMMENT.text))
        ):
            line = _wrap_comment(line, i)
        i += 1
    return line


def _line_break(state: ScanState, next_line: str) -> str:
    if state.can_merge and not any(m.at(next_line, 0) for m in _STANDALONE):
        if not state.transitioning:
            return " "
        state.transitioning = False
    return "\n"


def _next_non_blank(lines: List[str]) -> List[str]:
    """For each line, the first non-empty line after it ("" if none)."""
    following = [""] * len(lines)
    upcoming = ""
    for k in range(len(lines) - 1, -1, -1):
        following[k] = upcoming
        if lines[k]:
            upcoming = lines[k]
    return following


def linearize_script(text: str, always_active: bool = False) -> str:
    """
    Collapse a multi-line script field into as few lines as its markers allow.

    Rules:
    - Line endings are normalized to "\\n"; the text and every line are stripped.
    - With always_active the text is treated as Lua from the first character;
      otherwise only the regions after {$lua} are.
    - Never raises; unbalanced quotes or literals give best-effort output.
    """
    lines = [line.strip() for line in _LINE_BREAKS.sub("\n", text).strip().split("\n")]
    following = _next_non_blank(lines)
    state = ScanState(always_active=always_active, in_script_mode=always_active)

    out: List[str] = []
    after = sum(len(line) for line in lines) + len(lines) - 1
    for k, line in enumerate(lines):
        after -= len(line)
        out.append(_scan_line(state, line, after))
        if k + 1 < len(lines):
            out.append(_line_break(state, following[k]))
            after -= 1
    return "".join(out)


def linearize_lua_field(text: str) -> str:
    return linearize_script(linearize_script(text, True))


def linearize_asm_field(text: str) -> str:
    return linearize_script(linearize_script(text))
