"""
Heuristic repair of truncated tag delimiters.

Two regex passes, close tags first, then open tags over the result. Neither
pass knows about tag names or nesting, so text that only looks like a tag can
be "repaired" too. Cheat tables saved by older tools rely on that behaviour,
keep it as is.
"""

from __future__ import annotations

import re

# "<" up to the next "<" or end of text (also just before one final newline).
_CLOSE_RUN = re.compile(r"<([^>]+?(?=<|\n?\Z))")
# Start of text or ">" up to and including the next ">", with no "<" between.
_OPEN_RUN = re.compile(r"(\A|>)[^<]+?>")


def _insert_close(match: re.Match) -> str:
    run = match.group(0)
    end = len(run.rstrip())
    return run[:end] + ">" + run[end:]


def _insert_open(match: re.Match) -> str:
    run = match.group(0)
    skip = 1 if run[0] == ">" else 0
    body = run[skip:]
    at = skip + len(body) - len(body.lstrip())
    return run[:at] + "<" + run[at:]


def repair_close_tags(text: str) -> str:
    return _CLOSE_RUN.sub(_insert_close, text)


def repair_open_tags(text: str) -> str:
    return _OPEN_RUN.sub(_insert_open, text)


def repair_delimiters(text: str) -> str:
    """
    Insert missing "<" and ">" so the table can be loaded by an XML parser.

    Never raises; the result is best effort.
    """
    return repair_open_tags(repair_close_tags(text))
