"""Escaping of plain text and string literals for Typst markup."""

from __future__ import annotations

import re

# Characters with markup meaning anywhere in a line
_MARKUP_CHARS = frozenset("\\#$*_`<>@[]~")
# Markers that only mean something at the start of a line
_LINE_START_MARKERS = ("=", "-", "+", "/")
_ENUM_MARKER_RE = re.compile(r"^(\d+)\.")


def escape_text(value: str) -> str:
    """Escape ``value`` so Typst renders it literally."""
    out: list[str] = []
    for index, ch in enumerate(value):
        following = value[index + 1] if index + 1 < len(value) else ""
        if (
            ch in _MARKUP_CHARS
            or (ch == "/" and following in ("/", "*"))
            or (ch == "-" and following == "-")
            or (ch == "." and index == 0)
        ):
            out.append("\\")
        out.append(ch)
    return "".join(out)


def escape_line_start(rendered: str) -> str:
    """Escape list/heading markers in already escaped text starting a line."""
    if rendered.startswith(_LINE_START_MARKERS):
        return "\\" + rendered
    match = _ENUM_MARKER_RE.match(rendered)
    if match:
        return f"{match.group(1)}\\.{rendered[match.end():]}"
    return rendered


def string_literal(value: str) -> str:
    """Quote ``value`` as a Typst string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'
