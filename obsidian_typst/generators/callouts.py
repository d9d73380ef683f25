"""Callout generator.

Callouts become a tinted ``#block`` with a coloured left rule. Kinds follow
Obsidian's built-in set including aliases; anything else keeps its raw kind
as title and gets the neutral colour.
"""

from __future__ import annotations

from obsidian_typst.generators.base import RenderChildren
from obsidian_typst.generators.escape import escape_text, string_literal
from obsidian_typst.syntax.nodes import Callout

NEUTRAL_COLOR = "#9e9e9e"

CALLOUT_COLORS: dict[str, str] = {
    "note": "#448aff",
    "info": "#448aff",
    "todo": "#448aff",
    "abstract": "#00b0ff",
    "summary": "#00b0ff",
    "tldr": "#00b0ff",
    "tip": "#00bfa5",
    "hint": "#00bfa5",
    "important": "#00bfa5",
    "success": "#00c853",
    "check": "#00c853",
    "done": "#00c853",
    "question": "#ff9100",
    "help": "#ff9100",
    "faq": "#ff9100",
    "warning": "#ff9100",
    "caution": "#ff9100",
    "attention": "#ff9100",
    "failure": "#ff5252",
    "fail": "#ff5252",
    "missing": "#ff5252",
    "danger": "#ff1744",
    "error": "#ff1744",
    "bug": "#f50057",
    "example": "#7c4dff",
    "quote": NEUTRAL_COLOR,
    "cite": NEUTRAL_COLOR,
}


def callout_color(kind: str) -> str:
    return CALLOUT_COLORS.get(kind.lower(), NEUTRAL_COLOR)


def default_title(kind: str) -> str:
    if kind.lower() in CALLOUT_COLORS:
        return kind.capitalize()
    return kind


def generate_callout(node: Callout, render_children: RenderChildren) -> str:
    color = f"rgb({string_literal(callout_color(node.kind))})"
    title = escape_text(node.title or default_title(node.kind))
    body = render_children(node.children)

    parts = [
        f"#block(fill: {color}.lighten(90%), stroke: (left: 2pt + {color}), "
        "inset: 8pt, radius: 2pt, width: 100%)[",
        f"#strong[{title}]",
    ]
    if body:
        parts.extend(["", body])
    parts.append("]")
    return "\n".join(parts)
