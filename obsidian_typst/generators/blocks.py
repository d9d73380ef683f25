"""Generators for headings, paragraphs, quotes and other simple blocks."""

from __future__ import annotations

import re

from obsidian_typst.generators.base import RenderChildren
from obsidian_typst.generators.escape import escape_text
from obsidian_typst.syntax.nodes import (
    BlockQuote,
    Heading,
    HtmlBlock,
    Paragraph,
    ThematicBreak,
)

MIN_HEADING_DEPTH = 1
MAX_HEADING_DEPTH = 6

_LINE_BREAK_RE = re.compile(r"^\s*<br\s*/?>\s*$", re.IGNORECASE)
_HTML_COMMENT_RE = re.compile(r"^\s*<!--.*-->\s*$", re.DOTALL)


def generate_heading(node: Heading, render_children: RenderChildren) -> str:
    depth = min(max(node.depth, MIN_HEADING_DEPTH), MAX_HEADING_DEPTH)
    return f"{'=' * depth} {render_children(node.children)}".rstrip()


def generate_paragraph(node: Paragraph, render_children: RenderChildren) -> str:
    return render_children(node.children)


def generate_blockquote(node: BlockQuote, render_children: RenderChildren) -> str:
    return f"#quote(block: true)[\n{render_children(node.children)}\n]"


def generate_thematic_break(node: ThematicBreak, render_children: RenderChildren) -> str:
    return "#line(length: 100%)"


def generate_html_block(node: HtmlBlock, render_children: RenderChildren) -> str:
    """Keep line breaks, drop comments, show any other HTML as literal text."""
    if _LINE_BREAK_RE.match(node.value):
        return "\\"
    if _HTML_COMMENT_RE.match(node.value):
        return ""
    return escape_text(node.value.strip())
