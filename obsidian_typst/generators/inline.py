"""Generators for inline nodes."""

from __future__ import annotations

import re

from obsidian_typst.generators.base import RenderChildren
from obsidian_typst.generators.escape import escape_text, string_literal
from obsidian_typst.syntax.nodes import (
    BlockReference,
    Embed,
    Emphasis,
    FootnoteReference,
    HardBreak,
    Highlight,
    HtmlInline,
    Image,
    Link,
    SoftBreak,
    Strikethrough,
    Strong,
    Tag,
    Text,
    WikiLink,
)

LINE_BREAK = "\\\n"

_BR_RE = re.compile(r"^<br\s*/?>$", re.IGNORECASE)
_COMMENT_RE = re.compile(r"^<!--.*-->$", re.DOTALL)


def generate_text(node: Text, render_children: RenderChildren) -> str:
    return escape_text(node.value)


def generate_soft_break(node: SoftBreak, render_children: RenderChildren) -> str:
    return "\n"


def generate_hard_break(node: HardBreak, render_children: RenderChildren) -> str:
    return LINE_BREAK


def generate_emphasis(node: Emphasis, render_children: RenderChildren) -> str:
    return f"#emph[{render_children(node.children)}]"


def generate_strong(node: Strong, render_children: RenderChildren) -> str:
    return f"#strong[{render_children(node.children)}]"


def generate_strikethrough(node: Strikethrough, render_children: RenderChildren) -> str:
    return f"#strike[{render_children(node.children)}]"


def generate_highlight(node: Highlight, render_children: RenderChildren) -> str:
    return f"#highlight[{render_children(node.children)}]"


def generate_link(node: Link, render_children: RenderChildren) -> str:
    label = render_children(node.children)
    if not label:
        return f"#link({string_literal(node.url)})"
    return f"#link({string_literal(node.url)})[{label}]"


def generate_image(node: Image, render_children: RenderChildren) -> str:
    if node.alt:
        return f"#image({string_literal(node.url)}, alt: {string_literal(node.alt)})"
    return f"#image({string_literal(node.url)})"


def generate_wiki_link(node: WikiLink, render_children: RenderChildren) -> str:
    return f"#link({string_literal(node.target)})[{escape_text(node.label)}]"


def generate_tag(node: Tag, render_children: RenderChildren) -> str:
    return f"#text(fill: gray)[\\#{escape_text(node.name)}]"


def generate_block_reference(node: BlockReference, render_children: RenderChildren) -> str:
    return ""


def generate_html_inline(node: HtmlInline, render_children: RenderChildren) -> str:
    value = node.value.strip()
    if _BR_RE.match(value):
        return LINE_BREAK
    if _COMMENT_RE.match(value):
        return ""
    return escape_text(node.value)


def generate_footnote_reference(node: FootnoteReference, render_children: RenderChildren) -> str:
    return f"#footnote[{render_children.footnote(node)}]"


def generate_embed(node: Embed, render_children: RenderChildren) -> str:
    return render_children.embed(node)
