"""Markdown parsing into the Obsidian document tree."""

from __future__ import annotations

import logging
from typing import Any

import yaml
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin

from obsidian_typst.syntax.nodes import (
    Block,
    BlockQuote,
    BlockReference,
    Callout,
    CodeBlock,
    Document,
    Embed,
    Emphasis,
    FootnoteReference,
    HardBreak,
    Heading,
    Highlight,
    HtmlBlock,
    HtmlInline,
    Image,
    Inline,
    InlineCode,
    Link,
    ListBlock,
    ListItem,
    Paragraph,
    SoftBreak,
    Strikethrough,
    Strong,
    Table,
    TableCell,
    TableRow,
    Tag,
    Text,
    ThematicBreak,
    WikiLink,
    plain_text,
)
from obsidian_typst.syntax.references import parse_embed_reference
from obsidian_typst.syntax.rules import obsidian_plugin

logger = logging.getLogger(__name__)

_ALIGNMENTS = {"left", "center", "right"}


def create_markdown() -> MarkdownIt:
    """CommonMark + GFM tables/strikethrough + front matter, footnotes and Obsidian rules."""
    return (
        MarkdownIt("commonmark")
        .enable("table")
        .enable("strikethrough")
        .use(front_matter_plugin)
        .use(footnote_plugin)
        .use(obsidian_plugin)
    )


def read_front_matter(content: str) -> dict[str, Any]:
    """Extract YAML front matter without parsing the rest of the note."""
    if not content.startswith("---"):
        return {}
    end = content.find("\n---", 3)
    if end == -1:
        return {}
    return _load_front_matter(content[3:end])


def _load_front_matter(raw: str) -> dict[str, Any]:
    try:
        loaded = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        logger.warning("ignoring malformed front matter: %s", exc)
        return {}
    return loaded if isinstance(loaded, dict) else {}


class MarkdownParser:
    """Parses note text into a fresh ``Document`` per call."""

    def __init__(self, md: MarkdownIt | None = None) -> None:
        self._md = md or create_markdown()

    def parse(self, text: str) -> Document:
        root = SyntaxTreeNode(self._md.parse(text))

        front_matter: dict[str, Any] = {}
        footnotes: dict[int, tuple[Block, ...]] = {}
        blocks: list[Block] = []
        for node in root.children:
            if node.type == "front_matter":
                front_matter = _load_front_matter(node.content)
            elif node.type == "footnote_block":
                for footnote in node.children:
                    footnotes[int(footnote.meta["id"])] = self._blocks(footnote.children)
            else:
                blocks.extend(self._block(node))

        return Document(children=tuple(blocks), front_matter=front_matter, footnotes=footnotes)

    # -- blocks ----------------------------------------------------------------

    def _blocks(self, nodes: list[SyntaxTreeNode]) -> tuple[Block, ...]:
        blocks: list[Block] = []
        for node in nodes:
            blocks.extend(self._block(node))
        return tuple(blocks)

    def _block(self, node: SyntaxTreeNode) -> list[Block]:
        kind = node.type

        if kind == "paragraph":
            return self._paragraph(node)

        if kind == "heading":
            depth = int(node.tag[1:]) if node.tag[1:].isdigit() else 1
            return [Heading(depth=depth, children=self._inline_of(node))]

        if kind in ("bullet_list", "ordered_list"):
            start = node.attrs.get("start", 1) if kind == "ordered_list" else 1
            items = tuple(
                ListItem(children=self._blocks(item.children), checked=item.meta.get("checked"))
                for item in node.children
            )
            return [ListBlock(items=items, ordered=kind == "ordered_list", start=int(start))]

        if kind == "table":
            return [self._table(node)]

        if kind == "fence":
            info = node.info.strip()
            return [
                CodeBlock(
                    value=_strip_final_newline(node.content),
                    lang=info.split(maxsplit=1)[0] if info else "",
                    fence=node.markup or "```",
                )
            ]

        if kind == "code_block":
            return [CodeBlock(value=_strip_final_newline(node.content))]

        if kind == "blockquote":
            children = self._blocks(node.children)
            kind_name = node.meta.get("callout")
            if kind_name:
                return [
                    Callout(
                        kind=kind_name,
                        title=node.meta.get("title"),
                        fold=node.meta.get("fold", ""),
                        children=children,
                    )
                ]
            return [BlockQuote(children=children)]

        if kind == "hr":
            return [ThematicBreak()]

        if kind == "html_block":
            return [HtmlBlock(value=node.content)]

        logger.debug("skipping unsupported block %s", kind)
        return []

    def _paragraph(self, node: SyntaxTreeNode) -> list[Block]:
        inlines = self._inline_of(node)
        # A paragraph holding nothing but embeds becomes block-level embeds
        meaningful = [
            child
            for child in inlines
            if not isinstance(child, SoftBreak)
            and not (isinstance(child, Text) and not child.value.strip())
        ]
        if meaningful and all(isinstance(child, Embed) for child in meaningful):
            return list(meaningful)
        return [Paragraph(children=inlines)]

    def _table(self, node: SyntaxTreeNode) -> Table:
        rows: list[TableRow] = []
        align: list[str | None] = []
        for section in node.children:
            for row in section.children:
                cells = []
                for cell in row.children:
                    cells.append(TableCell(children=self._inline_of(cell)))
                    if not rows:
                        align.append(_cell_alignment(cell))
                rows.append(TableRow(cells=tuple(cells), header=section.type == "thead"))

        explicit = tuple(align) if any(align) else None
        return Table(rows=tuple(rows), align=explicit)

    # -- inlines ---------------------------------------------------------------

    def _inline_of(self, node: SyntaxTreeNode) -> tuple[Inline, ...]:
        if not node.children:
            return ()
        inline = node.children[0]
        return self._inlines(inline.children)

    def _inlines(self, nodes: list[SyntaxTreeNode]) -> tuple[Inline, ...]:
        result: list[Inline] = []
        for node in nodes:
            converted = self._inline(node)
            if converted is None:
                continue
            if isinstance(converted, Text) and result and isinstance(result[-1], Text):
                result[-1] = Text(result[-1].value + converted.value)
            else:
                result.append(converted)
        return tuple(result)

    def _inline(self, node: SyntaxTreeNode) -> Inline | None:
        kind = node.type

        if kind in ("text", "text_special"):
            return Text(node.content)
        if kind == "softbreak":
            return SoftBreak()
        if kind == "hardbreak":
            return HardBreak()
        if kind == "code_inline":
            return InlineCode(node.content)
        if kind == "em":
            return Emphasis(self._inlines(node.children))
        if kind == "strong":
            return Strong(self._inlines(node.children))
        if kind == "s":
            return Strikethrough(self._inlines(node.children))
        if kind == "highlight":
            return Highlight(self._inlines(node.children))
        if kind == "link":
            title = node.attrs.get("title")
            return Link(
                url=str(node.attrs.get("href", "")),
                title=str(title) if title else None,
                children=self._inlines(node.children),
            )
        if kind == "image":
            title = node.attrs.get("title")
            alt = node.content or plain_text(self._inlines(node.children))
            return Image(url=str(node.attrs.get("src", "")), alt=alt, title=str(title) if title else None)
        if kind == "wikilink":
            return WikiLink(target=node.meta["target"], display=node.meta.get("display"))
        if kind == "embed":
            return Embed(parse_embed_reference(node.content))
        if kind == "obsidian_tag":
            return Tag(node.content)
        if kind == "block_reference":
            return BlockReference(node.content)
        if kind == "html_inline":
            return HtmlInline(node.content)
        if kind == "footnote_ref":
            return FootnoteReference(id=int(node.meta["id"]), label=node.meta.get("label"))
        if kind == "footnote_anchor":
            return None

        logger.debug("treating unsupported inline %s as text", kind)
        return Text(node.content) if node.content else None


def _cell_alignment(cell: SyntaxTreeNode) -> str | None:
    style = str(cell.attrs.get("style", ""))
    value = style.partition("text-align:")[2].strip()
    return value if value in _ALIGNMENTS else None


def _strip_final_newline(value: str) -> str:
    return value[:-1] if value.endswith("\n") else value
