"""Structural strategy: parse a note, expand its embeds and generate Typst.

Rendering runs in two passes. The async pass expands every embed in document
order, one at a time, so nested I/O finishes before the next sibling starts.
The second pass is a plain synchronous walk over the generator table, with
embed output looked up from the first pass.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Iterator, Sequence, get_args

from obsidian_typst.embeds.environment import Environment
from obsidian_typst.embeds.resolver import EmbedResolver
from obsidian_typst.generators import (
    Generator,
    escape_line_start,
    generate_block_reference,
    generate_blockquote,
    generate_callout,
    generate_code_block,
    generate_embed,
    generate_emphasis,
    generate_footnote_reference,
    generate_hard_break,
    generate_heading,
    generate_highlight,
    generate_html_block,
    generate_html_inline,
    generate_image,
    generate_inline_code,
    generate_link,
    generate_list,
    generate_list_item,
    generate_paragraph,
    generate_soft_break,
    generate_strikethrough,
    generate_strong,
    generate_table,
    generate_table_cell,
    generate_table_row,
    generate_tag,
    generate_text,
    generate_thematic_break,
    generate_wiki_link,
)
from obsidian_typst.generators.embeds import missing_placeholder
from obsidian_typst.models import ConversionOptions
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
    Node,
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
    walk,
)
from obsidian_typst.syntax.parser import MarkdownParser
from obsidian_typst.syntax.sections import select_section

logger = logging.getLogger(__name__)

GENERATORS: dict[type, Generator] = {
    # blocks
    Paragraph: generate_paragraph,
    Heading: generate_heading,
    ListBlock: generate_list,
    ListItem: generate_list_item,
    Table: generate_table,
    TableRow: generate_table_row,
    TableCell: generate_table_cell,
    CodeBlock: generate_code_block,
    BlockQuote: generate_blockquote,
    Callout: generate_callout,
    Embed: generate_embed,
    ThematicBreak: generate_thematic_break,
    HtmlBlock: generate_html_block,
    # inline
    Text: generate_text,
    SoftBreak: generate_soft_break,
    HardBreak: generate_hard_break,
    InlineCode: generate_inline_code,
    Emphasis: generate_emphasis,
    Strong: generate_strong,
    Strikethrough: generate_strikethrough,
    Highlight: generate_highlight,
    Link: generate_link,
    Image: generate_image,
    WikiLink: generate_wiki_link,
    Tag: generate_tag,
    BlockReference: generate_block_reference,
    HtmlInline: generate_html_inline,
    FootnoteReference: generate_footnote_reference,
}


def _check_dispatch() -> None:
    missing = sorted(kind.__name__ for kind in get_args(Node) if kind not in GENERATORS)
    if missing:
        raise TypeError(f"No generator registered for node kinds: {', '.join(missing)}")


_check_dispatch()

# Embed may appear in either position, so it does not decide the join mode
_INLINE_ONLY = tuple(kind for kind in get_args(Inline) if kind is not Embed)
_LINE_BREAKS = (SoftBreak, HardBreak)


def _indent_continuation(text: str, indent: str) -> str:
    lines = text.split("\n")
    return "\n".join([lines[0], *(f"{indent}{line}" if line else line for line in lines[1:])])


class _ChildRenderer:
    """The ``render_children`` capability handed to every generator."""

    def __init__(
        self,
        expansions: dict[int, str],
        footnotes: dict[int, tuple[Block, ...]],
        checkbox_enhancement: bool = False,
    ) -> None:
        self.checkbox_enhancement = checkbox_enhancement
        self._expansions = expansions
        self._footnotes = footnotes
        self._open_footnotes: set[int] = set()

    def __call__(self, nodes: Sequence[Node], indent: str = "") -> str:
        if not nodes:
            return ""
        if any(isinstance(node, _INLINE_ONLY) for node in nodes):
            text = self._inline(nodes)
        else:
            text = self._blocks(nodes, nested=bool(indent))
        return _indent_continuation(text, indent) if indent else text

    def embed(self, node: Embed) -> str:
        expanded = self._expansions.get(id(node))
        if expanded is None:
            logger.warning("embed %s was not expanded before rendering", node.reference.raw)
            return missing_placeholder(node.reference.raw)
        return expanded

    def footnote(self, reference: FootnoteReference) -> str:
        blocks = self._footnotes.get(reference.id)
        if blocks is None or reference.id in self._open_footnotes:
            return ""
        self._open_footnotes.add(reference.id)
        try:
            return self(blocks)
        finally:
            self._open_footnotes.discard(reference.id)

    def _generate(self, node: Node) -> str:
        return GENERATORS[type(node)](node, self)

    def _inline(self, nodes: Sequence[Node]) -> str:
        parts: list[str] = []
        line_start = True
        for node in nodes:
            text = self._generate(node)
            if line_start and isinstance(node, Text):
                text = escape_line_start(text)
            parts.append(text)
            line_start = isinstance(node, _LINE_BREAKS)
        return "".join(parts)

    def _blocks(self, nodes: Sequence[Node], nested: bool) -> str:
        out: list[str] = []
        for node in nodes:
            text = self._generate(node)
            if not text:
                continue
            if out:
                # inside a list item a sublist hugs the line above it
                out.append("\n" if nested and isinstance(node, ListBlock) else "\n\n")
            out.append(text)
        return "".join(out)


def _embeds_in_order(document: Document) -> Iterator[Embed]:
    for node in walk(document):
        if isinstance(node, Embed):
            yield node
    for blocks in document.footnotes.values():
        for block in blocks:
            if isinstance(block, Embed):
                yield block
            for node in walk(block):
                if isinstance(node, Embed):
                    yield node


class StructuralTransformer:
    """Converts note text to Typst by walking the document tree."""

    def __init__(self, parser: MarkdownParser | None = None) -> None:
        self._parser = parser or MarkdownParser()

    async def transform(
        self,
        text: str,
        options: ConversionOptions | None = None,
        environment: Environment | None = None,
    ) -> str:
        options = options or ConversionOptions()
        if environment is None:
            environment = Environment.detached(options.current_document_path or "")
        document = self._parser.parse(text)
        return await self.render(document, options, environment, options.max_embed_depth)

    async def render(
        self,
        document: Document,
        options: ConversionOptions,
        environment: Environment,
        remaining_depth: int,
    ) -> str:
        resolver = EmbedResolver(
            partial(self._render_embedded, options),
            detect_cycles=options.detect_embed_cycles,
        )

        expansions: dict[int, str] = {}
        for embed in _embeds_in_order(document):
            expansions[id(embed)] = await resolver.expand(embed, environment, remaining_depth)

        renderer = _ChildRenderer(expansions, document.footnotes, options.checkbox_enhancement)
        body = renderer(document.children).strip("\n")
        return f"{body}\n" if body else ""

    async def _render_embedded(
        self,
        options: ConversionOptions,
        content: str,
        environment: Environment,
        remaining_depth: int,
        section: str | None,
    ) -> str | None:
        document = self._parser.parse(content)
        if section:
            document = select_section(document, section)
            if document is None:
                return None
        return await self.render(document, options, environment, remaining_depth)
