"""Document tree for Obsidian notes.

Every node kind is a frozen dataclass. ``Node`` is the closed union of all
kinds; the generator dispatch in ``obsidian_typst.transformer`` is checked
against it at import time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from obsidian_typst.syntax.references import EmbedReference

Alignment = Literal["left", "center", "right"]


# -- Inline ------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class SoftBreak:
    pass


@dataclass(frozen=True)
class HardBreak:
    pass


@dataclass(frozen=True)
class InlineCode:
    value: str


@dataclass(frozen=True)
class Emphasis:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Strong:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Strikethrough:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Highlight:
    """``==marked==`` span."""

    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Link:
    url: str
    title: str | None = None
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Image:
    url: str
    alt: str = ""
    title: str | None = None


@dataclass(frozen=True)
class WikiLink:
    """``[[target]]`` or ``[[target|display]]``."""

    target: str
    display: str | None = None

    @property
    def label(self) -> str:
        return self.display if self.display else self.target


@dataclass(frozen=True)
class Tag:
    name: str


@dataclass(frozen=True)
class BlockReference:
    """Trailing ``^identifier`` anchor on a paragraph or list item."""

    identifier: str


@dataclass(frozen=True)
class HtmlInline:
    value: str


@dataclass(frozen=True)
class FootnoteReference:
    id: int
    label: str | None = None


# -- Block -------------------------------------------------------------------


@dataclass(frozen=True)
class Paragraph:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Heading:
    depth: int
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class ListItem:
    children: tuple[Block, ...] = ()
    checked: bool | None = None


@dataclass(frozen=True)
class ListBlock:
    items: tuple[ListItem, ...] = ()
    ordered: bool = False
    start: int = 1


@dataclass(frozen=True)
class TableCell:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class TableRow:
    cells: tuple[TableCell, ...] = ()
    header: bool = False


@dataclass(frozen=True)
class Table:
    rows: tuple[TableRow, ...] = ()
    # None when no column declares an alignment
    align: tuple[Alignment | None, ...] | None = None


@dataclass(frozen=True)
class CodeBlock:
    value: str
    lang: str = ""
    fence: str = "```"


@dataclass(frozen=True)
class BlockQuote:
    children: tuple[Block, ...] = ()


@dataclass(frozen=True)
class Callout:
    """``> [!kind] title`` block quote."""

    kind: str
    title: str | None = None
    fold: str = ""
    children: tuple[Block, ...] = ()


@dataclass(frozen=True)
class Embed:
    """``![[target|attrs]]`` file embed (block or inline position)."""

    reference: EmbedReference


@dataclass(frozen=True)
class ThematicBreak:
    pass


@dataclass(frozen=True)
class HtmlBlock:
    value: str


@dataclass(frozen=True)
class Document:
    children: tuple[Block, ...] = ()
    front_matter: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    footnotes: dict[int, tuple[Block, ...]] = field(default_factory=dict, compare=False, hash=False)


Inline = Union[
    Text,
    SoftBreak,
    HardBreak,
    InlineCode,
    Emphasis,
    Strong,
    Strikethrough,
    Highlight,
    Link,
    Image,
    WikiLink,
    Tag,
    BlockReference,
    HtmlInline,
    FootnoteReference,
    Embed,
]

Block = Union[
    Paragraph,
    Heading,
    ListBlock,
    ListItem,
    Table,
    TableRow,
    TableCell,
    CodeBlock,
    BlockQuote,
    Callout,
    Embed,
    ThematicBreak,
    HtmlBlock,
]

Node = Union[Block, Inline]

CONTAINER_FIELDS = ("children", "items", "rows", "cells")


def child_nodes(node: object) -> tuple[Node, ...]:
    """Return the direct children of any node, whatever field holds them."""
    for name in CONTAINER_FIELDS:
        value = getattr(node, name, None)
        if value is not None:
            return value
    return ()


def walk(node: object):
    """Yield ``node``'s descendants depth-first in document order."""
    for child in child_nodes(node):
        yield child
        yield from walk(child)


def plain_text(nodes: tuple[Node, ...]) -> str:
    """Flatten inline nodes to their visible text."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, (Text, InlineCode)):
            parts.append(node.value)
        elif isinstance(node, WikiLink):
            parts.append(node.label)
        elif isinstance(node, Tag):
            parts.append(f"#{node.name}")
        elif isinstance(node, (SoftBreak, HardBreak)):
            parts.append(" ")
        elif isinstance(node, Image):
            parts.append(node.alt)
        else:
            parts.append(plain_text(child_nodes(node)))
    return "".join(parts)
