"""Narrowing a document to an embedded ``#Heading`` or ``#^block`` section."""

from __future__ import annotations

from dataclasses import replace

from obsidian_typst.syntax.nodes import (
    Block,
    BlockQuote,
    BlockReference,
    Callout,
    Document,
    Heading,
    ListBlock,
    Paragraph,
    SoftBreak,
    Text,
    plain_text,
)


def select_section(document: Document, section: str) -> Document | None:
    """Return a document holding only ``section``, or None when it is absent."""
    section = section.strip()
    if section.startswith("^"):
        found = _find_block(document.children, section[1:])
        blocks = (found,) if found is not None else None
    else:
        # Obsidian writes nested headings as `#Parent#Child`; the last one wins
        blocks = _heading_section(document.children, section.rsplit("#", 1)[-1])

    if blocks is None:
        return None
    return replace(document, children=blocks)


def _heading_section(blocks: tuple[Block, ...], title: str) -> tuple[Block, ...] | None:
    wanted = title.strip().casefold()
    for index, block in enumerate(blocks):
        if not isinstance(block, Heading):
            continue
        if plain_text(block.children).strip().casefold() != wanted:
            continue
        end = index + 1
        while end < len(blocks):
            following = blocks[end]
            if isinstance(following, Heading) and following.depth <= block.depth:
                break
            end += 1
        return blocks[index:end]
    return None


def _anchors(children: tuple, identifier: str) -> bool:
    return any(
        isinstance(child, BlockReference) and child.identifier == identifier
        for child in children
    )


def _is_bare_anchor(block: Block, identifier: str) -> bool:
    if not isinstance(block, Paragraph):
        return False
    rest = [
        child
        for child in block.children
        if not isinstance(child, (SoftBreak, BlockReference))
        and not (isinstance(child, Text) and not child.value.strip())
    ]
    return not rest and _anchors(block.children, identifier)


def _find_block(blocks: tuple[Block, ...], identifier: str) -> Block | None:
    for index, block in enumerate(blocks):
        # `^id` on its own line anchors the block right above it
        if _is_bare_anchor(block, identifier):
            if index:
                return blocks[index - 1]
            continue

        if isinstance(block, (Paragraph, Heading)) and _anchors(block.children, identifier):
            return block

        if isinstance(block, ListBlock):
            for item in block.items:
                first = item.children[0] if item.children else None
                if isinstance(first, Paragraph) and _anchors(first.children, identifier):
                    return replace(block, items=(item,), start=1)
                nested = _find_block(item.children, identifier)
                if nested is not None:
                    return nested

        if isinstance(block, (BlockQuote, Callout)):
            nested = _find_block(block.children, identifier)
            if nested is not None:
                return nested
    return None
