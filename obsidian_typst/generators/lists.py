"""List generator."""

from __future__ import annotations

from obsidian_typst.generators.base import RenderChildren
from obsidian_typst.syntax.nodes import ListBlock, ListItem

ITEM_INDENT = "  "

_CHECKBOXES = {True: "[x]", False: "[ ]"}
_ENHANCED_CHECKBOXES = {True: "☑", False: "☐"}


def _marker(node: ListBlock, position: int) -> str:
    if not node.ordered:
        return "-"
    if position == 0 and node.start != 1:
        return f"{node.start}."
    return "+"


def _format_item(
    item: ListItem,
    marker: str,
    render_children: RenderChildren,
) -> str:
    content = render_children(item.children, indent=ITEM_INDENT).strip()
    if item.checked is not None:
        boxes = _ENHANCED_CHECKBOXES if render_children.checkbox_enhancement else _CHECKBOXES
        content = f"{boxes[item.checked]} {content}"
    return f"{marker} {content}".rstrip()


def generate_list(node: ListBlock, render_children: RenderChildren) -> str:
    """Render ``node`` one item per line.

    Unordered items use ``-`` and ordered items ``+``; an ordered list that
    does not start at 1 numbers its first item explicitly and lets Typst
    continue from there. Nested blocks come back from ``render_children``
    already indented under their item.
    """
    return "\n".join(
        _format_item(item, _marker(node, position), render_children)
        for position, item in enumerate(node.items)
    )


def generate_list_item(node: ListItem, render_children: RenderChildren) -> str:
    # Only reached for an item outside a list, which the parser never builds
    return _format_item(node, "-", render_children)
