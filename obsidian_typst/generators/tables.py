"""Table generator."""

from __future__ import annotations

from obsidian_typst.generators.base import RenderChildren
from obsidian_typst.syntax.nodes import Table, TableCell, TableRow

DEFAULT_ALIGNMENT = "left"


def generate_table_cell(node: TableCell, render_children: RenderChildren) -> str:
    return f"[{render_children(node.children)}]"


def generate_table_row(node: TableRow, render_children: RenderChildren) -> str:
    return ", ".join(generate_table_cell(cell, render_children) for cell in node.cells)


def generate_table(node: Table, render_children: RenderChildren) -> str:
    """Render ``#table(...)`` with one content block per cell.

    The column count comes from the first row. ``align`` is only emitted when
    the source declared an alignment, with unaligned columns as ``left``.
    """
    columns = len(node.rows[0].cells) if node.rows else 0

    align = ""
    if node.align:
        values = [value or DEFAULT_ALIGNMENT for value in node.align]
        values += [DEFAULT_ALIGNMENT] * (columns - len(values))
        align = f"align: ({', '.join(values)}), "

    rows = ",\n".join(generate_table_row(row, render_children) for row in node.rows)
    if not rows:
        return f"#table({align}columns: {columns})"
    return f"#table({align}columns: {columns}, {rows})"
