"""One Typst generator per document node kind."""

from obsidian_typst.generators.base import Generator, RenderChildren
from obsidian_typst.generators.blocks import (
    generate_blockquote,
    generate_heading,
    generate_html_block,
    generate_paragraph,
    generate_thematic_break,
)
from obsidian_typst.generators.callouts import generate_callout
from obsidian_typst.generators.code import generate_code_block, generate_inline_code
from obsidian_typst.generators.escape import escape_line_start, escape_text, string_literal
from obsidian_typst.generators.inline import (
    generate_block_reference,
    generate_embed,
    generate_emphasis,
    generate_footnote_reference,
    generate_hard_break,
    generate_highlight,
    generate_html_inline,
    generate_image,
    generate_link,
    generate_soft_break,
    generate_strikethrough,
    generate_strong,
    generate_tag,
    generate_text,
    generate_wiki_link,
)
from obsidian_typst.generators.lists import generate_list, generate_list_item
from obsidian_typst.generators.tables import (
    generate_table,
    generate_table_cell,
    generate_table_row,
)

__all__ = [
    "Generator",
    "RenderChildren",
    "escape_line_start",
    "escape_text",
    "generate_block_reference",
    "generate_blockquote",
    "generate_callout",
    "generate_code_block",
    "generate_embed",
    "generate_emphasis",
    "generate_footnote_reference",
    "generate_hard_break",
    "generate_heading",
    "generate_highlight",
    "generate_html_block",
    "generate_html_inline",
    "generate_image",
    "generate_inline_code",
    "generate_link",
    "generate_list",
    "generate_list_item",
    "generate_paragraph",
    "generate_soft_break",
    "generate_strikethrough",
    "generate_strong",
    "generate_table",
    "generate_table_cell",
    "generate_table_row",
    "generate_tag",
    "generate_text",
    "generate_thematic_break",
    "generate_wiki_link",
    "string_literal",
]
