"""Parsing Obsidian-flavoured markdown into a typed document tree."""

from obsidian_typst.syntax.parser import MarkdownParser, create_markdown, read_front_matter
from obsidian_typst.syntax.references import EmbedReference, parse_embed_reference
from obsidian_typst.syntax.rules import obsidian_plugin
from obsidian_typst.syntax.sections import select_section

__all__ = [
    "EmbedReference",
    "MarkdownParser",
    "create_markdown",
    "obsidian_plugin",
    "parse_embed_reference",
    "read_front_matter",
    "select_section",
]
