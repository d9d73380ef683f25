"""Raw code generators."""

from __future__ import annotations

import re

from obsidian_typst.generators.base import RenderChildren
from obsidian_typst.generators.escape import string_literal
from obsidian_typst.syntax.nodes import CodeBlock, InlineCode

MIN_FENCE_LENGTH = 3

_BACKTICK_RUN_RE = re.compile(r"`+")


def fence_for(value: str, fence: str = "```") -> str:
    """Backtick fence at least as long as ``fence`` and longer than any run in ``value``."""
    longest_run = max((len(run) for run in _BACKTICK_RUN_RE.findall(value)), default=0)
    return "`" * max(MIN_FENCE_LENGTH, len(fence), longest_run + 1)


def generate_code_block(node: CodeBlock, render_children: RenderChildren) -> str:
    fence = fence_for(node.value, node.fence)
    return f"{fence}{node.lang}\n{node.value}\n{fence}"


def generate_inline_code(node: InlineCode, render_children: RenderChildren) -> str:
    if "`" in node.value:
        return f"#raw({string_literal(node.value)})"
    return f"`{node.value}`"
