"""markdown-it rules recognizing Obsidian syntax extensions.

Inline rules run ahead of the generic ``link``/``emphasis`` rules because
their delimiters overlap plain link and emphasis syntax. Block-level
extensions (callouts, task items) are recognized by core rules that rewrite
the block token stream before inline parsing starts.
"""

from __future__ import annotations

import re

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.rules_inline import StateInline

# [[target]], [[target|display]], ![[target|attrs]]
_WIKILINK_RE = re.compile(r"(!?)\[\[([^\[\]\n]+)\]\]")
_TAG_RE = re.compile(r"#([\w/-]+)")
_BLOCK_REF_RE = re.compile(r"\^([A-Za-z0-9-]+)[ \t]*")
_CALLOUT_RE = re.compile(r"^\[!([^\]\s]+)\]([+-]?)[ \t]*(.*)$")
_TASK_RE = re.compile(r"^\[([ xX])\](?:[ \t]+|$)")


def wikilink_rule(state: StateInline, silent: bool) -> bool:
    start = state.pos
    if state.src[start] not in "![":
        return False

    match = _WIKILINK_RE.match(state.src, start, state.posMax)
    if match is None:
        return False

    inner = match.group(2)
    target, _, display = inner.partition("|")
    if not target.strip():
        return False

    if not silent:
        if match.group(1):
            token = state.push("embed", "", 0)
        else:
            token = state.push("wikilink", "", 0)
            token.meta = {"target": target.strip(), "display": display.strip() or None}
        token.content = inner
        token.markup = match.group(0)

    state.pos = match.end()
    return True


def tag_rule(state: StateInline, silent: bool) -> bool:
    start = state.pos
    src = state.src
    if src[start] != "#":
        return False
    # A tag starts a word: `a#b` and URL fragments are plain text
    if start > 0 and not src[start - 1].isspace():
        return False

    match = _TAG_RE.match(src, start, state.posMax)
    if match is None:
        return False
    name = match.group(1)
    if not any(ch.isalpha() for ch in name):
        return False

    if not silent:
        token = state.push("obsidian_tag", "", 0)
        token.content = name
        token.markup = "#"

    state.pos = match.end()
    return True


def block_reference_rule(state: StateInline, silent: bool) -> bool:
    start = state.pos
    src = state.src
    if src[start] != "^":
        return False
    if start > 0 and not src[start - 1].isspace():
        return False

    # Only a trailing anchor counts
    match = _BLOCK_REF_RE.fullmatch(src, start, state.posMax)
    if match is None:
        return False

    if not silent:
        token = state.push("block_reference", "", 0)
        token.content = match.group(1)
        token.markup = "^"

    state.pos = match.end()
    return True


def highlight_rule(state: StateInline, silent: bool) -> bool:
    start = state.pos
    src = state.src
    if not src.startswith("==", start):
        return False

    content_start = start + 2
    if content_start >= state.posMax or src[content_start].isspace():
        return False

    content_end = src.find("==", content_start, state.posMax)
    if content_end == -1 or content_end == content_start:
        return False
    if src[content_end - 1].isspace() or "\n\n" in src[content_start:content_end]:
        return False

    if not silent:
        old_max = state.posMax
        token = state.push("highlight_open", "mark", 1)
        token.markup = "=="
        state.pos = content_start
        state.posMax = content_end
        state.md.inline.tokenize(state)
        token = state.push("highlight_close", "mark", -1)
        token.markup = "=="
        state.posMax = old_max

    state.pos = content_end + 2
    return True


def callout_rule(state: StateCore) -> None:
    """Tag ``> [!kind] title`` block quotes and strip the marker line."""
    tokens = state.tokens
    drop: set[int] = set()

    for index, token in enumerate(tokens):
        if token.type != "blockquote_open" or index + 3 >= len(tokens):
            continue
        paragraph, inline = tokens[index + 1], tokens[index + 2]
        if paragraph.type != "paragraph_open" or inline.type != "inline":
            continue

        first, _, rest = inline.content.partition("\n")
        match = _CALLOUT_RE.match(first.strip())
        if match is None:
            continue

        kind, fold, title = match.groups()
        token.meta = {**token.meta, "callout": kind, "fold": fold, "title": title.strip() or None}
        if rest.strip():
            inline.content = rest
        else:
            drop.update((index + 1, index + 2, index + 3))

    if drop:
        state.tokens = [t for i, t in enumerate(tokens) if i not in drop]


def task_rule(state: StateCore) -> None:
    """Record ``[ ]``/``[x]`` task state on list items."""
    tokens = state.tokens
    for index, token in enumerate(tokens):
        if token.type != "list_item_open" or index + 2 >= len(tokens):
            continue
        if tokens[index + 1].type != "paragraph_open" or tokens[index + 2].type != "inline":
            continue

        inline = tokens[index + 2]
        match = _TASK_RE.match(inline.content)
        if match is None:
            continue
        token.meta = {**token.meta, "checked": match.group(1) in "xX"}
        inline.content = inline.content[match.end():]


def obsidian_plugin(md: MarkdownIt) -> None:
    """Register every Obsidian extension rule on ``md``."""
    md.inline.ruler.before("link", "obsidian_wikilink", wikilink_rule)
    md.inline.ruler.before("emphasis", "obsidian_highlight", highlight_rule)
    md.inline.ruler.before("emphasis", "obsidian_tag", tag_rule)
    md.inline.ruler.before("emphasis", "obsidian_block_ref", block_reference_rule)
    md.core.ruler.after("block", "obsidian_callout", callout_rule)
    md.core.ruler.after("obsidian_callout", "obsidian_task", task_rule)
