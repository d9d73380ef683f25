"""Typst fragments produced for resolved and unresolved embeds."""

from __future__ import annotations

import posixpath

from obsidian_typst.generators.escape import escape_text, string_literal
from obsidian_typst.syntax.references import EmbedReference

# Extensions Typst's image() can load
IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "svg", "webp", "pdf"})


def _placeholder(label: str, color: str, raw: str) -> str:
    return (
        f"#block(stroke: 1pt + {color}, inset: 6pt, radius: 2pt)"
        f"[#text(fill: {color})[{label}:] #raw({string_literal(raw)})]"
    )


def missing_placeholder(raw: str) -> str:
    return _placeholder("Missing embed", "red", raw)


def depth_limit_placeholder(raw: str) -> str:
    return _placeholder("Embed depth limit reached", "orange", raw)


def cycle_placeholder(raw: str) -> str:
    return _placeholder("Embed cycle detected", "purple", raw)


def file_reference(path: str, extension: str, reference: EmbedReference) -> str:
    """``#image`` for images and PDFs, a plain ``#link`` for any other file."""
    if extension.lower().lstrip(".") not in IMAGE_EXTENSIONS:
        return f"#link({string_literal(path)})[{escape_text(posixpath.basename(path))}]"

    args = [string_literal(path)]
    if reference.width:
        args.append(f"width: {reference.width}")
    if reference.page is not None:
        args.append(f"page: {reference.page}")
    return f"#image({', '.join(args)})"


def quoted_embed(path: str, body: str) -> str:
    """Embedded note content as a block quote headed by its source path."""
    lines = ["#quote(block: true)[", f"#smallcaps({string_literal(path)})"]
    if body.strip():
        lines.extend(["", body.rstrip("\n")])
    lines.append("]")
    return "\n".join(lines)
