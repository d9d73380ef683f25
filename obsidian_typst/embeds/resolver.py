"""Expansion of ``![[...]]`` embeds into Typst."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from obsidian_typst.embeds.environment import Environment, ResolvedLink
from obsidian_typst.generators.embeds import (
    cycle_placeholder,
    depth_limit_placeholder,
    file_reference,
    missing_placeholder,
    quoted_embed,
)
from obsidian_typst.syntax.nodes import Embed

logger = logging.getLogger(__name__)

# (content, environment, remaining_depth, section) -> rendered body, or None
# when the section does not exist in the content
RenderMarkup = Callable[[str, Environment, int, "str | None"], Awaitable["str | None"]]


class EmbedResolver:
    """Turns one embed into Typst text, recursing into embedded notes.

    Recursion is bounded by ``remaining_depth``, which guarantees termination
    even on cyclic embed graphs. With ``detect_cycles`` on, a note already
    being expanded further up the chain is reported as a cycle straight away.
    Nothing here raises for a bad embed: each failure becomes a placeholder.
    """

    def __init__(self, render_markup: RenderMarkup, detect_cycles: bool = True) -> None:
        self._render_markup = render_markup
        self._detect_cycles = detect_cycles

    async def expand(self, embed: Embed, environment: Environment, remaining_depth: int) -> str:
        reference = embed.reference
        target = reference.target or environment.current_path

        resolved = await self._resolve(target, environment) if target else None
        if resolved is None:
            logger.info("embed target not found: %s (in %s)", reference.raw, environment.current_path or "<string>")
            return missing_placeholder(reference.raw)

        if not resolved.is_markdown:
            return file_reference(resolved.path, resolved.extension, reference)

        if remaining_depth <= 0:
            logger.warning("embed depth limit reached at %s", resolved.path)
            return depth_limit_placeholder(reference.raw)

        if self._detect_cycles and environment.on_path(resolved.path, reference.section):
            logger.warning("embed cycle detected: %s is already being expanded", resolved.path)
            return cycle_placeholder(reference.raw)

        try:
            content = await environment.read(resolved.path)
        except (OSError, LookupError) as exc:
            logger.warning("could not read embed %s: %s", resolved.path, exc)
            return missing_placeholder(reference.raw)

        body = await self._render_markup(
            content,
            environment.descend(resolved.path, reference.section),
            remaining_depth - 1,
            reference.section,
        )
        if body is None:
            logger.info("section %s not found in %s", reference.section, resolved.path)
            return missing_placeholder(reference.raw)

        return quoted_embed(resolved.path, body)

    async def _resolve(self, target: str, environment: Environment) -> ResolvedLink | None:
        try:
            return await environment.resolve_link(target, environment.current_path)
        except (OSError, LookupError) as exc:
            logger.warning("could not resolve embed %s: %s", target, exc)
            return None
