"""Rendering of standalone ```typst code blocks through the render cache."""

from __future__ import annotations

import hashlib
import logging
from typing import Awaitable, Callable

from obsidian_typst.cache import RenderCache
from obsidian_typst.config.models import CodeBlockConfig

logger = logging.getLogger(__name__)

CompileFn = Callable[[str], Awaitable[str]]


def snippet_key(source: str) -> str:
    return hashlib.sha256(source.encode()).hexdigest()


class SnippetRenderer:
    """Compiles Typst snippets, reusing earlier output for identical source.

    ``compile`` is the injected compiler (e.g. a Typst-to-SVG renderer).
    Failed compilations are not cached.
    """

    def __init__(self, compile: CompileFn, cache: RenderCache | None = None) -> None:
        self._compile = compile
        self.cache = cache or RenderCache()

    async def render(self, source: str) -> str:
        source = source.strip()
        key = snippet_key(source)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("snippet cache hit %s", key[:12])
            return cached

        output = await self._compile(source)
        self.cache.set(key, output)
        return output

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> dict[str, int]:
        return {"size": self.cache.size(), "max_size": self.cache.max_size}


def snippet_renderer(config: CodeBlockConfig, compile: CompileFn) -> SnippetRenderer | None:
    """Renderer sized from ``code_blocks`` settings, or None when disabled."""
    if not config.enabled:
        return None
    return SnippetRenderer(compile, RenderCache(config.cache_size))
