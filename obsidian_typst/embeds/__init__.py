"""Embed resolution: environments and the recursive resolver."""

from obsidian_typst.embeds.environment import Environment, ResolvedLink
from obsidian_typst.embeds.resolver import EmbedResolver

__all__ = ["EmbedResolver", "Environment", "ResolvedLink"]
