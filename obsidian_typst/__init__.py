"""Convert Obsidian-flavoured markdown notes to Typst."""

from obsidian_typst.api import ServiceRegistry, TypstAPI, TypstService
from obsidian_typst.cache import RenderCache
from obsidian_typst.embeds import Environment, ResolvedLink
from obsidian_typst.models import (
    ConversionError,
    ConversionOptions,
    InvalidOptionsError,
    NoteRef,
    ScriptExecutionError,
    SynchronousConversionError,
)
from obsidian_typst.orchestrator import TransformOrchestrator
from obsidian_typst.snippets import SnippetRenderer, snippet_renderer
from obsidian_typst.transformer import StructuralTransformer

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "ConversionOptions",
    "Environment",
    "InvalidOptionsError",
    "NoteRef",
    "RenderCache",
    "ResolvedLink",
    "ScriptExecutionError",
    "ServiceRegistry",
    "SnippetRenderer",
    "StructuralTransformer",
    "SynchronousConversionError",
    "TransformOrchestrator",
    "TypstAPI",
    "TypstService",
    "snippet_renderer",
]
