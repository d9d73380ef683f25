"""Single entry point choosing between the structural and script strategies."""

from __future__ import annotations

import asyncio
import logging
import posixpath
import re
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from obsidian_typst.embeds.environment import Environment
from obsidian_typst.models import (
    DEFAULT_SCRIPT_NAME,
    ConversionError,
    ConversionOptions,
    InvalidOptionsError,
    NoteRef,
    ScriptExecutionError,
)
from obsidian_typst.sandbox.runner import ScriptRunner
from obsidian_typst.scripts.store import DirectoryScriptStore, ScriptStore, normalize_script_name
from obsidian_typst.syntax.parser import read_front_matter
from obsidian_typst.transformer import StructuralTransformer

logger = logging.getLogger(__name__)

SCRIPT_FRONT_MATTER_KEY = "typst-script"
_TAG_SPLIT_RE = re.compile(r"[,\s]+")


def validate_options(options: ConversionOptions | Mapping[str, Any] | None) -> ConversionOptions:
    """Coerce caller options into ``ConversionOptions`` or raise InvalidOptionsError."""
    if options is None:
        return ConversionOptions()
    if isinstance(options, ConversionOptions):
        return options
    if not isinstance(options, Mapping):
        raise InvalidOptionsError(f"expected a mapping of options, got {type(options).__name__}")
    try:
        return ConversionOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise InvalidOptionsError(str(exc)) from exc


def extract_tags(front_matter: Mapping[str, Any] | None) -> list[str]:
    """Front matter ``tags`` as lowercase names, from a list or a delimited string."""
    if not front_matter:
        return []
    raw = front_matter.get("tags")
    if isinstance(raw, str):
        candidates = _TAG_SPLIT_RE.split(raw)
    elif isinstance(raw, (list, tuple)):
        candidates = [tag for tag in raw if isinstance(tag, str)]
    else:
        return []
    return [tag.strip().lstrip("#").lower() for tag in candidates if tag.strip().lstrip("#")]


def should_convert(path: str, front_matter: Mapping[str, Any] | None, trigger_tags: Iterable[str]) -> bool:
    """Only markdown notes tagged with one of ``trigger_tags`` are converted."""
    if not path.lower().endswith(".md"):
        return False
    triggers = {tag.lower() for tag in trigger_tags}
    return any(tag in triggers for tag in extract_tags(front_matter))


def select_script(
    path: str,
    front_matter: Mapping[str, Any] | None,
    template_mapping: Mapping[str, str] | None = None,
    explicit: str | None = None,
) -> str:
    """Explicit name, then front matter ``typst-script``, then the folder mapping."""
    if explicit and explicit.strip():
        return normalize_script_name(explicit)

    chosen = (front_matter or {}).get(SCRIPT_FRONT_MATTER_KEY)
    if isinstance(chosen, str) and chosen.strip():
        return normalize_script_name(chosen)

    folder = posixpath.dirname(path)
    mapping = template_mapping or {}
    if folder and mapping.get(folder):
        return normalize_script_name(mapping[folder])

    return DEFAULT_SCRIPT_NAME


def build_typst_path(path: str) -> str:
    """``notes/a.md`` -> ``notes/a.typ``; paths without an extension gain one."""
    stem, extension = posixpath.splitext(path)
    if not extension:
        return f"{path}.typ"
    return f"{stem}.typ"


class TransformOrchestrator:
    """Runs one conversion with the structural or the script strategy."""

    def __init__(
        self,
        transformer: StructuralTransformer | None = None,
        runner: ScriptRunner | None = None,
        script_store: ScriptStore | None = None,
        template_mapping: Mapping[str, str] | None = None,
    ) -> None:
        self.transformer = transformer or StructuralTransformer()
        self.runner = runner or ScriptRunner()
        self.script_store = script_store or DirectoryScriptStore()
        self.template_mapping = dict(template_mapping or {})

    async def convert(
        self,
        input: str | NoteRef,
        options: ConversionOptions | Mapping[str, Any] | None = None,
        environment: Environment | None = None,
    ) -> str:
        opts = validate_options(options)

        path = input.path if isinstance(input, NoteRef) else opts.current_document_path
        if environment is None:
            environment = Environment.detached()
        if path:
            environment = environment.with_path(path)
            opts = opts.model_copy(update={"current_document_path": path})

        if isinstance(input, NoteRef):
            try:
                text = await environment.read(input.path)
            except (OSError, LookupError) as exc:
                raise ConversionError(f"Could not read note {input.path}: {exc}") from exc
        else:
            text = input

        if opts.strategy == "script":
            return await self._run_script(text, opts, environment)

        logger.debug("structural conversion of %s", path or "<string>")
        return await self.transformer.transform(text, opts, environment)

    async def _run_script(self, text: str, options: ConversionOptions, environment: Environment) -> str:
        name = select_script(
            options.current_document_path or "",
            read_front_matter(text),
            self.template_mapping,
            explicit=options.script_name,
        )
        try:
            source = await asyncio.to_thread(self.script_store.load_script, name)
        except OSError as exc:
            raise ScriptExecutionError(f"could not load script {name!r}: {exc}", name) from exc

        async def convert_to_typst(content: str) -> str:
            return await self.transformer.transform(content, options, environment)

        logger.debug("running script %s for %s", name, options.current_document_path or "<string>")
        return await self.runner.run(source, text, convert_to_typst, script_name=name)
