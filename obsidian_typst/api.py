"""Public conversion API and its explicit service registration."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

from obsidian_typst.embeds.environment import Environment
from obsidian_typst.models import (
    ConversionError,
    ConversionOptions,
    NoteRef,
    SynchronousConversionError,
)
from obsidian_typst.orchestrator import TransformOrchestrator, validate_options

logger = logging.getLogger(__name__)

SERVICE_NAME = "typst"


class TypstAPI:
    """What automation and other plugins call to convert notes.

    ``defaults`` are option values applied under whatever a caller passes,
    typically taken from the loaded configuration.
    """

    def __init__(
        self,
        orchestrator: TransformOrchestrator | None = None,
        environment: Environment | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        self.orchestrator = orchestrator or TransformOrchestrator()
        self.environment = environment or Environment.detached()
        self.defaults = dict(defaults or {})

    def convert(self, input: str | NoteRef, options: Any = None) -> str:
        raise SynchronousConversionError()

    async def convert_async(
        self,
        input: str | NoteRef,
        options: ConversionOptions | Mapping[str, Any] | None = None,
    ) -> str:
        logger.debug(
            "convert_async called with %s input",
            "note" if isinstance(input, NoteRef) else "string",
        )

        if isinstance(input, str):
            if not input:
                logger.warning("empty markdown string provided")
                return ""
        elif isinstance(input, NoteRef):
            if not input.path.lower().endswith(".md"):
                raise ConversionError(
                    f"Invalid note type: {input.path!r}. Only markdown (.md) notes are supported."
                )
        else:
            raise ConversionError("Invalid input: expected a markdown string or a NoteRef")

        try:
            opts = self._merge_options(options)
            if opts.script_name and opts.strategy != "script":
                logger.warning("script_name %r ignored: strategy is %s", opts.script_name, opts.strategy)
            return await self.orchestrator.convert(input, opts, self.environment)
        except ConversionError as exc:
            logger.error("conversion failed: %s", exc)
            raise

    def list_scripts(self) -> list[str]:
        return self.orchestrator.script_store.list_scripts()

    def _merge_options(self, options: ConversionOptions | Mapping[str, Any] | None) -> ConversionOptions:
        if isinstance(options, ConversionOptions):
            return options
        if options is not None and not isinstance(options, Mapping):
            return validate_options(options)
        return validate_options({**self.defaults, **(options or {})})


class ServiceRegistry:
    """Name -> service handles owned by the embedding application."""

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, service: Any) -> None:
        with self._lock:
            if name in self._services:
                raise ValueError(f"Service {name!r} is already registered")
            self._services[name] = service
        logger.debug("registered service %s", name)

    def unregister(self, name: str) -> None:
        with self._lock:
            removed = self._services.pop(name, None)
        if removed is not None:
            logger.debug("unregistered service %s", name)

    def get(self, name: str) -> Any:
        with self._lock:
            try:
                return self._services[name]
            except KeyError:
                raise LookupError(f"No service registered as {name!r}") from None

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._services


class TypstService:
    """Ties a TypstAPI's registration to the application lifecycle."""

    def __init__(self, registry: ServiceRegistry, api: TypstAPI, name: str = SERVICE_NAME) -> None:
        self.registry = registry
        self.api = api
        self.name = name
        self._started = False

    def start(self) -> TypstAPI:
        if not self._started:
            self.registry.register(self.name, self.api)
            self._started = True
        return self.api

    def stop(self) -> None:
        if self._started:
            self.registry.unregister(self.name)
            self._started = False

    def __enter__(self) -> TypstAPI:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
