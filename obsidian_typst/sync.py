"""VaultExporter: writes ``.typ`` files next to tagged notes, once or on change."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import signal
import threading
import time
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from obsidian_typst.models import NoteRef
from obsidian_typst.orchestrator import TransformOrchestrator, build_typst_path, should_convert
from obsidian_typst.syntax.parser import read_front_matter
from obsidian_typst.vault import FileSystemVault

logger = logging.getLogger(__name__)


class ExportError(BaseModel):
    file: str
    error: str


class ExportReport(BaseModel):
    exported: int = 0
    skipped: int = 0
    errors: list[ExportError] = []
    duration: float = 0.0


class VaultExporter:
    def __init__(
        self,
        vault: FileSystemVault,
        orchestrator: TransformOrchestrator,
        trigger_tags: Iterable[str] = ("bon-typst",),
        options: Mapping[str, Any] | None = None,
        debounce: float = 0.5,
    ):
        """
        Args:
            vault: Vault whose notes are exported
            orchestrator: Runs each conversion
            trigger_tags: Front matter tags that opt a note into export
            options: ConversionOptions values applied to every note
            debounce: Seconds to ignore repeated change events for one file
        """
        self.vault = vault
        self.orchestrator = orchestrator
        self.trigger_tags = [tag.lower() for tag in trigger_tags]
        self.options = dict(options or {})
        self.debounce = debounce
        self._content_hashes: dict[str, str] = {}

    # -- Public API ----------------------------------------------------------

    async def export(self) -> ExportReport:
        """One-shot export: convert every tagged note whose text changed.

        Change detection hashes the note itself; edits to notes it embeds do
        not make it stale.
        """
        start = time.monotonic()
        report = ExportReport()

        for rel in self.vault.iter_notes():
            try:
                content = await self.vault.read(rel)
                if not should_convert(rel, read_front_matter(content), self.trigger_tags):
                    continue

                content_hash = hashlib.sha256(content.encode()).hexdigest()
                if self._content_hashes.get(rel) == content_hash:
                    report.skipped += 1
                    continue

                await self._convert_and_write(rel)
                self._content_hashes[rel] = content_hash
                report.exported += 1
            except Exception as exc:
                report.errors.append(ExportError(file=rel, error=str(exc)))
                logger.error("Error exporting %s: %s", rel, exc)

        report.duration = time.monotonic() - start
        return report

    async def export_note(self, rel: str) -> bool:
        """Convert and write a single note if it is tagged. Returns True when written."""
        try:
            content = await self.vault.read(rel)
            if not should_convert(rel, read_front_matter(content), self.trigger_tags):
                logger.debug("Not tagged for export: %s", rel)
                return False
            await self._convert_and_write(rel)
            self._content_hashes[rel] = hashlib.sha256(content.encode()).hexdigest()
            return True
        except Exception as exc:
            logger.error("Error exporting %s: %s", rel, exc)
            return False

    def watch(self, stop: threading.Event | None = None) -> None:
        """File watcher mode: re-export notes as they change until stopped."""
        from watchdog.events import PatternMatchingEventHandler
        from watchdog.observers import Observer

        exporter = self

        class NoteHandler(PatternMatchingEventHandler):
            def __init__(self):
                super().__init__(patterns=["*.md"], ignore_directories=True)
                self._last_event: dict[str, float] = {}

            def on_modified(self, event):
                self._handle(event.src_path)

            def on_created(self, event):
                self._handle(event.src_path)

            def on_moved(self, event):
                self._handle(event.dest_path)

            def on_deleted(self, event):
                rel = exporter._relative(event.src_path)
                if rel is None:
                    return
                exporter._content_hashes.pop(rel, None)
                typst_file = exporter.vault.absolute(build_typst_path(rel))
                if typst_file.exists():
                    typst_file.unlink()
                    logger.info("Deleted: %s", typst_file)

            def _handle(self, src_path):
                rel = exporter._relative(src_path)
                if rel is None or not rel.lower().endswith(".md"):
                    return
                now = time.time()
                last = self._last_event.get(rel, 0)
                if now - last < exporter.debounce:
                    return
                self._last_event[rel] = now
                asyncio.run(exporter.export_note(rel))

        observer = Observer()
        observer.schedule(NoteHandler(), str(self.vault.root), recursive=True)
        observer.start()
        logger.info("Watching %s for changes... (Ctrl+C to stop)", self.vault.root)

        if stop is None:
            stop = threading.Event()

            def _signal_handler(sig, frame):
                stop.set()

            signal.signal(signal.SIGINT, _signal_handler)
            signal.signal(signal.SIGTERM, _signal_handler)

        try:
            while not stop.wait(1.0):
                pass
        finally:
            observer.stop()
            observer.join()
            logger.info("Watcher stopped.")

    # -- Internals -----------------------------------------------------------

    async def _convert_and_write(self, rel: str) -> Path:
        options = {**self.options, "current_document_path": rel}
        typst = await self.orchestrator.convert(NoteRef(rel), options, self.vault.environment(rel))

        typst_rel = build_typst_path(rel)
        target = self.vault.absolute(typst_rel)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(typst, encoding="utf-8")
        logger.info("Exported: %s -> %s", rel, typst_rel)
        return target

    def _relative(self, src_path: str | bytes) -> str | None:
        rel = Path(os.path.relpath(os.fsdecode(src_path), self.vault.root))
        if rel.parts and (rel.parts[0] == ".." or any(part in self.vault.ignore for part in rel.parts)):
            return None
        return rel.as_posix()
