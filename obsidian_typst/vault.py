"""Filesystem-backed vault: the Environment used outside of a host application."""

from __future__ import annotations

import asyncio
import logging
import posixpath
from pathlib import Path
from typing import Iterable, Iterator

from obsidian_typst.embeds.environment import Environment, ResolvedLink

logger = logging.getLogger(__name__)

DEFAULT_IGNORE = (".obsidian", ".trash", ".git")


class FileSystemVault:
    """A directory of notes addressed by vault-relative POSIX paths.

    Link resolution follows Obsidian: relative to the linking note first,
    then from the vault root, then by shortest matching path anywhere in the
    vault. Targets without an extension are notes (``.md``).
    """

    def __init__(self, root: str | Path, ignore: Iterable[str] = DEFAULT_IGNORE) -> None:
        self.root = Path(root)
        self.ignore = frozenset(ignore)

    def environment(self, current_path: str = "") -> Environment:
        return Environment(read=self.read, resolve_link=self.resolve_link, current_path=current_path)

    def absolute(self, path: str) -> Path:
        """Filesystem path for ``path``, refusing anything outside the vault."""
        candidate = (self.root / path).resolve()
        if not candidate.is_relative_to(self.root.resolve()):
            raise PermissionError(f"Path traversal detected: {path}")
        return candidate

    async def read(self, path: str) -> str:
        return await asyncio.to_thread(self.absolute(path).read_text, encoding="utf-8")

    async def resolve_link(self, raw_target: str, source_path: str) -> ResolvedLink | None:
        return await asyncio.to_thread(self._resolve, raw_target, source_path)

    def iter_files(self) -> Iterator[str]:
        """Vault-relative paths of every file, skipping ignored directories."""
        for path in sorted(self.root.rglob("*")):
            rel = path.relative_to(self.root)
            if any(part in self.ignore for part in rel.parts):
                continue
            if path.is_file():
                yield rel.as_posix()

    def iter_notes(self) -> Iterator[str]:
        return (path for path in self.iter_files() if path.lower().endswith(".md"))

    # -- Internals -----------------------------------------------------------

    def _resolve(self, raw_target: str, source_path: str) -> ResolvedLink | None:
        target = raw_target.strip().replace("\\", "/").lstrip("/")
        if not target:
            return None

        names = [target] if posixpath.splitext(target)[1] else []
        if not target.lower().endswith(".md"):
            names.append(f"{target}.md")
        names.extend(name for name in [target] if name not in names)

        source_dir = posixpath.dirname(source_path)
        for name in names:
            for base in (source_dir, ""):
                rel = posixpath.normpath(posixpath.join(base, name))
                if rel == ".." or rel.startswith("../"):
                    continue
                if (self.root / rel).is_file():
                    return self._link(rel)

        # Shortest path match anywhere in the vault
        for name in names:
            matches = [path for path in self.iter_files() if path == name or path.endswith(f"/{name}")]
            if matches:
                best = min(matches, key=lambda path: (path.count("/"), path))
                return self._link(best)

        logger.debug("unresolved link %s from %s", raw_target, source_path or "<vault root>")
        return None

    @staticmethod
    def _link(rel: str) -> ResolvedLink:
        extension = posixpath.splitext(rel)[1].lstrip(".").lower()
        return ResolvedLink(path=rel, extension=extension, is_markdown=extension == "md")
