"""Transform script storage."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from obsidian_typst.models import DEFAULT_SCRIPT_NAME

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".py"

DEFAULT_SCRIPT = '''"""Default script: structural conversion under a document template.

`content` is the note's markdown. `convert_to_typst` runs the built-in
structural converter and returns Typst source.
"""

TEMPLATE = """#set page(
  paper: "a4",
  margin: (x: 1.8cm, y: 1.5cm),
)

#set text(
  size: 10.5pt,
)

#set par(
  justify: true,
  leading: 0.65em,
)

"""


async def transform(content):
    return TEMPLATE + await convert_to_typst(content)
'''


def normalize_script_name(name: str | None) -> str:
    """Strip whitespace and a trailing ``.py``; empty names mean the default."""
    normalized = (name or "").strip()
    if normalized.endswith(SCRIPT_SUFFIX):
        normalized = normalized[: -len(SCRIPT_SUFFIX)].strip()
    return normalized or DEFAULT_SCRIPT_NAME


@runtime_checkable
class ScriptStore(Protocol):
    """Where transform scripts come from."""

    def load_script(self, name: str) -> str: ...

    def list_scripts(self) -> list[str]: ...


class DirectoryScriptStore:
    """Loads ``<directory>/<name>.py``, falling back to the built-in default.

    ``directory`` may be None, in which case only the default script exists.
    Loaded sources are cached; call ``invalidate`` after editing scripts.
    """

    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory is not None else None
        self._cache: dict[str, str] = {}

    def load_script(self, name: str) -> str:
        normalized = normalize_script_name(name)
        if normalized in self._cache:
            return self._cache[normalized]

        path = self._script_path(normalized)
        if path is None or not path.is_file():
            if normalized != DEFAULT_SCRIPT_NAME:
                logger.info("script %r not found, using default", normalized)
                return self.load_script(DEFAULT_SCRIPT_NAME)
            return DEFAULT_SCRIPT

        source = path.read_text(encoding="utf-8")
        self._cache[normalized] = source
        return source

    def list_scripts(self) -> list[str]:
        names = {DEFAULT_SCRIPT_NAME}
        if self.directory is not None and self.directory.is_dir():
            names.update(path.stem for path in self.directory.glob(f"*{SCRIPT_SUFFIX}") if path.is_file())
        return sorted(names)

    def invalidate(self) -> None:
        self._cache.clear()

    def _script_path(self, name: str) -> Path | None:
        if self.directory is None or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return self.directory / f"{name}{SCRIPT_SUFFIX}"
