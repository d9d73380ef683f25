"""Capabilities a conversion call uses to reach other notes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable


@dataclass(frozen=True)
class ResolvedLink:
    """A link target resolved to a concrete file."""

    path: str
    extension: str
    is_markdown: bool


ReadFn = Callable[[str], Awaitable[str]]
ResolveFn = Callable[[str, str], Awaitable["ResolvedLink | None"]]


async def _read_nothing(path: str) -> str:
    raise FileNotFoundError(path)


async def _resolve_nothing(raw_target: str, source_path: str) -> ResolvedLink | None:
    return None


def expansion_key(path: str, section: str | None = None) -> str:
    return f"{path}#{section}" if section else path


@dataclass(frozen=True)
class Environment:
    """Read/resolve capabilities plus the position in the embed chain.

    ``ancestry`` holds the expansion keys (``path`` or ``path#section``) of
    every document being expanded above the current one.
    """

    read: ReadFn
    resolve_link: ResolveFn
    current_path: str = ""
    current_section: str | None = None
    ancestry: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def detached(cls, current_path: str = "") -> Environment:
        """An environment with no vault: every embed becomes a missing placeholder."""
        return cls(read=_read_nothing, resolve_link=_resolve_nothing, current_path=current_path)

    @property
    def key(self) -> str:
        return expansion_key(self.current_path, self.current_section)

    def descend(self, path: str, section: str | None = None) -> Environment:
        """Environment for a document embedded from the current one."""
        ancestry = self.ancestry | {self.key} if self.current_path else self.ancestry
        return replace(self, current_path=path, current_section=section, ancestry=ancestry)

    def on_path(self, path: str, section: str | None = None) -> bool:
        """True when expanding ``path`` here would re-enter a document being expanded."""
        key = expansion_key(path, section)
        return key == self.key or key in self.ancestry

    def with_path(self, path: str) -> Environment:
        return replace(self, current_path=path, current_section=None)
