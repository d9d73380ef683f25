"""Generator contract shared by every node kind."""

from __future__ import annotations

from typing import Any, Callable, Protocol, Sequence, runtime_checkable

from obsidian_typst.syntax.nodes import Embed, FootnoteReference


@runtime_checkable
class RenderChildren(Protocol):
    """Renders a node's children with the full generator set.

    Supplied by the transformer. Calling it renders a sequence of nodes and
    returns already-joined Typst text; ``indent`` prefixes every continuation
    line so nested lists keep their structure.
    """

    checkbox_enhancement: bool

    def __call__(self, nodes: Sequence[Any], indent: str = "") -> str: ...

    def embed(self, node: Embed) -> str: ...

    def footnote(self, reference: FootnoteReference) -> str: ...


Generator = Callable[[Any, RenderChildren], str]
