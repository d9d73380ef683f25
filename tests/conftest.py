"""Shared test fixtures for obsidian-typst."""

import pytest

from obsidian_typst.embeds import Environment, ResolvedLink
from obsidian_typst.models import ConversionOptions
from obsidian_typst.transformer import StructuralTransformer


def _extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[-1] if "." in name else ""


def make_memory_environment(files: dict[str, str | None], current_path: str = "Home.md") -> Environment:
    """In-memory vault. A value of None marks a binary (non-markdown) file."""

    async def read(path: str) -> str:
        content = files.get(path)
        if content is None:
            raise FileNotFoundError(f"File not found: {path}")
        return content

    async def resolve_link(raw_target: str, source_path: str) -> ResolvedLink | None:
        normalized = raw_target.strip()
        for candidate in (normalized, f"{normalized}.md"):
            if candidate in files:
                extension = _extension(candidate)
                return ResolvedLink(
                    path=candidate,
                    extension=extension,
                    is_markdown=extension.lower() == "md",
                )
        return None

    return Environment(read=read, resolve_link=resolve_link, current_path=current_path)


@pytest.fixture
def make_environment():
    return make_memory_environment


@pytest.fixture
def transformer():
    return StructuralTransformer()


@pytest.fixture
def convert(transformer):
    """Structural conversion with an optional in-memory vault."""

    async def _convert(text: str, files: dict[str, str | None] | None = None, **options) -> str:
        environment = make_memory_environment(files or {})
        return await transformer.transform(text, ConversionOptions(**options), environment)

    return _convert


@pytest.fixture
def vault_dir(tmp_path):
    """A small on-disk vault."""
    root = tmp_path / "vault"
    (root / "notes").mkdir(parents=True)
    (root / "assets").mkdir()
    (root / ".obsidian").mkdir()
    (root / "notes" / "report.md").write_text(
        "---\ntags: [bon-typst]\n---\n# Report\n\nSee ![[chapter]]\n",
        encoding="utf-8",
    )
    (root / "notes" / "chapter.md").write_text("## Chapter\n\nChapter body.\n", encoding="utf-8")
    (root / "notes" / "draft.md").write_text("# Draft\n\nNot tagged.\n", encoding="utf-8")
    (root / "assets" / "chart.png").write_bytes(b"\x89PNG")
    (root / ".obsidian" / "workspace.md").write_text("internal", encoding="utf-8")
    return root
