"""Tests for exporting tagged notes to .typ files."""

import threading
from unittest.mock import AsyncMock, MagicMock

import pytest

from obsidian_typst.models import ConversionError
from obsidian_typst.orchestrator import TransformOrchestrator
from obsidian_typst.scripts import DirectoryScriptStore
from obsidian_typst.sync import ExportReport, VaultExporter
from obsidian_typst.vault import FileSystemVault


@pytest.fixture
def exporter(vault_dir):
    return VaultExporter(
        vault=FileSystemVault(vault_dir),
        orchestrator=TransformOrchestrator(script_store=DirectoryScriptStore()),
    )


class TestExport:
    @pytest.mark.asyncio
    async def test_exports_only_tagged_notes(self, exporter, vault_dir):
        report = await exporter.export()

        assert isinstance(report, ExportReport)
        assert report.exported == 1
        assert report.errors == []
        typst = (vault_dir / "notes" / "report.typ").read_text(encoding="utf-8")
        assert "= Report" in typst
        assert "Chapter body." in typst
        assert not (vault_dir / "notes" / "draft.typ").exists()
        assert not (vault_dir / "notes" / "chapter.typ").exists()

    @pytest.mark.asyncio
    async def test_unchanged_notes_skipped(self, exporter):
        await exporter.export()
        report = await exporter.export()
        assert report.exported == 0
        assert report.skipped == 1

    @pytest.mark.asyncio
    async def test_changed_note_re_exported(self, exporter, vault_dir):
        await exporter.export()
        note = vault_dir / "notes" / "report.md"
        note.write_text(note.read_text(encoding="utf-8") + "\nMore.\n", encoding="utf-8")
        report = await exporter.export()
        assert report.exported == 1
        assert "More." in (vault_dir / "notes" / "report.typ").read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_custom_trigger_tags(self, vault_dir):
        (vault_dir / "notes" / "draft.md").write_text("---\ntags: typst draft\n---\n# Draft\n", encoding="utf-8")
        exporter = VaultExporter(
            vault=FileSystemVault(vault_dir),
            orchestrator=TransformOrchestrator(script_store=DirectoryScriptStore()),
            trigger_tags=["Typst"],
        )
        report = await exporter.export()
        assert report.exported == 1
        assert (vault_dir / "notes" / "draft.typ").exists()

    @pytest.mark.asyncio
    async def test_errors_collected(self, vault_dir):
        orchestrator = MagicMock()
        orchestrator.convert = AsyncMock(side_effect=ConversionError("bad note"))
        exporter = VaultExporter(vault=FileSystemVault(vault_dir), orchestrator=orchestrator)

        report = await exporter.export()

        assert report.exported == 0
        assert len(report.errors) == 1
        assert report.errors[0].file == "notes/report.md"
        assert "bad note" in report.errors[0].error

    @pytest.mark.asyncio
    async def test_options_passed_with_note_path(self, vault_dir):
        orchestrator = MagicMock()
        orchestrator.convert = AsyncMock(return_value="typst")
        exporter = VaultExporter(
            vault=FileSystemVault(vault_dir),
            orchestrator=orchestrator,
            options={"max_embed_depth": 1},
        )
        await exporter.export()
        _, options, env = orchestrator.convert.call_args.args
        assert options == {"max_embed_depth": 1, "current_document_path": "notes/report.md"}
        assert env.current_path == "notes/report.md"


class TestExportNote:
    @pytest.mark.asyncio
    async def test_tagged_note(self, exporter, vault_dir):
        assert await exporter.export_note("notes/report.md") is True
        assert (vault_dir / "notes" / "report.typ").exists()

    @pytest.mark.asyncio
    async def test_untagged_note(self, exporter):
        assert await exporter.export_note("notes/draft.md") is False

    @pytest.mark.asyncio
    async def test_missing_note(self, exporter):
        assert await exporter.export_note("notes/gone.md") is False


class TestWatch:
    def test_stops_when_event_set(self, exporter):
        stop = threading.Event()
        stop.set()
        exporter.watch(stop)

    def test_relative_paths(self, exporter, vault_dir):
        assert exporter._relative(str(vault_dir / "notes" / "report.md")) == "notes/report.md"
        assert exporter._relative(str(vault_dir / ".obsidian" / "workspace.md")) is None
        assert exporter._relative(str(vault_dir.parent / "elsewhere.md")) is None
