"""Tests for transform script storage."""

import pytest

from obsidian_typst.scripts import DEFAULT_SCRIPT, DirectoryScriptStore, ScriptStore, normalize_script_name


@pytest.fixture
def script_dir(tmp_path):
    directory = tmp_path / "typst-scripts"
    directory.mkdir()
    (directory / "report.py").write_text("def transform(c):\n    return 'report'\n", encoding="utf-8")
    (directory / "notes.txt").write_text("not a script", encoding="utf-8")
    return directory


class TestNormalizeScriptName:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("report", "report"),
            ("report.py", "report"),
            ("  memo.py ", "memo"),
            ("", "default"),
            (None, "default"),
            (".py", "default"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_script_name(raw) == expected


class TestDirectoryScriptStore:
    def test_is_a_script_store(self, script_dir):
        assert isinstance(DirectoryScriptStore(script_dir), ScriptStore)

    def test_load_named_script(self, script_dir):
        store = DirectoryScriptStore(script_dir)
        assert "return 'report'" in store.load_script("report.py")

    def test_unknown_script_falls_back_to_default(self, script_dir):
        assert DirectoryScriptStore(script_dir).load_script("missing") == DEFAULT_SCRIPT

    def test_no_directory_only_default(self):
        store = DirectoryScriptStore()
        assert store.load_script("anything") == DEFAULT_SCRIPT
        assert store.list_scripts() == ["default"]

    def test_user_default_overrides_builtin(self, script_dir):
        (script_dir / "default.py").write_text("# custom default", encoding="utf-8")
        assert DirectoryScriptStore(script_dir).load_script("default") == "# custom default"

    def test_names_with_separators_rejected(self, script_dir):
        (script_dir.parent / "outside.py").write_text("# outside", encoding="utf-8")
        store = DirectoryScriptStore(script_dir)
        assert store.load_script("../outside") == DEFAULT_SCRIPT

    def test_list_scripts(self, script_dir):
        (script_dir / "memo.py").write_text("", encoding="utf-8")
        assert DirectoryScriptStore(script_dir).list_scripts() == ["default", "memo", "report"]

    def test_cache_and_invalidate(self, script_dir):
        store = DirectoryScriptStore(script_dir)
        assert "report" in store.load_script("report")
        (script_dir / "report.py").write_text("# edited", encoding="utf-8")
        assert "return 'report'" in store.load_script("report")
        store.invalidate()
        assert store.load_script("report") == "# edited"
