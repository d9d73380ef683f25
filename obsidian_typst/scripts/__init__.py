from obsidian_typst.scripts.store import (
    DEFAULT_SCRIPT,
    DirectoryScriptStore,
    ScriptStore,
    normalize_script_name,
)

__all__ = ["DEFAULT_SCRIPT", "DirectoryScriptStore", "ScriptStore", "normalize_script_name"]
