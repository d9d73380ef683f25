"""Process-isolated execution of user transform scripts."""

from obsidian_typst.sandbox.runner import ConvertFn, ScriptRunner

__all__ = ["ConvertFn", "ScriptRunner"]
