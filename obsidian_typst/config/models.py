from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class TransformConfig(BaseModel):
    mode: Literal["structural", "script"] = "structural"
    max_embed_depth: int = Field(default=5, ge=0)
    detect_embed_cycles: bool = True
    checkbox_enhancement: bool = False

    @field_validator("mode", mode="before")
    @classmethod
    def _accept_ast_alias(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() == "ast":
            return "structural"
        return value


class ScriptConfig(BaseModel):
    directory: str = "typst-scripts"
    # folder (vault relative) -> script name
    template_mapping: dict[str, str] = Field(default_factory=dict)


class ExportConfig(BaseModel):
    trigger_tags: list[str] = Field(default_factory=lambda: ["bon-typst"])
    debounce: float = Field(default=0.5, gt=0)
    ignore_patterns: list[str] = Field(default_factory=lambda: [
        ".obsidian", ".trash", ".git", "node_modules",
    ])


class CodeBlockConfig(BaseModel):
    enabled: bool = True
    cache_size: int = Field(default=100, gt=0)


class ObsidianTypstConfig(BaseModel):
    vault_path: str = "."
    transform: TransformConfig = Field(default_factory=TransformConfig)
    scripts: ScriptConfig = Field(default_factory=ScriptConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    code_blocks: CodeBlockConfig = Field(default_factory=CodeBlockConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["rich", "text"] = "rich"

    def conversion_defaults(self) -> dict[str, Any]:
        """Option values for ``ConversionOptions`` taken from this config."""
        return {
            "strategy": self.transform.mode,
            "max_embed_depth": self.transform.max_embed_depth,
            "detect_embed_cycles": self.transform.detect_embed_cycles,
            "checkbox_enhancement": self.transform.checkbox_enhancement,
        }
