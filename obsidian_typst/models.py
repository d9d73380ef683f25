"""Conversion options, note handles and the error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

DEFAULT_MAX_EMBED_DEPTH = 5
DEFAULT_SCRIPT_NAME = "default"


class ConversionOptions(BaseModel):
    """Per-call conversion settings. Validated before anything is parsed."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    strategy: Literal["structural", "script"] = "structural"
    script_name: str | None = None
    max_embed_depth: StrictInt = Field(default=DEFAULT_MAX_EMBED_DEPTH, ge=0)
    current_document_path: str | None = None
    checkbox_enhancement: bool = False
    detect_embed_cycles: bool = True

    @field_validator("strategy", mode="before")
    @classmethod
    def _accept_ast_alias(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() == "ast":
            return "structural"
        return value


@dataclass(frozen=True)
class NoteRef:
    """Handle to a note in the vault, read through the environment."""

    path: str


class ConversionError(Exception):
    """Base class for errors that abort a conversion call."""


class InvalidOptionsError(ConversionError, ValueError):
    """Conversion options failed validation; nothing was converted."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid conversion options: {detail}")


class ScriptExecutionError(ConversionError):
    """A transform script failed to load, run or honour its contract."""

    def __init__(self, detail: str, script_name: str | None = None) -> None:
        self.detail = detail
        self.script_name = script_name
        super().__init__(f"Script execution failed: {detail}")


class SynchronousConversionError(ConversionError, RuntimeError):
    """Raised by the synchronous entry point, which conversion does not support."""

    def __init__(self) -> None:
        super().__init__(
            "Synchronous conversion is not supported; use convert_async() instead"
        )
