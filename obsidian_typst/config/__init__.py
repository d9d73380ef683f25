from .loader import DEFAULT_CONFIG_TEMPLATE, load_config
from .models import (
    CodeBlockConfig,
    ExportConfig,
    ObsidianTypstConfig,
    ScriptConfig,
    TransformConfig,
)

__all__ = [
    "CodeBlockConfig",
    "DEFAULT_CONFIG_TEMPLATE",
    "ExportConfig",
    "ObsidianTypstConfig",
    "ScriptConfig",
    "TransformConfig",
    "load_config",
]
