"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import ObsidianTypstConfig

PROJECT_CONFIG = Path("./obsidian-typst.yaml")
USER_CONFIG = Path.home() / ".obsidian-typst" / "config.yaml"

# ${VAR} or ${VAR:-fallback}
_ENV_REF_RE = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def config_search_path(cli_path: str | None = None) -> list[Path]:
    """Candidate files in precedence order: CLI, project-local, user-global."""
    if cli_path:
        explicit = Path(cli_path)
        if not explicit.is_file():
            raise ValueError(f"Config file not found: {cli_path}")
        return [explicit, PROJECT_CONFIG, USER_CONFIG]
    return [PROJECT_CONFIG, USER_CONFIG]


def load_config(cli_path: str | None = None) -> ObsidianTypstConfig:
    """First non-empty file on the search path wins; defaults otherwise."""
    for path in config_search_path(cli_path):
        if not path.is_file():
            continue
        raw = _read_yaml(path)
        if raw is None:
            continue
        try:
            return ObsidianTypstConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e

    return ObsidianTypstConfig()


def _read_yaml(path: Path) -> dict | None:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping at the top level")
    return raw


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} and ${VAR:-fallback} references in strings."""
    if isinstance(obj, str):
        return _ENV_REF_RE.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `obsidian-typst config init`
DEFAULT_CONFIG_TEMPLATE = """\
# obsidian-typst.yaml

# Vault to convert; ${VAR} references are expanded from the environment
vault_path: "."

# Conversion
transform:
  mode: "structural"           # structural | script
  max_embed_depth: 5
  detect_embed_cycles: true
  checkbox_enhancement: false  # render task boxes as ☑ / ☐

# Transform scripts (<directory>/<name>.py, defining transform(content))
scripts:
  directory: "typst-scripts"
  # template_mapping:
  #   "Projects/Reports": "report"

# Export / watch
export:
  trigger_tags: ["bon-typst"]  # notes tagged with any of these are exported
  debounce: 0.5
  # ignore_patterns: [.obsidian, .trash, .git, node_modules]

# Typst code block rendering
code_blocks:
  enabled: true
  cache_size: 100

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "rich"             # rich | text
"""
