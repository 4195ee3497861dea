"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import TranscacheConfig

logger = logging.getLogger(__name__)


def load_config(cli_path: str | None = None) -> TranscacheConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./transcache.yaml"),
        Path.home() / ".transcache" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                logger.debug("Loaded config from %s", path)
                # An empty file still shadows the files below it
                if raw is None:
                    return TranscacheConfig()
                raw = _expand_env_vars(raw)
                return TranscacheConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return TranscacheConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `transcache config init`
DEFAULT_CONFIG_TEMPLATE = """\
# transcache.yaml

# Which files get the transform
eligibility:
  root: "."
  include:
    - "src/**/*.js"
    - "extensions/**/*.js"
  # Vendored files that still need the transform, added back after exclude
  always_include: []
  exclude:
    - "node_modules/"
    - "third_party/"
  # Files fed through the stage by `transcache build`
  sources:
    - "**/*.js"

# The transform itself
transform:
  plugins: [newlines, defines, strip-test-only]
  # command: ["npx", "babel", "--filename", "{path}"]   # replaces plugins
  # timeout: 120

cache:
  key_on_options: true         # option changes invalidate cached output

output:
  out_dir: "build/transformed"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
