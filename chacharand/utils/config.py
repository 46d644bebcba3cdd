"""
Configuration for chacharand.

One YAML file holds the key source, logging and report settings. It is
found, in order, at an explicit path, at $CHACHARAND_CONFIG (so a contest
can keep its own key settings outside the checkout), or at
configs/config.yaml in the project root.
"""

import os
from functools import lru_cache
from pathlib import Path

import yaml

from chacharand.generators.errors import ConfigurationError

# chacharand/utils/config.py -> project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "config.yaml"
CONFIG_ENV_VAR = "CHACHARAND_CONFIG"


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    if config_path:
        return Path(config_path)
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_config(config_path: str | Path | None = None) -> dict:
    """Read a chacharand config file.

    An empty file gives an empty dict. A file whose top level is not a
    mapping is a ConfigurationError.
    """
    path = resolve_config_path(config_path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping, got {type(config).__name__}")
    return config


@lru_cache(maxsize=None)
def get_config() -> dict:
    """Process-wide config, read once."""
    return load_config()


def config_section(name: str, config: dict | None = None) -> dict:
    """Return one top-level section of `config` (or the process config), {} if absent."""
    if config is None:
        config = get_config()
    return config.get(name) or {}
