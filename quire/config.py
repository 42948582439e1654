"""Project configuration for Quire.

Settings live in an optional ``quire.yaml`` at the project root and are
merged over DEFAULT_CONFIG. Command-line options override both.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "quire.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "posts",
    "required_keys": ["title", "date", "draft"],
    "require_offset": True,
    "strict": False,
    "layout": None,
}


def load_config(project_root: Path) -> dict[str, Any]:
    """Load configuration from quire.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not a mapping or a value has the wrong type.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    config["required_keys"] = list(DEFAULT_CONFIG["required_keys"])
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"{config_path}: invalid YAML: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"{config_path}: expected a mapping at the top level")
        unknown = sorted(set(loaded) - set(DEFAULT_CONFIG))
        if unknown:
            logger.debug("ignoring unknown config keys: %s", ", ".join(unknown))
        config.update({k: v for k, v in loaded.items() if k in DEFAULT_CONFIG})
        logger.debug("loaded config from %s", config_path)
    _validate(config, config_path)
    return config


def _validate(config: dict[str, Any], source: Path) -> None:
    if not isinstance(config["content_dir"], str) or not config["content_dir"]:
        raise ConfigError(f"{source}: content_dir must be a non-empty string")
    keys = config["required_keys"]
    if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
        raise ConfigError(f"{source}: required_keys must be a list of strings")
    for flag in ("require_offset", "strict"):
        if not isinstance(config[flag], bool):
            raise ConfigError(f"{source}: {flag} must be true or false")
    if config["layout"] is not None and not isinstance(config["layout"], str):
        raise ConfigError(f"{source}: layout must be a path")


def content_dir(project_root: Path, config: dict[str, Any]) -> Path:
    """Resolve the configured content directory against the project root."""
    return project_root / config["content_dir"]
