"""
Configuration loader — reads ``.gitcommit.yaml`` into a GitAIConfig.

Lookup order:
    1. explicit path (``--config``)
    2. ``.gitcommit.yaml`` in the current directory
    3. ``.gitcommit.yaml`` in the user's home directory
    4. built-in defaults

``GITAI_MODEL`` and ``GITAI_OLLAMA_URL`` override the file values.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from gitai.core.models.config import GitAIConfig
from gitai.core.persistence.files import atomic_write_text

logger = logging.getLogger(__name__)

CONFIG_FILE = ".gitcommit.yaml"

_ENV_OVERRIDES = {
    "GITAI_MODEL": "model",
    "GITAI_OLLAMA_URL": "ollama_url",
}


class ConfigError(Exception):
    """Raised when a config file is unreadable or invalid."""


def default_config() -> GitAIConfig:
    """Return a configuration with every default applied."""
    return GitAIConfig()


def find_config_file(
    start_dir: Path | None = None,
    home: Path | None = None,
) -> Path | None:
    """Locate the config file: project directory first, then home.

    Returns:
        Path to the first existing ``.gitcommit.yaml``, or None.
    """
    candidates = [
        (start_dir or Path.cwd()) / CONFIG_FILE,
        (home or Path.home()) / CONFIG_FILE,
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_from_file(path: Path) -> GitAIConfig:
    """Parse and validate a single config file.

    Raises:
        ConfigError: If the file is missing, not YAML, or fails validation.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        return GitAIConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def load_config(
    path: Path | None = None,
    *,
    start_dir: Path | None = None,
    home: Path | None = None,
) -> GitAIConfig:
    """Load the effective configuration.

    Args:
        path: Explicit config path. When given it must exist.
        start_dir: Project directory to search (default: cwd).
        home: Home directory to search (default: ``Path.home()``).

    Raises:
        ConfigError: If an explicit or discovered file is invalid.
    """
    if path is None:
        path = find_config_file(start_dir, home)

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        cfg = default_config()
    else:
        cfg = load_from_file(path)
        logger.info("Loaded config from %s (model=%s)", path, cfg.model)

    return _apply_env_overrides(cfg)


def save_config(cfg: GitAIConfig, path: Path) -> None:
    """Write ``cfg`` to ``path`` as YAML (atomic)."""
    data = cfg.model_dump(mode="json")
    content = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    atomic_write_text(path, content)
    logger.info("Saved config to %s", path)


def _apply_env_overrides(cfg: GitAIConfig) -> GitAIConfig:
    updates = {}
    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            logger.debug("%s overrides %s", env_var, field_name)
            updates[field_name] = value
    return cfg.model_copy(update=updates) if updates else cfg
