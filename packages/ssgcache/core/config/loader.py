"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

from collections.abc import Mapping
import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from ssgcache.core.config.models import CacheConfig

logger = logging.getLogger(__name__)

# Default config path (can be overridden)
_DEFAULT_CONFIG_PATH = Path("ssg-cache.json")

# Environment variable -> CacheConfig field
_ENV_OVERRIDES = {
    "SSG_CACHE_MAX_WAIT_SECONDS": "max_wait_seconds",
    "SSG_CACHE_RETRY_ATTEMPTS": "retry_attempts",
    "SSG_CACHE_USE_LOCK_FILES": "use_lock_files",
}


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Args:
        file_path: Path to config file

    Returns:
        Format string: "json" or "yaml"

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("ssg-cache.json")
        'json'
        >>> detect_format("ssg-cache.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Supports both JSON and YAML formats. Format is auto-detected
    from file extension.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file is invalid or format unsupported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    fmt = detect_format(path)

    if fmt == "json":
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            with path.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    # safe_load returns None for empty files
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config root must be a mapping in {path}, got {type(content).__name__}")
    return content


def load_cache_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> CacheConfig:
    """Load and validate cache configuration.

    A missing file at the default path yields all defaults; an explicitly
    given path must exist. ``SSG_CACHE_*`` environment variables override
    file values.

    Args:
        path: Path to config file (.json, .yaml, or .yml), defaults to ssg-cache.json
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated CacheConfig

    Raises:
        FileNotFoundError: If an explicit path doesn't exist
        ValidationError: If config is invalid
    """
    env = os.environ if env is None else env

    raw: dict[str, Any] = {}
    if path is not None:
        raw = load_config(path)
    elif _DEFAULT_CONFIG_PATH.exists():
        raw = load_config(_DEFAULT_CONFIG_PATH)

    for var, field in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            logger.debug(f"Config override from {var}: {field}={value}")
            raw[field] = value

    return CacheConfig.model_validate(raw)
