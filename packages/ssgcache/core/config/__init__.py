"""Configuration for ssg-cache."""

from ssgcache.core.config.loader import detect_format, load_cache_config, load_config
from ssgcache.core.config.models import CacheConfig

__all__ = [
    "CacheConfig",
    "detect_format",
    "load_cache_config",
    "load_config",
]
