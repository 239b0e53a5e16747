# ============================================================================
# HotelOps - Configuration Management
# ============================================================================
# Defaults table with type casting. Values can be overridden through
# HOTELOPS_<KEY> environment variables or in-process with set_config().
# ============================================================================

import json
import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)

ENV_PREFIX = "HOTELOPS_"

# key: (default, value_type, category)
DEFAULT_CONFIG = {
    # Storage
    "db_path": ("hotelops.db", "string", "storage"),

    # Persistence timing
    "debounce_ms": (800, "int", "persistence"),
    "saving_hold_ms": (500, "int", "persistence"),
    "hydrate_timeout_seconds": (10, "int", "persistence"),
    "seed_empty_collections": (True, "bool", "persistence"),

    # Analytics
    "trend_baseline": (94, "int", "analytics"),
    "heatmap_limit": (10, "int", "analytics"),
    "top_failures_limit": (5, "int", "analytics"),

    # Settings seed
    "default_hotels": (["Grand Plaza Hotel", "Seaside Resort"], "json", "settings"),
    "default_departments": (["Kitchen", "Housekeeping", "Front Office", "Maintenance"], "json", "settings"),

    # Logging
    "log_level": ("INFO", "string", "general"),
}


class HotelOpsConfig:
    """
    Process-wide configuration.

    Resolution order for a key: in-process override, environment variable,
    DEFAULT_CONFIG default.
    """

    _cache: Dict[str, Any] = {}
    _overrides: Dict[str, Any] = {}
    _cache_loaded: bool = False

    @classmethod
    def _load_cache(cls):
        if cls._cache_loaded:
            return

        for key, (default, vtype, _category) in DEFAULT_CONFIG.items():
            raw = os.environ.get(ENV_PREFIX + key.upper())
            if raw is None:
                cls._cache[key] = default
            else:
                cls._cache[key] = cls._cast_value(raw, vtype, default)

        cls._cache.update(cls._overrides)
        cls._cache_loaded = True

    @classmethod
    def _cast_value(cls, value: str, value_type: str, default: Any = None) -> Any:
        """Cast string value to appropriate type."""
        if value is None:
            return default
        if value_type == "bool":
            return value.strip().lower() in ("true", "1", "yes", "on")
        if value_type == "int":
            try:
                return int(value)
            except ValueError:
                logger.warning(f"[Config] Invalid int value {value!r}, using default {default!r}")
                return default
        if value_type == "json":
            try:
                return json.loads(value)
            except ValueError:
                logger.warning(f"[Config] Invalid JSON value {value!r}, using default")
                return default
        return value

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        cls._load_cache()
        return cls._cache.get(key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Override a configuration value for the rest of the process."""
        cls._load_cache()
        cls._overrides[key] = value
        cls._cache[key] = value

    @classmethod
    def get_all(cls, category: str = None) -> Dict[str, Any]:
        """Get all configuration values, optionally filtered by category."""
        cls._load_cache()

        if category is None:
            return dict(cls._cache)

        result = {}
        for key, (default, _vtype, cat) in DEFAULT_CONFIG.items():
            if cat == category:
                result[key] = cls._cache.get(key, default)
        return result

    @classmethod
    def reset_cache(cls, clear_overrides: bool = False):
        """Reset the configuration cache."""
        cls._cache = {}
        cls._cache_loaded = False
        if clear_overrides:
            cls._overrides = {}


# Convenience functions
def get_config(key: str, default: Any = None) -> Any:
    """Get a configuration value."""
    return HotelOpsConfig.get(key, default)


def set_config(key: str, value: Any) -> None:
    """Set a configuration value."""
    HotelOpsConfig.set(key, value)


def get_all_config() -> Dict[str, Any]:
    """Get all configuration values."""
    return HotelOpsConfig.get_all()
