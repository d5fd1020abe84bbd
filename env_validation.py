"""Environment variable validation and management."""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

logger = logging.getLogger(__name__)

class EnvironmentError(Exception):
    """Raised when required environment variables are missing or invalid."""
    pass

_DEFAULTS: Dict[str, str] = {
    "LEARNING_HUB_CACHE_TTL_SECONDS": "1800",
    "LEARNING_HUB_CACHE_MAX_ENTRIES": "1024",
    "SAMPLE_IMAGE_MAX_AGE": "3600",
}

def validate_environment() -> None:
    """Validate learning hub settings.

    Raises EnvironmentError if validation fails.
    """
    # Apply defaults before validation so dependent modules see consistent values.
    for var, value in _DEFAULTS.items():
        if not os.getenv(var):
            os.environ[var] = value
            logger.info("Environment variable %s not set; using default '%s'", var, value)

    positive_ints = {"LEARNING_HUB_CACHE_TTL_SECONDS"}
    non_negative_ints = {"LEARNING_HUB_CACHE_MAX_ENTRIES", "SAMPLE_IMAGE_MAX_AGE"}
    for var in sorted(positive_ints | non_negative_ints):
        raw = os.getenv(var, "")
        try:
            value = int(raw)
        except ValueError:
            raise EnvironmentError(f"Invalid integer for {var}: {raw}")
        if var in positive_ints and value <= 0:
            raise EnvironmentError(f"{var} must be positive, got {value}")
        if value < 0:
            raise EnvironmentError(f"{var} must not be negative, got {value}")

    catalog_path = os.getenv("LEARNING_CATALOG_PATH")
    if catalog_path and not Path(catalog_path).is_file():
        raise EnvironmentError(f"LEARNING_CATALOG_PATH does not point to a file: {catalog_path}")

    optional_vars = {
        "LEARNING_CATALOG_PATH": "Path to a custom learning catalog YAML",
        "LEARNING_HUB_LOG_REQUESTS": "Log every learning hub request",
    }
    for var, description in optional_vars.items():
        if not os.getenv(var):
            logger.debug("Optional environment variable not set: %s (%s)", var, description)

def get_env_bool(name: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on", "enabled"}

def get_env_int(name: str, default: int) -> int:
    """Get integer value from environment variable, falling back on bad input."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s", name, value, default)
        return default


@dataclass(frozen=True)
class HubSettings:
    cache_ttl_seconds: int = 1800
    cache_max_entries: int = 1024
    sample_image_max_age: int = 3600
    log_requests: bool = True

    @classmethod
    def from_env(cls) -> "HubSettings":
        return cls(
            cache_ttl_seconds=get_env_int("LEARNING_HUB_CACHE_TTL_SECONDS", cls.cache_ttl_seconds),
            cache_max_entries=get_env_int("LEARNING_HUB_CACHE_MAX_ENTRIES", cls.cache_max_entries),
            sample_image_max_age=get_env_int("SAMPLE_IMAGE_MAX_AGE", cls.sample_image_max_age),
            log_requests=get_env_bool("LEARNING_HUB_LOG_REQUESTS", True),
        )
