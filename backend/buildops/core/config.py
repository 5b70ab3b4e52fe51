"""Application configuration management.

Settings are read from the process environment (optionally seeded from a
``.env`` file) through ``EnvironmentLoader`` and grouped into validated
dataclasses, one per concern. Every variable carries the ``BUILDOPS_`` prefix.

Architecture:
- EnvironmentLoader: environment variable loading with type conversion
- DispatchConfig: command/query dispatcher behaviour
- QueryCacheConfig: read-side cache defaults
- FileStorageConfig: upload limits and signed URL secret
- NotificationConfig: sender and admin addresses
- Settings: main configuration object handed to the composition root
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any

from buildops.core.enums import Environment, LogFormat, LogLevel
from buildops.core.errors import ConfigurationError

ENV_PREFIX = "BUILDOPS_"

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


# =====================================================================================
# VALUE VALIDATION
# =====================================================================================


def validate_string(value, key, required=False, min_length=None):
    if value is None and not required:
        return None
    if value is None:
        raise ConfigurationError(f"{key} is required", config_key=key)
    value = str(value)
    if min_length is not None and len(value) < min_length:
        raise ConfigurationError(
            f"{key} must be at least {min_length} characters", config_key=key
        )
    return value


def validate_integer(value, key, required=False, min_value=None, max_value=None):
    if value is None and not required:
        return None
    if value is None:
        raise ConfigurationError(f"{key} is required", config_key=key)
    try:
        val = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer", config_key=key) from None
    if min_value is not None and val < min_value:
        raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
    if max_value is not None and val > max_value:
        raise ConfigurationError(f"{key} must be <= {max_value}", config_key=key)
    return val


def validate_float(value, key, required=False, min_value=None, max_value=None):
    if value is None and not required:
        return None
    if value is None:
        raise ConfigurationError(f"{key} is required", config_key=key)
    try:
        val = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number", config_key=key) from None
    if min_value is not None and val < min_value:
        raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
    if max_value is not None and val > max_value:
        raise ConfigurationError(f"{key} must be <= {max_value}", config_key=key)
    return val


def validate_boolean(value, key, required=False):
    if value is None and not required:
        return None
    if value is None:
        raise ConfigurationError(f"{key} is required", config_key=key)
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{key} must be a boolean", config_key=key)


def validate_list(value, key, required=False):
    if value is None and not required:
        return None
    if value is None:
        raise ConfigurationError(f"{key} is required", config_key=key)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value)


def validate_enum(value, enum_class, key, required=False):
    if value is None and not required:
        return None
    if value is None:
        raise ConfigurationError(f"{key} is required", config_key=key)
    if isinstance(value, enum_class):
        return value
    for member in enum_class:
        candidates = {member.name.lower()}
        if isinstance(member.value, str):
            candidates.add(member.value.lower())
        elif isinstance(member.value, tuple):
            candidates.add(str(member.value[0]).lower())
        if str(value).lower() in candidates:
            return member
    valid = ", ".join(member.name.lower() for member in enum_class)
    raise ConfigurationError(
        f"{key} must be one of: {valid}", config_key=key
    )


# =====================================================================================
# ENVIRONMENT LOADER
# =====================================================================================


class EnvironmentLoader:
    """
    Environment variable loader with type conversion and validation.

    Keys are looked up with the ``BUILDOPS_`` prefix applied, so callers pass
    the bare name (``"CACHE_DEFAULT_TTL"``).
    """

    def __init__(self, env_file: str | None = ".env", prefix: str = ENV_PREFIX):
        """
        Initialize environment loader.

        Args:
            env_file: Optional environment file to load
            prefix: Prefix applied to every key
        """
        self.env_file = env_file
        self.prefix = prefix
        self._load_env_file()

    def _load_env_file(self) -> None:
        """Load environment variables from file if it exists."""
        if not self.env_file or not os.path.exists(self.env_file):
            return

        try:
            with open(self.env_file, encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()

                    if not line or line.startswith("#") or "=" not in line:
                        continue

                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]

                    # Real environment wins over the file
                    if key not in os.environ:
                        os.environ[key] = value

        except OSError as e:
            raise ConfigurationError(
                f"Failed to load environment file {self.env_file}: {e}"
            ) from e

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _raw(self, key: str, default: Any = None) -> Any:
        return os.environ.get(self._key(key), default)

    def get_string(
        self, key: str, default: str | None = None, required: bool = False, **kwargs
    ) -> str | None:
        """Get string value from environment."""
        return validate_string(self._raw(key, default), self._key(key), required, **kwargs)

    def get_integer(
        self, key: str, default: int | None = None, required: bool = False, **kwargs
    ) -> int | None:
        """Get integer value from environment."""
        return validate_integer(self._raw(key, default), self._key(key), required, **kwargs)

    def get_float(
        self, key: str, default: float | None = None, required: bool = False, **kwargs
    ) -> float | None:
        """Get float value from environment."""
        return validate_float(self._raw(key, default), self._key(key), required, **kwargs)

    def get_boolean(
        self, key: str, default: bool | None = None, required: bool = False
    ) -> bool | None:
        """Get boolean value from environment."""
        return validate_boolean(self._raw(key, default), self._key(key), required)

    def get_enum(
        self,
        key: str,
        enum_class: type[Enum],
        default: Enum | None = None,
        required: bool = False,
    ) -> Enum | None:
        """Get enum value from environment."""
        return validate_enum(self._raw(key, default), enum_class, self._key(key), required)

    def get_list(
        self,
        key: str,
        default: list[Any] | None = None,
        required: bool = False,
    ) -> list[Any] | None:
        """Get comma separated list value from environment."""
        value = self._raw(key)
        if value is None:
            value = default
        return validate_list(value, self._key(key), required=required)


# =====================================================================================
# CONFIGURATION SECTIONS
# =====================================================================================


@dataclass
class DispatchConfig:
    """Command and query dispatcher behaviour."""

    slow_command_threshold_ms: float = 1000.0
    timeout_seconds: float | None = None
    allow_handler_override: bool = False
    max_performance_metrics: int = 1000
    enable_prometheus_metrics: bool = True

    def __post_init__(self):
        if self.slow_command_threshold_ms <= 0:
            raise ConfigurationError("Slow command threshold must be positive")

        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError("Dispatch timeout must be positive when set")

        if self.max_performance_metrics < 1:
            raise ConfigurationError("Performance metric retention must be at least 1")


@dataclass
class QueryCacheConfig:
    """Read-side cache defaults; per-query TTLs live on the query types."""

    enabled: bool = True
    default_ttl_seconds: int = 300
    cleanup_interval: int = 100
    ttl_overrides: dict[str, int] = field(default_factory=dict)
    non_cacheable: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.default_ttl_seconds < 1:
            raise ConfigurationError("Default cache TTL must be at least 1 second")

        if self.cleanup_interval < 1:
            raise ConfigurationError("Cache cleanup interval must be at least 1")

        for query_type, ttl in self.ttl_overrides.items():
            if ttl < 1:
                raise ConfigurationError(
                    f"Cache TTL override for {query_type} must be at least 1 second"
                )


@dataclass
class FileStorageConfig:
    """Upload limits and signed URL settings."""

    max_file_size_bytes: int = 10 * 1024 * 1024
    signing_secret: str = "change-me"
    signed_url_ttl_seconds: int = 3600
    base_url: str = "/files"

    def __post_init__(self):
        if self.max_file_size_bytes < 1:
            raise ConfigurationError("Maximum file size must be positive")

        if not self.signing_secret:
            raise ConfigurationError("File signing secret must not be empty")

        if self.signed_url_ttl_seconds < 1:
            raise ConfigurationError("Signed URL lifetime must be positive")


@dataclass
class NotificationConfig:
    """Outgoing notification addresses."""

    from_address: str = "no-reply@buildops.example"
    admin_addresses: list[str] = field(
        default_factory=lambda: ["estimates@buildops.example"]
    )
    hr_addresses: list[str] = field(default_factory=lambda: ["hr@buildops.example"])

    def __post_init__(self):
        if "@" not in self.from_address:
            raise ConfigurationError("Notification sender must be an email address")


# =====================================================================================
# SETTINGS
# =====================================================================================


class Settings:
    """
    Main application settings.

    Usage Example:
        settings = Settings()

        settings.environment          # Environment.DEVELOPMENT
        settings.dispatch.timeout_seconds
        settings.query_cache.default_ttl_seconds
    """

    def __init__(self, env_file: str | None = ".env"):
        """
        Initialize settings with environment variable loading.

        Args:
            env_file: Environment file to load variables from
        """
        self.env_loader = EnvironmentLoader(env_file)

        self._load_application_config()
        self._load_logging_config()
        self._load_dispatch_config()
        self._load_query_cache_config()
        self._load_file_storage_config()
        self._load_notification_config()

        self._validate_configuration()

    def _load_application_config(self) -> None:
        self.app_name = self.env_loader.get_string("APP_NAME", "BuildOps Backend")
        self.app_version = self.env_loader.get_string("APP_VERSION", "0.1.0")
        self.environment = self.env_loader.get_enum(
            "ENVIRONMENT", Environment, Environment.DEVELOPMENT
        )
        self.debug = self.env_loader.get_boolean("DEBUG", False)

    def _load_logging_config(self) -> None:
        self.log_level = self.env_loader.get_enum("LOG_LEVEL", LogLevel, LogLevel.INFO)
        self.log_format = self.env_loader.get_enum("LOG_FORMAT", LogFormat, None)
        self.mask_sensitive_data = self.env_loader.get_boolean(
            "LOG_MASK_SENSITIVE_DATA", True
        )

    def _load_dispatch_config(self) -> None:
        self.dispatch = DispatchConfig(
            slow_command_threshold_ms=self.env_loader.get_float(
                "DISPATCH_SLOW_COMMAND_THRESHOLD_MS", 1000.0, min_value=1
            ),
            timeout_seconds=self.env_loader.get_float(
                "DISPATCH_TIMEOUT_SECONDS", None, min_value=0.001
            ),
            allow_handler_override=self.env_loader.get_boolean(
                "DISPATCH_ALLOW_HANDLER_OVERRIDE", False
            ),
            max_performance_metrics=self.env_loader.get_integer(
                "DISPATCH_MAX_PERFORMANCE_METRICS", 1000, min_value=1
            ),
            enable_prometheus_metrics=self.env_loader.get_boolean(
                "DISPATCH_ENABLE_PROMETHEUS_METRICS", True
            ),
        )

    def _load_query_cache_config(self) -> None:
        self.query_cache = QueryCacheConfig(
            enabled=self.env_loader.get_boolean("CACHE_ENABLED", True),
            default_ttl_seconds=self.env_loader.get_integer(
                "CACHE_DEFAULT_TTL", 300, min_value=1
            ),
            cleanup_interval=self.env_loader.get_integer(
                "CACHE_CLEANUP_INTERVAL", 100, min_value=1
            ),
            non_cacheable=self.env_loader.get_list("CACHE_NON_CACHEABLE", []),
        )

    def _load_file_storage_config(self) -> None:
        self.file_storage = FileStorageConfig(
            max_file_size_bytes=self.env_loader.get_integer(
                "FILE_MAX_SIZE_BYTES", 10 * 1024 * 1024, min_value=1
            ),
            signing_secret=self.env_loader.get_string(
                "FILE_SIGNING_SECRET", "change-me", min_length=1
            ),
            signed_url_ttl_seconds=self.env_loader.get_integer(
                "FILE_SIGNED_URL_TTL", 3600, min_value=1
            ),
            base_url=self.env_loader.get_string("FILE_BASE_URL", "/files"),
        )

    def _load_notification_config(self) -> None:
        self.notifications = NotificationConfig(
            from_address=self.env_loader.get_string(
                "NOTIFY_FROM_ADDRESS", "no-reply@buildops.example"
            ),
            admin_addresses=self.env_loader.get_list(
                "NOTIFY_ADMIN_ADDRESSES", ["estimates@buildops.example"]
            ),
            hr_addresses=self.env_loader.get_list(
                "NOTIFY_HR_ADDRESSES", ["hr@buildops.example"]
            ),
        )

    def _validate_configuration(self) -> None:
        if self.environment == Environment.PRODUCTION:
            if self.debug:
                raise ConfigurationError("Debug mode must be disabled in production")
            if self.file_storage.signing_secret == "change-me":
                raise ConfigurationError(
                    "File signing secret must be set in production",
                    config_key=f"{ENV_PREFIX}FILE_SIGNING_SECRET",
                )
            if self.dispatch.allow_handler_override:
                raise ConfigurationError(
                    "Handler override is a test-only setting",
                    config_key=f"{ENV_PREFIX}DISPATCH_ALLOW_HANDLER_OVERRIDE",
                )

    def to_dict(self) -> dict[str, Any]:
        """Non-secret view of the settings."""
        return {
            "app_name": self.app_name,
            "app_version": self.app_version,
            "environment": self.environment.value,
            "debug": self.debug,
            "log_level": self.log_level.level_name,
            "dispatch": {
                "slow_command_threshold_ms": self.dispatch.slow_command_threshold_ms,
                "timeout_seconds": self.dispatch.timeout_seconds,
                "allow_handler_override": self.dispatch.allow_handler_override,
            },
            "query_cache": {
                "enabled": self.query_cache.enabled,
                "default_ttl_seconds": self.query_cache.default_ttl_seconds,
            },
        }


@lru_cache
def get_settings(env_file: str | None = ".env") -> Settings:
    """
    Get cached settings instance.

    Args:
        env_file: Environment file to load

    Returns:
        Settings: Application settings
    """
    return Settings(env_file)


__all__ = [
    "DispatchConfig",
    "EnvironmentLoader",
    "FileStorageConfig",
    "NotificationConfig",
    "QueryCacheConfig",
    "Settings",
    "get_settings",
]
