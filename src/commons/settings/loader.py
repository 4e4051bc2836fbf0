"""Settings loader with hierarchical configuration support."""

import json
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from src.commons.settings.models import Settings


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Process environment variables
    2. ``.env`` file entries
    3. Environment-specific config (appsettings.{env}.json)
    4. Base config (appsettings.json)
    """

    ENV_PREFIX = "VIDEO_ASSETS__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
        env_file: Path | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to 'config' in current working directory.
            environment: Environment name (dev, staging, prod).
                        Defaults to VIDEO_ASSETS__APP__ENVIRONMENT or 'dev'.
            env_file: Dotenv file with VIDEO_ASSETS__ entries.
                     Defaults to '.env' in current working directory.
        """
        self.config_dir = config_dir or Path("config")
        self.env_file = env_file or Path(".env")
        self._environ = self._collect_environ()
        self.environment = environment or self._environ.get(
            f"{self.ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        config = self._load_json("appsettings.json")

        env_config = self._load_json(f"appsettings.{self.environment}.json")
        config = self._deep_merge(config, env_config)

        env_overrides = self._load_env_vars()
        config = self._deep_merge(config, env_overrides)

        return Settings(**config)

    def _collect_environ(self) -> dict[str, str]:
        """Merge dotenv entries under the real process environment."""
        environ: dict[str, str] = {}
        if self.env_file.exists():
            environ.update(
                {
                    key: value
                    for key, value in dotenv_values(self.env_file).items()
                    if value is not None
                }
            )
        environ.update(os.environ)
        return environ

    def _load_env_vars(self) -> dict[str, Any]:
        """Load environment variables with the VIDEO_ASSETS__ prefix.

        Parses env vars like VIDEO_ASSETS__DOCUMENT_DB__HOST into nested dicts:
        {"document_db": {"host": "value"}}

        Returns:
            Nested dictionary of environment variable overrides.
        """
        result: dict[str, Any] = {}

        for key, value in self._environ.items():
            if not key.upper().startswith(self.ENV_PREFIX):
                continue

            key_path = key[len(self.ENV_PREFIX) :].lower().split("__")

            current = result
            for part in key_path[:-1]:
                current = current.setdefault(part, {})

            current[key_path[-1]] = self._decode_value(value)

        return result

    def _decode_value(self, value: str) -> Any:
        """Decode JSON lists/objects; leave scalars for pydantic to coerce.

        Scalars stay strings so that numeric-looking secrets (Cloudinary API
        keys) still validate against ``str`` fields.

        Args:
            value: String value from environment.

        Returns:
            Parsed JSON container or the original string.
        """
        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass
        return value

    def _load_json(self, filename: str) -> dict[str, Any]:
        """Load JSON config file.

        Args:
            filename: Name of the config file.

        Returns:
            Parsed JSON as dictionary, or empty dict if file doesn't exist.
        """
        path = self.config_dir / filename
        if path.exists():
            with path.open(encoding="utf-8") as f:
                return dict(json.load(f))
        return {}

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if isinstance(result.get(key), dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


# Global settings instance
_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _settings = loader.load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None
