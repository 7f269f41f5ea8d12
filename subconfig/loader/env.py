"""Environment variable loader.

Provides the current environment name (e.g. ``production``, ``local``) and
loads prefixed variables into nested settings dictionaries.
"""

import json
import logging
import os
from collections.abc import Mapping
from typing import Any, Optional

logger = logging.getLogger(__name__)


class EnvironmentLoader:
    """Environment variable configuration loader.

    Supports:
    - Current environment name lookup with a default
    - Prefix filtering
    - Nested dictionary structure from ``__`` separated names
    - Optional type inference for values
    """

    def __init__(
        self,
        prefix: str = "",
        nested_separator: str = "__",
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the environment loader.

        Args:
            prefix: Only variables starting with this prefix are loaded
            nested_separator: Separator for nested keys
            environ: Variable source (defaults to ``os.environ``)
        """
        self.prefix = prefix
        self.nested_separator = nested_separator
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def current_environment(
        self, key: str = "APP_ENV", default: str = "production"
    ) -> str:
        """Return the name of the running environment.

        Args:
            key: Variable holding the environment name
            default: Name used when the variable is unset or blank

        Returns:
            Lower-cased environment name
        """
        value = self.environ.get(key, "").strip()
        if not value:
            logger.debug(f"{key} is not set, using environment '{default}'")
            return default
        return value.lower()

    def load_environment(
        self, fields: Optional[set[str]] = None, infer_types: bool = False
    ) -> dict[str, Any]:
        """Load prefixed environment variables into a nested dictionary.

        Args:
            fields: Top-level keys to keep (None keeps everything)
            infer_types: Convert values to bool/int/float/JSON where they look like one

        Returns:
            Configuration dictionary with nested structure
        """
        config: dict[str, Any] = {}

        for env_key, env_value in self.environ.items():
            if not env_key.startswith(self.prefix):
                continue

            config_key = self._env_key_to_config_key(env_key)
            if not config_key:
                continue
            if fields is not None and config_key.split(".")[0] not in fields:
                continue

            value = self._convert_value(env_value) if infer_types else env_value
            self._set_nested_value(config, config_key, value)
            logger.debug(f"Loaded env var: {env_key} -> {config_key}")

        return config

    def _env_key_to_config_key(self, env_key: str) -> str:
        """Convert environment variable name to config key."""
        key = env_key[len(self.prefix) :].lower()
        return key.replace(self.nested_separator, ".")

    def _convert_value(self, value: str) -> Any:
        """Convert string value with automatic type inference."""
        value = value.strip()

        if value.lower() in ("true", "false", "yes", "no", "on", "off"):
            return self._convert_bool(value)

        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)

        try:
            return float(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _convert_bool(self, value: str) -> bool:
        """Convert string to boolean."""
        value = value.lower().strip()
        if value in ("true", "yes", "on", "1"):
            return True
        elif value in ("false", "no", "off", "0"):
            return False
        else:
            raise ValueError(f"Cannot convert '{value}' to boolean")

    def _set_nested_value(self, config: dict[str, Any], key: str, value: Any) -> None:
        """Set a nested value in the configuration dictionary."""
        keys = key.split(".")
        current = config

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value
