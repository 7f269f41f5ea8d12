"""Process-local configuration store addressed by dot-notation keys."""

import copy
import logging
import time
from collections.abc import Mapping
from typing import Any, Optional

from .models.schemas import ConfigChange, ConfigSource

logger = logging.getLogger(__name__)

_MISSING = object()


class ConfigStore:
    """Nested configuration tree with dot-notation access and change history.

    ``store.get("database.connections.mysql.host")`` walks nested mappings;
    ``store.set("a.b", 1)`` creates intermediate mappings as needed, replacing
    any non-mapping value found on the way.
    """

    def __init__(self, items: Optional[Mapping[str, Any]] = None):
        """Initialize the store.

        Args:
            items: Base configuration tree (copied)
        """
        self._items: dict[str, Any] = copy.deepcopy(dict(items or {}))
        self._history: list[ConfigChange] = []

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._lookup(key)
        return default if value is _MISSING else value

    def has(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def set(
        self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME
    ) -> None:
        """Set configuration value, replacing whatever is stored at ``key``.

        Args:
            key: Configuration key (dot notation supported)
            value: Value to set
            source: Source of the configuration change
        """
        keys = key.split(".")
        current = self._items

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        old_value = current.get(keys[-1])
        current[keys[-1]] = value

        self._history.append(
            ConfigChange(
                key=key,
                old_value=old_value,
                new_value=value,
                source=source,
                timestamp=time.time(),
            )
        )

    def bulk_set(
        self, values: Mapping[str, Any], source: ConfigSource = ConfigSource.RUNTIME
    ) -> None:
        """Set every top-level key of ``values``; keys may be dot paths."""
        for key, value in values.items():
            self.set(key, value, source)

    def delete(self, key: str) -> bool:
        """Remove a key.

        Returns:
            True if the key existed
        """
        *parents, last = key.split(".")
        parent = self._lookup(".".join(parents)) if parents else self._items
        if not isinstance(parent, dict) or last not in parent:
            return False
        del parent[last]
        return True

    def all(self) -> dict[str, Any]:
        """Return a copy of the whole configuration tree."""
        return copy.deepcopy(self._items)

    def flatten(self) -> dict[str, Any]:
        """Return the tree as dot-notation keys mapped to non-mapping values."""
        return self._flatten_dict(self._items)

    def get_history(
        self, key: Optional[str] = None, limit: Optional[int] = None
    ) -> list[ConfigChange]:
        """Get configuration change history.

        Args:
            key: Only return changes of this key
            limit: Only return the latest ``limit`` changes
        """
        history = [c for c in self._history if key is None or c.key == key]
        if limit is not None:
            history = history[-limit:]
        return history

    def _lookup(self, key: str) -> Any:
        current: Any = self._items
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return _MISSING
            current = current[part]
        return current

    def _flatten_dict(
        self, d: Mapping[str, Any], parent_key: str = "", sep: str = "."
    ) -> dict[str, Any]:
        """Flatten nested dictionary into dot-notation keys."""
        items = []
        for k, v in d.items():
            new_key = f"{parent_key}{sep}{k}" if parent_key else str(k)
            if isinstance(v, dict) and v:
                items.extend(self._flatten_dict(v, new_key, sep=sep).items())
            else:
                items.append((new_key, v))
        return dict(items)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"
