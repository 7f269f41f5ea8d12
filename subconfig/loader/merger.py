"""Applying tier payloads to the configuration store.

Two modes are supported:

- overwrite: every top-level key of the payload replaces the stored value
- merge: the payload is flattened to leaf keys and each leaf is added to
  what is stored, turning scalars into lists; nothing is ever replaced

Flattening drops sequence indices from keys, so every element of a list
lands on the same key::

    {"view": {"paths": ["a", "b"]}, "debug": True}
    -> {"view.paths": ["a", "b"], "debug": True}
"""

import logging
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

from ..models.schemas import ApplyMode, TierPayload
from ..store import ConfigStore

logger = logging.getLogger(__name__)


class ValueKind(Enum):
    """Structural kind of a configuration value."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def value_kind(value: Any) -> ValueKind:
    """Classify a configuration value."""
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR


def _is_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def _leaves(value: Any, path: tuple[str, ...] = ()) -> Iterator[tuple[str, Any]]:
    """Yield ``(dotted_key, leaf)`` pairs depth-first, skipping index segments."""
    kind = value_kind(value)

    if kind is ValueKind.MAPPING:
        for key, child in value.items():
            child_path = path if _is_index(key) else path + (str(key),)
            yield from _leaves(child, child_path)
    elif kind is ValueKind.SEQUENCE:
        for child in value:
            yield from _leaves(child, path)
    else:
        yield ".".join(path), value


def flatten(data: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a nested payload into leaf keys.

    Leaves landing on the same key are collected into a list in the order
    they were visited.
    """
    result: dict[str, Any] = {}
    collected: set[str] = set()

    for key, leaf in _leaves(data):
        if not key:
            logger.warning(f"Dropping value {leaf!r} without a string key")
            continue

        if key not in result:
            result[key] = leaf
        elif key in collected:
            result[key].append(leaf)
        else:
            result[key] = [result[key], leaf]
            collected.add(key)

    return result


class ConfigurationMerger:
    """Applies tier payloads to a configuration store."""

    def __init__(self, store: ConfigStore):
        self.store = store

    def apply(self, payload: TierPayload) -> list[str]:
        """Apply a payload in the mode it asks for.

        Returns:
            Keys written to the store
        """
        if payload.mode is ApplyMode.MERGE:
            return self.apply_merge(payload)
        return self.apply_overwrite(payload)

    def apply_overwrite(self, payload: TierPayload) -> list[str]:
        """Write every top-level key of the payload, replacing stored values."""
        data = {str(k): v for k, v in payload.data.items()}
        self.store.bulk_set(data, source=payload.source)
        return list(data)

    def apply_merge(self, payload: TierPayload) -> list[str]:
        """Add every flattened leaf of the payload to the stored values."""
        flat = flatten(payload.data)

        for key, value in flat.items():
            existing = self.store.get(key)

            if self._is_absent(existing):
                self.store.set(key, value, source=payload.source)
                continue

            if value_kind(existing) is ValueKind.SEQUENCE:
                merged = list(existing)
            else:
                merged = [existing]

            if value_kind(value) is ValueKind.SEQUENCE:
                merged.extend(value)
            else:
                merged.append(value)

            self.store.set(key, merged, source=payload.source)

        return list(flat)

    @staticmethod
    def _is_absent(value: Any) -> bool:
        # Falsy scalars (0, False, "") are data and get promoted like any other
        if value is None:
            return True
        return value_kind(value) is not ValueKind.SCALAR and len(value) == 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(store={self.store!r})"
