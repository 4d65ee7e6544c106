"""Parameter registry: the persisted map from portal parameters to local data points.

Layout::

    {tab_group_id: {parameter_identifier: RegistryEntry(value_id, data_point_id)}}

``data_point_id`` is assigned once when the data point is created and never
rewritten. ``value_id`` is the portal's current handle for the value and may be
renumbered by the server between sessions, so the patch pass rewrites it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

_LOGGER = logging.getLogger(__name__)


@dataclass
class RegistryEntry:
    value_id: int
    data_point_id: int

    def to_dict(self) -> dict[str, int]:
        return {"value_id": self.value_id, "data_point_id": self.data_point_id}


class ParameterRegistry:
    """Group id -> parameter identifier -> :class:`RegistryEntry`."""

    def __init__(self) -> None:
        self._groups: dict[int, dict[str, RegistryEntry]] = {}

    @property
    def is_empty(self) -> bool:
        return not any(self._groups.values())

    def groups(self) -> Iterator[tuple[int, dict[str, RegistryEntry]]]:
        yield from self._groups.items()

    def get(self, group_id: int, identifier: str) -> RegistryEntry | None:
        return self._groups.get(group_id, {}).get(identifier)

    def find(self, identifier: str) -> tuple[int, RegistryEntry] | None:
        """Return the first (group_id, entry) registered for ``identifier``."""
        for group_id, entries in self._groups.items():
            entry = entries.get(identifier)
            if entry is not None:
                return group_id, entry
        return None

    def upsert(self, group_id: int, identifier: str, value_id: int, data_point_id: int) -> RegistryEntry:
        entries = self._groups.setdefault(group_id, {})
        entry = entries.get(identifier)
        if entry is None:
            entry = RegistryEntry(value_id=value_id, data_point_id=data_point_id)
            entries[identifier] = entry
            return entry
        if entry.data_point_id != data_point_id:
            _LOGGER.debug(
                "Wolf registry: keeping data point %s for %s/%s (build offered %s)",
                entry.data_point_id,
                group_id,
                identifier,
                data_point_id,
            )
        entry.value_id = value_id
        return entry

    def patch_value_id(self, group_id: int, identifier: str, value_id: int) -> bool:
        """Rewrite the value id of an existing entry. Returns True if it changed."""
        entry = self.get(group_id, identifier)
        if entry is None or entry.value_id == value_id:
            return False
        entry.value_id = value_id
        return True

    def to_dict(self) -> dict[str, dict[str, dict[str, int]]]:
        # JSON object keys are strings
        return {
            str(group_id): {ident: entry.to_dict() for ident, entry in entries.items()}
            for group_id, entries in self._groups.items()
        }

    @classmethod
    def from_dict(cls, data: Any) -> ParameterRegistry:
        registry = cls()
        if not isinstance(data, dict):
            return registry
        for group_key, entries in data.items():
            try:
                group_id = int(group_key)
            except (TypeError, ValueError):
                _LOGGER.debug("Wolf registry: invalid group key: %s", group_key)
                continue
            if not isinstance(entries, dict):
                continue
            for ident, raw in entries.items():
                if not isinstance(raw, dict):
                    continue
                try:
                    entry = RegistryEntry(
                        value_id=int(raw["value_id"]),
                        data_point_id=int(raw["data_point_id"]),
                    )
                except (KeyError, TypeError, ValueError):
                    _LOGGER.debug("Wolf registry: invalid entry %s/%s: %r", group_key, ident, raw)
                    continue
                registry._groups.setdefault(group_id, {})[str(ident)] = entry
        return registry

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._groups.values())
