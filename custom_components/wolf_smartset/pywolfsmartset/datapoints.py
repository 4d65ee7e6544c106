"""Local data points and their navigation containers.

This is the installation's own object tree: containers mirror the portal's
menu/tab structure, data points are the typed value slots exposed to the
host. Node ids are integers handed out once and never reused; an ident is
unique among the children of one parent.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

_LOGGER = logging.getLogger(__name__)


class DataPointType(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"


@dataclass
class Association:
    value: int
    label: str
    icon: str = ""


@dataclass
class Container:
    id: int
    ident: str
    name: str
    parent_id: int | None


@dataclass
class DataPoint:
    id: int
    ident: str
    name: str
    parent_id: int | None
    data_type: DataPointType
    writable: bool = False
    minimum: float | None = None
    maximum: float | None = None
    step: float | None = None
    unit: str | None = None
    associations: list[Association] = field(default_factory=list)
    sort_id: int = 0
    value: Any = None

    @property
    def options(self) -> dict[int, str]:
        return {assoc.value: assoc.label for assoc in self.associations}

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["data_type"] = self.data_type.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DataPoint:
        return cls(
            id=int(data["id"]),
            ident=str(data["ident"]),
            name=str(data.get("name", "")),
            parent_id=data.get("parent_id"),
            data_type=DataPointType(data["data_type"]),
            writable=bool(data.get("writable", False)),
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
            step=data.get("step"),
            unit=data.get("unit"),
            associations=[Association(**a) for a in data.get("associations") or []],
            sort_id=int(data.get("sort_id") or 0),
            value=data.get("value"),
        )


class DataPointCatalog:
    """All containers and data points of one installation."""

    def __init__(self) -> None:
        self._containers: dict[int, Container] = {}
        self._data_points: dict[int, DataPoint] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        node_id = self._next_id
        self._next_id += 1
        return node_id

    @property
    def is_empty(self) -> bool:
        return not self._data_points

    @property
    def data_points(self) -> list[DataPoint]:
        return list(self._data_points.values())

    @property
    def containers(self) -> list[Container]:
        return list(self._containers.values())

    def get(self, data_point_id: int) -> DataPoint | None:
        return self._data_points.get(data_point_id)

    def get_container(self, container_id: int) -> Container | None:
        return self._containers.get(container_id)

    def find(self, parent_id: int | None, ident: str) -> Container | DataPoint | None:
        """Look up a child of ``parent_id`` by ident."""
        for node in (*self._containers.values(), *self._data_points.values()):
            if node.parent_id == parent_id and node.ident == ident:
                return node
        return None

    def ensure_container(self, ident: str, name: str, parent_id: int | None) -> int:
        """Return the id of the container ``ident`` under ``parent_id``, creating it if needed."""
        existing = self.find(parent_id, ident)
        if existing is not None:
            return existing.id
        container = Container(id=self._allocate_id(), ident=ident, name=name, parent_id=parent_id)
        self._containers[container.id] = container
        _LOGGER.debug("Wolf catalog: created container %s '%s' under %s", container.id, name, parent_id)
        return container.id

    def create_data_point(self, ident: str, name: str, parent_id: int | None, data_type: DataPointType, **domain: Any) -> DataPoint:
        data_point = DataPoint(
            id=self._allocate_id(),
            ident=ident,
            name=name,
            parent_id=parent_id,
            data_type=data_type,
            **domain,
        )
        self._data_points[data_point.id] = data_point
        _LOGGER.debug(
            "Wolf catalog: created %s data point %s '%s' (%s)",
            data_type.value,
            data_point.id,
            name,
            ident,
        )
        return data_point

    def set_value(self, data_point_id: int, value: Any) -> bool:
        """Store ``value``; returns True only if it differs from the current one."""
        data_point = self._data_points.get(data_point_id)
        if data_point is None:
            return False
        if data_point.value == value and type(data_point.value) is type(value):
            return False
        data_point.value = value
        return True

    def path(self, node_id: int | None) -> list[str]:
        """Container names from the root down to ``node_id``."""
        names: list[str] = []
        seen: set[int] = set()
        while node_id is not None and node_id not in seen:
            seen.add(node_id)
            node = self._containers.get(node_id) or self._data_points.get(node_id)
            if node is None:
                break
            names.append(node.name)
            node_id = node.parent_id
        return list(reversed(names))

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_id": self._next_id,
            "containers": [asdict(c) for c in self._containers.values()],
            "data_points": [dp.to_dict() for dp in self._data_points.values()],
        }

    @classmethod
    def from_dict(cls, data: Any) -> DataPointCatalog:
        catalog = cls()
        if not isinstance(data, dict):
            return catalog
        for raw in data.get("containers") or []:
            try:
                container = Container(
                    id=int(raw["id"]),
                    ident=str(raw["ident"]),
                    name=str(raw.get("name", "")),
                    parent_id=raw.get("parent_id"),
                )
            except (KeyError, TypeError, ValueError):
                _LOGGER.debug("Wolf catalog: invalid container %r", raw)
                continue
            catalog._containers[container.id] = container
        for raw in data.get("data_points") or []:
            try:
                data_point = DataPoint.from_dict(raw)
            except (KeyError, TypeError, ValueError):
                _LOGGER.debug("Wolf catalog: invalid data point %r", raw)
                continue
            catalog._data_points[data_point.id] = data_point
        highest = max((*catalog._containers, *catalog._data_points), default=0)
        try:
            catalog._next_id = max(int(data.get("next_id") or 1), highest + 1)
        except (TypeError, ValueError):
            catalog._next_id = highest + 1
        return catalog
