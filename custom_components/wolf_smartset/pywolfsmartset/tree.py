"""Walk the decoded GUI description and map it onto local data points.

BUILD creates containers and data points and fills the registry; PATCH walks
the same tree afterwards and only refreshes the server value ids of entries
already in the registry. Both modes share the container recursion; the mode
only decides what happens at a parameter leaf.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .const import (
    CHOICE_CONTROL_TYPES,
    PLACEHOLDER_PARAMETER_NAME,
    SWITCH_CONTROL_TYPE,
    VENTILATION_ICON,
    VENTILATION_ICON_PREFIX,
)
from .datapoints import Association, DataPoint, DataPointCatalog, DataPointType
from .descriptor import GroupNode, ParameterDescriptor
from .registry import ParameterRegistry

_LOGGER = logging.getLogger(__name__)


class SyncMode(str, Enum):
    BUILD = "build"
    PATCH = "patch"


@dataclass
class SyncStats:
    created: int = 0
    updated: int = 0
    skipped: int = 0


def synthesize_identifier(path: tuple[str, ...]) -> str:
    """Stable identifier for a descriptor without ParameterId, derived from its tree path."""
    digest = hashlib.sha1("/".join(path).encode("utf-8")).hexdigest()
    return f"X{digest[:12]}"


def map_icon(image_name: str) -> str:
    return VENTILATION_ICON if image_name.startswith(VENTILATION_ICON_PREFIX) else ""


def data_point_layout(desc: ParameterDescriptor) -> tuple[DataPointType, dict[str, Any]]:
    """Pick the data point type and value domain for a descriptor."""
    domain: dict[str, Any] = {"writable": not desc.is_read_only, "sort_id": desc.sort_id}

    if desc.decimals == 1:
        domain.update(
            minimum=desc.min_value if desc.min_value is not None else 0.0,
            maximum=desc.max_value if desc.max_value is not None else 100.0,
            step=desc.step_width if desc.step_width is not None else 1.0,
            unit=desc.unit,
        )
        return DataPointType.FLOAT, domain

    if desc.control_type in CHOICE_CONTROL_TYPES:
        domain.update(
            minimum=int(desc.min_value) if desc.min_value is not None else 0,
            maximum=int(desc.max_value) if desc.max_value is not None else 100,
            step=int(desc.step_width) if desc.step_width is not None else 1,
            unit=desc.unit,
            associations=[
                Association(value=item.value, label=item.display_text, icon=map_icon(item.image_name))
                for item in desc.list_items
            ],
        )
        return DataPointType.INTEGER, domain

    if desc.control_type == SWITCH_CONTROL_TYPE:
        return DataPointType.BOOLEAN, domain

    return DataPointType.STRING, domain


class ParameterTreeSynchronizer:
    def __init__(self, catalog: DataPointCatalog, registry: ParameterRegistry) -> None:
        self._catalog = catalog
        self._registry = registry
        self._stats = SyncStats()

    def synchronize(self, root: GroupNode, parent_id: int | None, mode: SyncMode) -> SyncStats:
        self._stats = SyncStats()
        self.walk(root, parent_id, 0, mode)
        _LOGGER.debug(
            "Wolf tree: %s pass done (created=%d, updated=%d, skipped=%d)",
            mode.value,
            self._stats.created,
            self._stats.updated,
            self._stats.skipped,
        )
        return self._stats

    def walk(
        self,
        node: GroupNode,
        parent_id: int | None,
        tab_group_id: int,
        mode: SyncMode,
        path: tuple[str, ...] = (),
    ) -> None:
        for index, child in enumerate(node.children):
            child_parent = parent_id
            if mode is SyncMode.BUILD:
                child_parent = self._ensure_container(child, parent_id)
            self.walk(
                child,
                child_parent,
                child.tab_group(tab_group_id),
                mode,
                (*path, child.container_ident or str(index)),
            )
        self._process_parameters(node.parameters, parent_id, tab_group_id, mode, path)

    def _ensure_container(self, group: GroupNode, parent_id: int | None) -> int | None:
        ident = group.container_ident
        if ident is None or not group.name or group.name == "NULL":
            return parent_id
        return self._catalog.ensure_container(ident, group.name, parent_id)

    def _process_parameters(
        self,
        descriptors: list[ParameterDescriptor],
        parent_id: int | None,
        tab_group_id: int,
        mode: SyncMode,
        path: tuple[str, ...],
    ) -> None:
        for index, desc in enumerate(descriptors):
            if desc.name == PLACEHOLDER_PARAMETER_NAME:
                self._stats.skipped += 1
                continue

            identifier = desc.parameter_id or synthesize_identifier((*path, str(index), desc.name))
            child_path = (*path, identifier)

            if mode is SyncMode.PATCH:
                if self._registry.patch_value_id(tab_group_id, identifier, desc.value_id):
                    self._stats.updated += 1
                self._process_parameters(desc.children, parent_id, tab_group_id, mode, child_path)
                continue

            data_point = self._register(desc, identifier, parent_id, tab_group_id)
            self._process_parameters(desc.children, data_point.id, tab_group_id, mode, child_path)

    def _register(
        self, desc: ParameterDescriptor, identifier: str, parent_id: int | None, tab_group_id: int
    ) -> DataPoint:
        ident = f"ID{identifier}"
        existing = self._catalog.find(parent_id, ident)
        if isinstance(existing, DataPoint):
            data_point = existing
        else:
            data_type, domain = data_point_layout(desc)
            data_point = self._catalog.create_data_point(ident, desc.name, parent_id, data_type, **domain)
            self._stats.created += 1

        self._registry.upsert(tab_group_id, identifier, desc.value_id, data_point.id)
        return data_point
