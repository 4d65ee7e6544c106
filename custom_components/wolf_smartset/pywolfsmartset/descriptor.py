"""Decoding of the portal's GUI description.

``GetGuiDescriptionForGateway`` returns a loosely shaped document: any group
may carry ``MenuItems``, ``TabViews``, ``SubMenuEntries``,
``ParameterDescriptors`` and ``ChildParameterDescriptors``, each optional.
:func:`decode_gui_description` turns it into explicit node classes once, so
the tree walk only deals with ``children`` and ``parameters``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

_LOGGER = logging.getLogger(__name__)


@dataclass
class ListItem:
    value: int
    display_text: str
    image_name: str = ""


@dataclass
class ParameterDescriptor:
    parameter_id: str | None
    name: str
    control_type: int
    value_id: int
    sort_id: int = 0
    decimals: int | None = None
    min_value: float | None = None
    max_value: float | None = None
    step_width: float | None = None
    unit: str | None = None
    list_items: list[ListItem] = field(default_factory=list)
    is_read_only: bool = True
    children: list[ParameterDescriptor] = field(default_factory=list)


@dataclass
class GroupNode:
    name: str = ""
    children: list[GroupNode] = field(default_factory=list)
    parameters: list[ParameterDescriptor] = field(default_factory=list)

    @property
    def container_ident(self) -> str | None:
        """Ident of the navigation container for this group, ``None`` for the root."""
        return None

    def tab_group(self, inherited: int) -> int:
        """Tab-group id the parameters below this group belong to."""
        return inherited


@dataclass
class DescriptorRoot(GroupNode):
    pass


@dataclass
class MenuGroup(GroupNode):
    sort_id: int = 0

    @property
    def container_ident(self) -> str:
        return f"dir_{self.sort_id}"

    def tab_group(self, inherited: int) -> int:
        # Top-level menus are not part of any tab
        return 0


@dataclass
class TabGroup(GroupNode):
    gui_id: int = 0

    @property
    def container_ident(self) -> str:
        return f"dir_{self.gui_id}"

    def tab_group(self, inherited: int) -> int:
        return self.gui_id


@dataclass
class SubMenuGroup(GroupNode):
    sort_id: int = 0

    @property
    def container_ident(self) -> str:
        return f"dir_{self.sort_id}"


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _dicts(raw: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = raw.get(key)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def decode_parameter(raw: dict[str, Any]) -> ParameterDescriptor:
    parameter_id = raw.get("ParameterId")
    decimals = raw.get("Decimals")
    unit = raw.get("Unit")
    return ParameterDescriptor(
        parameter_id=str(parameter_id) if parameter_id not in (None, "") else None,
        name=str(raw.get("Name") or ""),
        control_type=_int(raw.get("ControlType")),
        value_id=_int(raw.get("ValueId")),
        sort_id=_int(raw.get("SortId")),
        decimals=_int(decimals) if decimals is not None else None,
        min_value=_float(raw.get("MinValue")),
        max_value=_float(raw.get("MaxValue")),
        step_width=_float(raw.get("StepWidth")),
        unit=str(unit) if unit not in (None, "") else None,
        list_items=[
            ListItem(
                value=_int(item.get("Value")),
                display_text=str(item.get("DisplayText") or ""),
                image_name=str(item.get("ImageName") or ""),
            )
            for item in _dicts(raw, "ListItems")
        ],
        is_read_only=bool(raw.get("IsReadOnly", True)),
        children=[decode_parameter(child) for child in _dicts(raw, "ChildParameterDescriptors")],
    )


def _decode_group(raw: dict[str, Any], node: GroupNode) -> GroupNode:
    for item in _dicts(raw, "MenuItems"):
        node.children.append(
            _decode_group(item, MenuGroup(name=str(item.get("Name") or ""), sort_id=_int(item.get("SortId"))))
        )
    for item in _dicts(raw, "TabViews"):
        node.children.append(
            _decode_group(item, TabGroup(name=str(item.get("TabName") or ""), gui_id=_int(item.get("GuiId"))))
        )
    for item in _dicts(raw, "SubMenuEntries"):
        node.children.append(
            _decode_group(item, SubMenuGroup(name=str(item.get("Name") or ""), sort_id=_int(item.get("SortId"))))
        )
    for key in ("ParameterDescriptors", "ChildParameterDescriptors"):
        node.parameters.extend(decode_parameter(item) for item in _dicts(raw, key))
    return node


def decode_gui_description(raw: Any) -> DescriptorRoot | None:
    """Decode a GUI description document; ``None`` if it is not an object."""
    if not isinstance(raw, dict):
        _LOGGER.debug("Wolf descriptor: unexpected GUI description type %s", type(raw).__name__)
        return None
    root = DescriptorRoot()
    _decode_group(raw, root)
    return root
