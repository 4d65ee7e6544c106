from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from .client import WolfPortalClient
from .const import NetworkStatus, PortalStatus
from .datapoints import DataPointCatalog, DataPointType
from .session import WolfSessionManager
from .storage import InstallationStorage

_LOGGER = logging.getLogger(__name__)

_FALSE_WORDS = frozenset({"", "false", "off", "no"})


class PollOutcome(str, Enum):
    OK = "ok"
    NO_SESSION = "no_session"
    OFFLINE = "offline"
    SERVER_ERROR = "server_error"
    SESSION_REJECTED = "session_rejected"
    NO_DATA = "no_data"


def coerce_value(data_type: DataPointType, raw: Any) -> Any:
    """
    Convert a raw portal value to the data point's type.

    Raises:
        ValueError/TypeError if the value cannot be represented
    """
    if data_type is DataPointType.BOOLEAN:
        if isinstance(raw, str):
            text = raw.strip().lower()
            if text in _FALSE_WORDS:
                return False
            try:
                return float(text) != 0
            except ValueError:
                return True
        return bool(raw)
    if data_type is DataPointType.INTEGER:
        if isinstance(raw, str):
            try:
                return int(raw.strip())
            except ValueError:
                return int(float(raw))
        return int(raw)
    if data_type is DataPointType.FLOAT:
        return float(raw)
    return str(raw)


def is_error_payload(response: Any) -> bool:
    if not isinstance(response, dict):
        return False
    return response.get("ErrorCode") is not None or response.get("ErrorType") is not None


def system_reference(system: dict[str, Any]) -> dict[str, Any]:
    return {
        "SystemId": system.get("system_id", ""),
        "GatewayId": system.get("gateway_id", ""),
        "SystemShareId": system.get("system_share_id", ""),
    }


class ValuePoller:
    """One polling cycle: online check, then one batched read per tab group."""

    def __init__(
        self,
        client: WolfPortalClient,
        session: WolfSessionManager,
        storage: InstallationStorage,
        catalog: DataPointCatalog,
        set_status: Callable[[PortalStatus], None],
        set_network_status: Callable[[NetworkStatus], None],
    ) -> None:
        self._client = client
        self._session = session
        self._storage = storage
        self._catalog = catalog
        self._set_status = set_status
        self._set_network_status = set_network_status
        self.last_changed: list[int] = []

    async def async_check_online(self, headers: dict[str, str]) -> bool:
        """Ask the portal whether the installation's gateway is online."""
        system = await self._storage.async_read_system()
        response = await self._client.async_get_system_state_list(headers, system_reference(system))
        if response is None:
            await self._session.async_invalidate_if_rejected()

        is_online = False
        if isinstance(response, list) and response and isinstance(response[0], dict):
            state = response[0].get("GatewayState")
            if isinstance(state, dict) and state.get("IsOnline") is not None:
                try:
                    is_online = int(state["IsOnline"]) == 1
                except (TypeError, ValueError):
                    is_online = False

        self._set_network_status(NetworkStatus.ONLINE if is_online else NetworkStatus.OFFLINE)
        return is_online

    async def async_poll(self) -> PollOutcome:
        self.last_changed = []

        headers = await self._session.async_get_auth_headers()
        if headers is None:
            # session manager already reported AUTH_FAILED / NO_CREDENTIALS
            return PollOutcome.NO_SESSION

        # Never read values through an unreachable gateway
        if not await self.async_check_online(headers):
            _LOGGER.debug("Wolf poll: gateway offline, skipping value reads")
            self._set_status(PortalStatus.COMM_ERROR)
            return PollOutcome.OFFLINE

        registry = await self._storage.async_load_registry()
        system = await self._storage.async_read_system()
        last_access = await self._storage.async_read_last_access()
        new_last_access = last_access
        staged: list[tuple[int, Any]] = []
        asked = answered = 0

        for group_id, entries in registry.groups():
            value_ids: list[int] = []
            data_point_by_value_id: dict[int, int] = {}
            for entry in entries.values():
                value_ids.append(entry.value_id)
                data_point_by_value_id[entry.value_id] = entry.data_point_id
            if not value_ids:
                continue

            body = {
                "GuiId": group_id,
                "GatewayId": system.get("gateway_id", ""),
                "GuiIdChanged": "true",
                "IsSubBundle": "false",
                "LastAccess": last_access,
                "SystemId": system.get("system_id", ""),
                "ValueIdList": value_ids,
            }
            asked += 1
            response = await self._client.async_get_parameter_values(headers, body)
            if response is None:
                _LOGGER.debug("Wolf poll: no answer for group %s (%s)", group_id, self._client.last_failure)
                if await self._session.async_invalidate_if_rejected():
                    return PollOutcome.SESSION_REJECTED
                continue

            if is_error_payload(response):
                _LOGGER.warning(
                    "Wolf poll: portal reported error for group %s (code=%s, type=%s); dropping session",
                    group_id,
                    response.get("ErrorCode"),
                    response.get("ErrorType"),
                )
                await self._session.async_invalidate()
                await self._storage.async_set_tree_stale(True)
                self._set_status(PortalStatus.COMM_ERROR)
                return PollOutcome.SERVER_ERROR

            values = response.get("Values") if isinstance(response, dict) else None
            if not isinstance(values, list):
                continue

            answered += 1
            new_last_access = response.get("LastAccess") or new_last_access
            staged.extend(self._stage_values(values, data_point_by_value_id))

        if asked and not answered:
            _LOGGER.warning("Wolf poll: none of %d groups answered", asked)
            self._set_status(PortalStatus.COMM_ERROR)
            return PollOutcome.NO_DATA

        self.last_changed = [dp_id for dp_id, value in staged if self._catalog.set_value(dp_id, value)]
        if self.last_changed:
            await self._storage.async_save_catalog(self._catalog)
        if new_last_access != last_access:
            await self._storage.async_write_last_access(str(new_last_access))

        _LOGGER.debug("Wolf poll: %d values read, %d changed", len(staged), len(self.last_changed))
        self._set_status(PortalStatus.OK)
        return PollOutcome.OK

    def _stage_values(
        self, values: list[Any], data_point_by_value_id: dict[int, int]
    ) -> list[tuple[int, Any]]:
        staged: list[tuple[int, Any]] = []
        for value_node in values:
            if not isinstance(value_node, dict) or value_node.get("Value") is None:
                continue
            try:
                value_id = int(value_node.get("ValueId"))
            except (TypeError, ValueError):
                continue
            data_point_id = data_point_by_value_id.get(value_id)
            data_point = self._catalog.get(data_point_id) if data_point_id is not None else None
            if data_point is None:
                continue
            try:
                typed = coerce_value(data_point.data_type, value_node["Value"])
            except (TypeError, ValueError):
                _LOGGER.debug(
                    "Wolf poll: cannot convert %r for %s (%s)",
                    value_node["Value"],
                    data_point.ident,
                    data_point.data_type.value,
                )
                continue
            staged.append((data_point.id, typed))
        return staged
