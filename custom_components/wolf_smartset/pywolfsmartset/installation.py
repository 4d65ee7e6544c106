"""One Wolf Smartset installation and its entry points.

Everything that belongs to an installation (client, storage, session
manager, catalog, poller, writer) is wired here once and handed to the
collaborators explicitly. The host calls the ``async_*`` entry points one
at a time; none of them raise, results are reported through ``status`` and
``network_status``.
"""

from __future__ import annotations

import logging
from typing import Any

from .client import WolfPortalClient
from .const import DEFAULT_EXPERT_PASSWORD, NetworkStatus, PortalStatus
from .datapoints import DataPointCatalog
from .descriptor import decode_gui_description
from .poller import PollOutcome, ValuePoller
from .session import WolfSessionManager
from .storage import InstallationStorage
from .tree import ParameterTreeSynchronizer, SyncMode
from .writer import ValueWriter

_LOGGER = logging.getLogger(__name__)

ROOT_CONTAINER_IDENT = "data"

SYSTEM_INFO_FIELDS = {
    "ContactInfo": "contact_info",
    "Description": "description",
    "GatewaySoftwareVersion": "gateway_software_version",
    "GatewayUsername": "gateway_username",
    "InstallationDate": "installation_date",
    "Location": "location",
    "OperatorName": "operator_name",
}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class WolfInstallation:
    def __init__(
        self,
        client: WolfPortalClient,
        storage: InstallationStorage,
        catalog: DataPointCatalog,
        username: str,
        password: str,
        expert_password: str = DEFAULT_EXPERT_PASSWORD,
        system_number: int = 0,
        system: dict[str, Any] | None = None,
    ) -> None:
        self._client = client
        self._storage = storage
        self._system_number = system_number
        self.catalog = catalog
        self.system: dict[str, Any] = system or {}
        self.status = PortalStatus.INACTIVE
        self.network_status = NetworkStatus.UNKNOWN

        self.session = WolfSessionManager(
            client,
            storage,
            username,
            password,
            expert_password,
            set_status=self._set_status,
        )
        self.poller = ValuePoller(
            client,
            self.session,
            storage,
            catalog,
            set_status=self._set_status,
            set_network_status=self._set_network_status,
        )
        self.writer = ValueWriter(client, self.session, storage, catalog, self.poller)

    @classmethod
    async def async_create(
        cls,
        client: WolfPortalClient,
        storage: InstallationStorage,
        username: str,
        password: str,
        expert_password: str = DEFAULT_EXPERT_PASSWORD,
        system_number: int = 0,
    ) -> WolfInstallation:
        """Build an installation from its persisted state.

        State persisted for another system number is dropped, the first
        refresh then builds the tree of the selected system.
        """
        system = await storage.async_read_system()
        if system and system.get("system_number", system_number) != system_number:
            _LOGGER.info(
                "Wolf installation: system number changed from %s to %s, discarding stored tree",
                system.get("system_number"),
                system_number,
            )
            await storage.async_clear()
            system = {}
        catalog = await storage.async_load_catalog()
        return cls(
            client,
            storage,
            catalog,
            username,
            password,
            expert_password=expert_password,
            system_number=system_number,
            system=system,
        )

    def _set_status(self, status: PortalStatus) -> None:
        if status is not self.status:
            _LOGGER.debug("Wolf installation: status %s -> %s", self.status.value, status.value)
        self.status = status

    def _set_network_status(self, status: NetworkStatus) -> None:
        self.network_status = status

    @property
    def system_info(self) -> dict[str, str]:
        return dict(self.system.get("info") or {})

    async def async_get_system_info(self, force_reauth: bool = False) -> SyncMode | None:
        """Load the system list and GUI description, then build or patch the parameter tree.

        Returns the pass that ran, or ``None`` if the portal could not be read.
        """
        if force_reauth:
            await self.session.async_invalidate()

        headers = await self.session.async_get_auth_headers()
        if headers is None:
            return None

        system_list = await self._client.async_get_system_list(headers)
        if not isinstance(system_list, list) or not system_list:
            _LOGGER.warning("Wolf installation: no system list (%s)", self._client.last_failure)
            if system_list is None:
                await self.session.async_invalidate_if_rejected()
            self._set_status(PortalStatus.COMM_ERROR)
            return None

        index = self._system_number
        current = system_list[index] if 0 <= index < len(system_list) else system_list[0]
        if not isinstance(current, dict):
            self._set_status(PortalStatus.COMM_ERROR)
            return None

        self.system = {
            "system_id": _text(current.get("Id")),
            "gateway_id": _text(current.get("GatewayId")),
            "system_share_id": _text(current.get("SystemShareId")),
            "name": _text(current.get("Name")),
            "system_number": self._system_number,
            "info": {key: _text(current.get(field)) for field, key in SYSTEM_INFO_FIELDS.items()},
        }
        await self._storage.async_write_system(self.system)

        raw = await self._client.async_get_gui_description(
            headers, self.system["gateway_id"], self.system["system_id"]
        )
        root = decode_gui_description(raw)
        if root is None:
            _LOGGER.warning("Wolf installation: no GUI description (%s)", self._client.last_failure)
            if raw is None:
                await self.session.async_invalidate_if_rejected()
            self._set_status(PortalStatus.COMM_ERROR)
            return None

        registry = await self._storage.async_load_registry()
        synchronizer = ParameterTreeSynchronizer(self.catalog, registry)

        if registry.is_empty:
            root_id = self.catalog.ensure_container(ROOT_CONTAINER_IDENT, "Data", None)
            synchronizer.synchronize(root, root_id, SyncMode.BUILD)
            await self._storage.async_save_tree(self.catalog, registry)
            await self._storage.async_set_tree_stale(False)
            _LOGGER.debug(
                "Wolf installation: built %d data points in %d groups",
                len(self.catalog.data_points),
                sum(1 for _ in registry.groups()),
            )
            await self.async_get_values()
            return SyncMode.BUILD

        synchronizer.synchronize(root, None, SyncMode.PATCH)
        await self._storage.async_save_registry(registry)
        await self._storage.async_set_tree_stale(False)
        return SyncMode.PATCH

    async def async_get_values(self) -> PollOutcome:
        return await self.poller.async_poll()

    async def async_get_online_status(self) -> bool:
        headers = await self.session.async_get_auth_headers()
        if headers is None:
            return False
        return await self.poller.async_check_online(headers)

    async def async_write_value(self, identifier: Any, value: Any) -> bool:
        return await self.writer.async_write(identifier, value)

    async def async_logout(self) -> None:
        await self.session.async_logout()

    async def async_refresh(self) -> PortalStatus:
        """Scheduled cycle: (re)sync the tree when needed, otherwise poll values."""
        registry = await self._storage.async_load_registry()
        if registry.is_empty or await self._storage.async_is_tree_stale():
            mode = await self.async_get_system_info()
            if mode is not SyncMode.PATCH:
                # BUILD already polled; None means the portal could not be read
                return self.status
        await self.async_get_values()
        return self.status
