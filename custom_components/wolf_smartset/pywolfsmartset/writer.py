from __future__ import annotations

import logging
from typing import Any

from .client import WolfPortalClient
from .datapoints import DataPointCatalog
from .poller import ValuePoller, coerce_value
from .registry import ParameterRegistry, RegistryEntry
from .session import WolfSessionManager
from .storage import InstallationStorage

_LOGGER = logging.getLogger(__name__)


def resolve_entry(registry: ParameterRegistry, identifier: Any) -> RegistryEntry | None:
    """Find the registry entry for a parameter identifier or a data point ident (``ID<identifier>``)."""
    key = str(identifier)
    found = registry.find(key)
    if found is None and key.startswith("ID"):
        found = registry.find(key[2:])
    return found[1] if found else None


class ValueWriter:
    def __init__(
        self,
        client: WolfPortalClient,
        session: WolfSessionManager,
        storage: InstallationStorage,
        catalog: DataPointCatalog,
        poller: ValuePoller,
    ) -> None:
        self._client = client
        self._session = session
        self._storage = storage
        self._catalog = catalog
        self._poller = poller

    async def async_write(self, identifier: Any, value: Any) -> bool:
        """Write one parameter, then reconcile with a full poll.

        Returns False without touching anything when there is no session or
        the identifier is not in the registry, and False without the poll when
        the portal refused the session.
        """
        headers = await self._session.async_get_auth_headers()
        if headers is None:
            return False

        registry = await self._storage.async_load_registry()
        entry = resolve_entry(registry, identifier)
        if entry is None:
            _LOGGER.debug("Wolf write: %s not in parameter registry, ignoring", identifier)
            return False

        # Optimistic local update; the poll below brings the authoritative value
        data_point = self._catalog.get(entry.data_point_id)
        if data_point is not None:
            try:
                local_value = coerce_value(data_point.data_type, value)
            except (TypeError, ValueError):
                local_value = value
            if self._catalog.set_value(data_point.id, local_value):
                await self._storage.async_save_catalog(self._catalog)

        system = await self._storage.async_read_system()
        body = {
            "WriteParameterValues": [
                {
                    "ValueId": entry.value_id,
                    "Value": value,
                    "ParameterName": "NULL",
                }
            ],
            "SystemId": system.get("system_id", ""),
            "GatewayId": system.get("gateway_id", ""),
        }
        if await self._client.async_write_parameter_values(headers, body) is None:
            _LOGGER.warning("Wolf write: writing %s failed (%s)", identifier, self._client.last_failure)
            if await self._session.async_invalidate_if_rejected():
                return False
        else:
            _LOGGER.debug("Wolf write: %s <- %r", identifier, value)

        await self._poller.async_poll()
        return True
