from __future__ import annotations

import logging
from typing import Any, Protocol

from .const import INITIAL_LAST_ACCESS
from .datapoints import DataPointCatalog
from .registry import ParameterRegistry

_LOGGER = logging.getLogger(__name__)

# Document version - increment when the persisted layout changes
DOCUMENT_VERSION = 1


class StoreBackend(Protocol):
    """Anything with the async load/save/remove trio of Home Assistant's ``Store``."""

    async def async_load(self) -> Any: ...

    async def async_save(self, data: Any) -> None: ...

    async def async_remove(self) -> None: ...


def _empty_document() -> dict[str, Any]:
    return {
        "version": DOCUMENT_VERSION,
        "session": "",
        "registry": {},
        "catalog": {},
        "last_access": INITIAL_LAST_ACCESS,
        "system": {},
        "tree_stale": False,
    }


class InstallationStorage:
    """Persisted state of one installation, kept as a single JSON document.

    Slots: cached session blob, parameter registry, data point catalog,
    last-access timestamp, system/gateway identifiers and the stale-tree flag.
    Every accessor reads the whole document and every mutator writes it back
    whole; the installation never runs two entry points at once, so
    last-writer-wins is fine.
    """

    def __init__(self, store: StoreBackend) -> None:
        self._store = store

    async def async_load(self) -> dict[str, Any]:
        """
        Load the document from the backend.

        Returns:
            The stored document, or a fresh empty one if the stored data is
            missing, has another version or is malformed
        """
        try:
            data = await self._store.async_load()
        except Exception as err:
            _LOGGER.warning("Wolf storage: error loading installation state: %s", err)
            return _empty_document()

        if not data:
            _LOGGER.debug("Wolf storage: no stored state")
            return _empty_document()

        if not isinstance(data, dict):
            _LOGGER.debug("Wolf storage: invalid document type %s", type(data).__name__)
            return _empty_document()

        version = data.get("version", 0)
        if version != DOCUMENT_VERSION:
            _LOGGER.debug(
                "Wolf storage: version mismatch (stored=%s, expected=%d)",
                version,
                DOCUMENT_VERSION,
            )
            return _empty_document()

        document = _empty_document()
        document.update(data)
        return document

    async def _async_update(self, **changes: Any) -> None:
        document = await self.async_load()
        document.update(changes)
        try:
            await self._store.async_save(document)
        except Exception as err:
            _LOGGER.warning("Wolf storage: error saving installation state: %s", err)

    async def async_clear(self) -> None:
        try:
            await self._store.async_remove()
            _LOGGER.debug("Wolf storage: cleared")
        except Exception as err:
            _LOGGER.warning("Wolf storage: error clearing installation state: %s", err)

    # Session slot
    async def async_read_session(self) -> str:
        value = (await self.async_load()).get("session")
        return value if isinstance(value, str) else ""

    async def async_write_session(self, blob: str) -> None:
        await self._async_update(session=blob)

    async def async_clear_session(self) -> None:
        await self._async_update(session="")

    # Parameter registry
    async def async_load_registry(self) -> ParameterRegistry:
        return ParameterRegistry.from_dict((await self.async_load()).get("registry"))

    async def async_save_registry(self, registry: ParameterRegistry) -> None:
        await self._async_update(registry=registry.to_dict())

    # Data point catalog
    async def async_load_catalog(self) -> DataPointCatalog:
        return DataPointCatalog.from_dict((await self.async_load()).get("catalog"))

    async def async_save_catalog(self, catalog: DataPointCatalog) -> None:
        await self._async_update(catalog=catalog.to_dict())

    async def async_save_tree(self, catalog: DataPointCatalog, registry: ParameterRegistry) -> None:
        await self._async_update(catalog=catalog.to_dict(), registry=registry.to_dict())

    # Last access
    async def async_read_last_access(self) -> str:
        value = (await self.async_load()).get("last_access")
        return value if isinstance(value, str) and value else INITIAL_LAST_ACCESS

    async def async_write_last_access(self, value: str) -> None:
        await self._async_update(last_access=value)

    # System / gateway identifiers and info
    async def async_read_system(self) -> dict[str, Any]:
        value = (await self.async_load()).get("system")
        return dict(value) if isinstance(value, dict) else {}

    async def async_write_system(self, system: dict[str, Any], last_access: str = INITIAL_LAST_ACCESS) -> None:
        await self._async_update(system=system, last_access=last_access)

    # Tree staleness
    async def async_is_tree_stale(self) -> bool:
        return bool((await self.async_load()).get("tree_stale"))

    async def async_set_tree_stale(self, stale: bool) -> None:
        await self._async_update(tree_stale=stale)
