from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult

from .pywolfsmartset import PortalFailure, WolfPortalClient
from .pywolfsmartset.client import FAILURE_HTTP
from .pywolfsmartset.const import DEFAULT_EXPERT_PASSWORD
from .pywolfsmartset.session import auth_headers_from_token
from .const import (
    CONF_EXPERT_PASSWORD,
    CONF_PASSWORD,
    CONF_REFRESH_INTERVAL,
    CONF_SYSTEM_NUMBER,
    CONF_USERNAME,
    CONF_VERIFY_SSL,
    DEFAULT_REFRESH_INTERVAL,
    DOMAIN,
    MAX_REFRESH_INTERVAL,
    MIN_REFRESH_INTERVAL,
)
from .coordinator import create_session

_LOGGER = logging.getLogger(__name__)


class CannotConnect(Exception):
    """The portal could not be reached or answered garbage."""


class InvalidAuth(Exception):
    """The portal rejected the credentials or the expert password."""


def _error_for(failure: PortalFailure | None) -> Exception:
    if failure is not None and failure.kind == FAILURE_HTTP and failure.status in (400, 401, 403):
        return InvalidAuth()
    return CannotConnect()


async def validate_credentials(
    client: WolfPortalClient,
    username: str,
    password: str,
    expert_password: str,
) -> list[dict[str, Any]]:
    """
    Log in once and fetch the system list.

    Returns:
        The systems visible to the account

    Raises:
        InvalidAuth: token exchange or expert login rejected
        CannotConnect: portal unreachable or the system list is unusable
    """
    token_data = await client.async_token(username, password)
    headers = auth_headers_from_token(token_data, client.language)
    if headers is None:
        if token_data is not None:
            raise InvalidAuth()
        raise _error_for(client.last_failure)

    if await client.async_expert_login(headers, expert_password) is None:
        raise _error_for(client.last_failure)

    systems = await client.async_get_system_list(headers)
    if not isinstance(systems, list):
        raise CannotConnect()
    return [s for s in systems if isinstance(s, dict)]


class WolfSmartsetConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None) -> FlowResult:
        errors: dict[str, str] = {}
        if user_input is not None:
            username = (user_input[CONF_USERNAME] or "").strip()
            password = user_input[CONF_PASSWORD]
            expert_password = user_input.get(CONF_EXPERT_PASSWORD) or DEFAULT_EXPERT_PASSWORD
            system_number = int(user_input.get(CONF_SYSTEM_NUMBER, 0))
            verify_ssl = user_input.get(CONF_VERIFY_SSL, True)

            await self.async_set_unique_id(f"{DOMAIN}_{username.lower()}")
            self._abort_if_unique_id_configured()

            session = create_session(self.hass, verify_ssl)
            client = WolfPortalClient(session)
            try:
                systems = await validate_credentials(client, username, password, expert_password)
            except InvalidAuth:
                errors["base"] = "invalid_auth"
            except CannotConnect:
                errors["base"] = "cannot_connect"
            except Exception as err:
                _LOGGER.exception("Unexpected error during authentication: %s", err)
                errors["base"] = "unknown"
            else:
                if not systems:
                    errors["base"] = "no_systems"
                elif system_number >= len(systems):
                    errors[CONF_SYSTEM_NUMBER] = "invalid_system_number"
                else:
                    title = str(systems[system_number].get("Name") or f"Wolf Smartset ({username})")
                    return self.async_create_entry(
                        title=title,
                        data={
                            CONF_USERNAME: username,
                            CONF_PASSWORD: password,
                            CONF_EXPERT_PASSWORD: expert_password,
                            CONF_SYSTEM_NUMBER: system_number,
                            CONF_VERIFY_SSL: verify_ssl,
                        },
                    )
            finally:
                if not verify_ssl:
                    await session.close()

        return self.async_show_form(step_id="user", data_schema=self._schema(), errors=errors)

    def _schema(self) -> vol.Schema:
        return vol.Schema(
            {
                vol.Required(CONF_USERNAME): str,
                vol.Required(CONF_PASSWORD): str,
                vol.Optional(CONF_EXPERT_PASSWORD, default=DEFAULT_EXPERT_PASSWORD): str,
                vol.Optional(CONF_SYSTEM_NUMBER, default=0): vol.All(vol.Coerce(int), vol.Range(min=0)),
                vol.Optional(CONF_VERIFY_SSL, default=True): bool,
            }
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the options flow handler."""
        return WolfSmartsetOptionsFlow(config_entry)


class WolfSmartsetOptionsFlow(config_entries.OptionsFlow):
    def __init__(self, entry: config_entries.ConfigEntry) -> None:
        self._entry = entry

    async def async_step_init(self, user_input=None) -> FlowResult:
        if user_input is not None:
            return self.async_create_entry(
                title="",
                data={
                    CONF_REFRESH_INTERVAL: int(user_input[CONF_REFRESH_INTERVAL]),
                    CONF_SYSTEM_NUMBER: int(user_input[CONF_SYSTEM_NUMBER]),
                },
            )

        existing_interval = self._entry.options.get(
            CONF_REFRESH_INTERVAL, self._entry.data.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL)
        )
        existing_system = self._entry.options.get(
            CONF_SYSTEM_NUMBER, self._entry.data.get(CONF_SYSTEM_NUMBER, 0)
        )
        schema = vol.Schema(
            {
                vol.Optional(CONF_REFRESH_INTERVAL, default=existing_interval): vol.All(
                    vol.Coerce(int),
                    vol.Range(min=MIN_REFRESH_INTERVAL, max=MAX_REFRESH_INTERVAL),
                ),
                vol.Optional(CONF_SYSTEM_NUMBER, default=existing_system): vol.All(
                    vol.Coerce(int), vol.Range(min=0)
                ),
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema)
