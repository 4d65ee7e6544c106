from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import quote

from aiohttp import ClientError, ClientSession, ClientTimeout

from .const import (
    BASE_URL,
    CONNECT_TIMEOUT,
    EXPERT_LOGIN_PATH,
    GUI_DESCRIPTION_PATH,
    JSON_CONTENT_TYPE,
    LANGUAGE,
    PARAMETER_VALUES_PATH,
    POLL_HEADERS,
    REQUEST_TIMEOUT,
    SYSTEM_LIST_PATH,
    SYSTEM_STATE_LIST_PATH,
    TOKEN_PATH,
    UPDATE_SESSION_PATH,
    USER_AGENT,
    WRITE_PARAMETER_VALUES_PATH,
)
from .exceptions import DecodeError, ProtocolError, TransportError
from .retry import async_retry_with_backoff, is_auth_error

_LOGGER = logging.getLogger(__name__)

FAILURE_NETWORK = "network"
FAILURE_HTTP = "http"
FAILURE_DECODE = "decode"


@dataclass
class PortalFailure:
    kind: str
    status: int | None = None
    detail: str | None = None

    @property
    def rejected_session(self) -> bool:
        """The portal answered 401/403: the session headers are no longer accepted."""
        return self.kind == FAILURE_HTTP and self.status in (401, 403)


def accept_language(language: str) -> str:
    return f"{language},de;q=0.8,en;q=0.6,en-US;q=0.4"


def _log_path(path: str) -> str:
    # Query strings may carry the expert password
    return path.split("?", 1)[0]


class WolfPortalClient:
    """Async request executor for the Wolf Smartset portal API.

    Stateless apart from ``last_failure``: every call builds its own request
    from the relative path, fixed headers and the caller's session headers,
    and returns the decoded JSON body or ``None``. Nothing raises past this
    class.
    """

    def __init__(
        self,
        session: ClientSession,
        base_url: str = BASE_URL,
        language: str = LANGUAGE,
        max_retries: int = 2,
        retry_delay: float = 1.0,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/") + "/"
        self._language = language
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._timeout = ClientTimeout(total=REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT)
        self.last_failure: PortalFailure | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def language(self) -> str:
        return self._language

    def _default_headers(self) -> dict[str, str]:
        return {
            "Accept-Language": accept_language(self._language),
            "User-Agent": USER_AGENT,
        }

    async def async_request(
        self,
        path: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
        keep_alive: bool = False,
    ) -> Any | None:
        """Send a JSON API request.

        ``keep_alive`` sends the literal empty object the portal expects for
        session pings. A dict or list ``body`` is sent as JSON. Returns the
        decoded object/list for 2xx answers, ``None`` on any failure.
        """
        request_headers = self._default_headers()
        request_headers.update(headers or {})

        data: str | None = None
        if keep_alive:
            data = "{}"
        elif body is not None:
            data = json.dumps(body)
            request_headers["Content-Type"] = JSON_CONTENT_TYPE

        async def _do_request() -> Any:
            return await self._send(method, path, request_headers, data)

        return await self._guarded(_do_request, method, path)

    async def async_request_form(self, path: str, form: dict[str, str]) -> dict[str, Any] | None:
        """POST application/x-www-form-urlencoded (token exchange)."""
        request_headers = self._default_headers()
        request_headers["Content-Type"] = "application/x-www-form-urlencoded"

        async def _do_request() -> Any:
            payload = await self._send("POST", path, request_headers, form, label="POST(form)")
            if not isinstance(payload, dict):
                raise DecodeError(f"{path} returned {type(payload).__name__}, expected object")
            return payload

        return await self._guarded(_do_request, "POST", path)

    async def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        data: Any,
        label: str | None = None,
    ) -> Any:
        url = self._base_url + path.lstrip("/")
        try:
            async with self._session.request(
                method, url, headers=headers, data=data, timeout=self._timeout
            ) as resp:
                status = resp.status
                text = await resp.text()
        except (ClientError, asyncio.TimeoutError) as err:
            _LOGGER.debug("Wolf portal: %s %s -> failed: %s", label or method, _log_path(path), err)
            raise TransportError(str(err) or type(err).__name__) from err

        _LOGGER.debug("Wolf portal: %s %s -> %s", label or method, _log_path(path), status)

        if not 200 <= status < 300:
            raise ProtocolError("unexpected HTTP status", status=status, path=_log_path(path))

        try:
            payload = json.loads(text)
        except ValueError as err:
            raise DecodeError(f"{_log_path(path)} returned invalid JSON") from err
        if payload is None:
            raise DecodeError(f"{_log_path(path)} returned null")
        return payload

    async def _guarded(
        self, func: Callable[[], Awaitable[Any]], method: str, path: str
    ) -> Any | None:
        self.last_failure = None
        try:
            return await async_retry_with_backoff(
                func,
                max_retries=self._max_retries,
                initial_delay=self._retry_delay,
                context=f"Wolf {method} {_log_path(path)}",
            )
        except TransportError as err:
            self.last_failure = PortalFailure(FAILURE_NETWORK, detail=str(err))
        except ProtocolError as err:
            self.last_failure = PortalFailure(FAILURE_HTTP, status=err.status)
            if is_auth_error(err):
                _LOGGER.debug("Wolf portal: %s %s rejected the session (HTTP %s)", method, _log_path(path), err.status)
        except DecodeError as err:
            self.last_failure = PortalFailure(FAILURE_DECODE, detail=str(err))
        _LOGGER.debug("Wolf portal: %s %s failed: %s", method, _log_path(path), self.last_failure)
        return None

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------
    async def async_token(self, username: str, password: str) -> dict[str, Any] | None:
        return await self.async_request_form(
            TOKEN_PATH,
            {
                "IsPasswordReset": "false",
                "IsProfessional": "true",
                "grant_type": "password",
                "username": username,
                "password": password,
                "ServerWebApiVersion": "2",
                "CultureInfoCode": self._language,
            },
        )

    async def async_expert_login(self, headers: dict[str, str], expert_password: str) -> Any | None:
        path = f"{EXPERT_LOGIN_PATH}?Password={quote(expert_password, safe='')}&_={int(time.time())}"
        return await self.async_request(path, "GET", headers)

    async def async_update_session(self, headers: dict[str, str]) -> Any | None:
        return await self.async_request(UPDATE_SESSION_PATH, "POST", headers, keep_alive=True)

    async def async_get_system_list(self, headers: dict[str, str]) -> Any | None:
        return await self.async_request(f"{SYSTEM_LIST_PATH}?_={int(time.time())}", "GET", headers)

    async def async_get_gui_description(
        self, headers: dict[str, str], gateway_id: Any, system_id: Any
    ) -> Any | None:
        path = (
            f"{GUI_DESCRIPTION_PATH}?GatewayId={quote(str(gateway_id), safe='')}"
            f"&SystemId={quote(str(system_id), safe='')}&_={int(time.time())}"
        )
        return await self.async_request(path, "GET", headers)

    async def async_get_system_state_list(
        self, headers: dict[str, str], system: dict[str, Any]
    ) -> Any | None:
        return await self.async_request(
            SYSTEM_STATE_LIST_PATH, "POST", headers, {"SystemList": [system]}
        )

    async def async_get_parameter_values(
        self, headers: dict[str, str], body: dict[str, Any]
    ) -> Any | None:
        return await self.async_request(
            PARAMETER_VALUES_PATH, "POST", {**headers, **POLL_HEADERS}, body
        )

    async def async_write_parameter_values(
        self, headers: dict[str, str], body: dict[str, Any]
    ) -> Any | None:
        return await self.async_request(WRITE_PARAMETER_VALUES_PATH, "POST", headers, body)
