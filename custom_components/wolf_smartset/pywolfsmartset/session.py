"""Portal session life cycle.

A login is a token exchange followed by the expert-mode elevation, two round
trips plus server-side session setup. The header set obtained from it is
cached in the installation storage and revalidated each cycle with a single
``UpdateSession`` keep-alive; a full login only happens when there is no
cached session or the keep-alive is rejected.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Callable

from .client import PortalFailure, WolfPortalClient, accept_language
from .const import DEFAULT_EXPERT_PASSWORD, JSON_CONTENT_TYPE, PortalStatus
from .storage import InstallationStorage

_LOGGER = logging.getLogger(__name__)


class SessionState(str, Enum):
    NO_SESSION = "no_session"
    CACHED = "cached"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    INVALID = "invalid"


def _decode_headers(blob: str) -> dict[str, str] | None:
    """Decode a cached session blob; ``None`` if it is not a complete header set."""
    try:
        data = json.loads(blob)
    except ValueError:
        return None
    if isinstance(data, list):
        # "Name: value" lines
        headers: dict[str, str] = {}
        for line in data:
            if not isinstance(line, str) or ":" not in line:
                return None
            name, _, value = line.partition(":")
            headers[name.strip()] = value.strip()
        data = headers
    if not isinstance(data, dict) or not data.get("Authorization"):
        return None
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in data.items()):
        return None
    return data


def auth_headers_from_token(token_data: dict[str, Any] | None, language: str) -> dict[str, str] | None:
    """Header set for an answered token exchange; ``None`` if it carries no access token."""
    access_token = token_data.get("access_token") if token_data else None
    if not access_token:
        return None
    return {
        "Authorization": f"{token_data.get('token_type') or 'Bearer'} {access_token}",
        "Accept-Language": accept_language(language),
        "Content-Type": JSON_CONTENT_TYPE,
    }


class WolfSessionManager:
    """Owns the cached session of one installation."""

    def __init__(
        self,
        client: WolfPortalClient,
        storage: InstallationStorage,
        username: str,
        password: str,
        expert_password: str = DEFAULT_EXPERT_PASSWORD,
        set_status: Callable[[PortalStatus], None] | None = None,
    ) -> None:
        self._client = client
        self._storage = storage
        self._username = username or ""
        self._password = password or ""
        self._expert_password = expert_password or ""
        self._set_status = set_status or (lambda status: None)
        self.state = SessionState.NO_SESSION

    async def async_get_auth_headers(self) -> dict[str, str] | None:
        """Return valid auth headers, reusing the cached session when the portal still accepts it."""
        blob = await self._storage.async_read_session()
        if blob and blob != "0":
            self.state = SessionState.CACHED
            headers = _decode_headers(blob)
            if headers is not None:
                if await self._client.async_update_session(headers) is not None:
                    _LOGGER.debug("Wolf session: cached session still valid")
                    self.state = SessionState.AUTHENTICATED
                    return headers
                _LOGGER.debug("Wolf session: keep-alive rejected, logging in again")
            else:
                _LOGGER.debug("Wolf session: cached session unreadable, logging in again")
            self.state = SessionState.INVALID
            await self._storage.async_clear_session()

        return await self.async_login()

    async def async_login(self) -> dict[str, str] | None:
        """Full login: token exchange and expert login. One cached session per installation."""
        if not self._username or not self._password:
            _LOGGER.warning("Wolf session: username or password not configured")
            self.state = SessionState.NO_SESSION
            self._set_status(PortalStatus.NO_CREDENTIALS)
            return None

        self.state = SessionState.AUTHENTICATING
        token_data = await self._client.async_token(self._username, self._password)
        headers = auth_headers_from_token(token_data, self._client.language)
        if headers is None:
            _LOGGER.warning("Wolf session: token exchange failed (%s)", self._client.last_failure)
            await self._fail()
            return None

        if await self._client.async_expert_login(headers, self._expert_password) is None:
            _LOGGER.warning("Wolf session: expert login failed (%s)", self._client.last_failure)
            await self._fail()
            return None

        await self._storage.async_write_session(json.dumps(headers))
        self.state = SessionState.AUTHENTICATED
        self._set_status(PortalStatus.OK)
        _LOGGER.debug("Wolf session: logged in")
        return headers

    async def _fail(self) -> None:
        self.state = SessionState.NO_SESSION
        self._set_status(PortalStatus.AUTH_FAILED)
        await self._storage.async_clear_session()

    async def async_logout(self) -> None:
        await self._storage.async_clear_session()
        self.state = SessionState.NO_SESSION
        self._set_status(PortalStatus.INACTIVE)

    async def async_invalidate(self) -> None:
        """Drop the cached session so the next cycle logs in again. Status is left alone."""
        _LOGGER.debug("Wolf session: invalidated")
        await self._storage.async_clear_session()
        self.state = SessionState.INVALID

    async def async_invalidate_if_rejected(self) -> bool:
        """Invalidate when the client's last call was refused with 401/403.

        The caller's cycle still fails; the next one logs in again.
        """
        failure = self._client.last_failure
        if not isinstance(failure, PortalFailure) or not failure.rejected_session:
            return False
        _LOGGER.warning("Wolf session: portal rejected the session (HTTP %s)", failure.status)
        self._set_status(PortalStatus.COMM_ERROR)
        await self.async_invalidate()
        return True
