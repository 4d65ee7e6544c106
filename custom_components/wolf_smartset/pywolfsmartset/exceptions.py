"""Exceptions for pywolfsmartset.

Raised inside the portal client and its retry helper only; the client
converts them into ``None`` results and a ``last_failure`` record at its
boundary, so callers never see them.
"""

from __future__ import annotations

from dataclasses import dataclass


class WolfSmartsetError(Exception):
    """Base exception for pywolfsmartset."""


class TransportError(WolfSmartsetError):
    """Connect, TLS or timeout failure."""


@dataclass(slots=True)
class ProtocolError(WolfSmartsetError):
    """Portal answered with a non-2xx status."""

    message: str
    status: int | None = None
    path: str | None = None

    def __str__(self) -> str:
        base = self.message
        if self.status is not None:
            base += f" (status={self.status})"
        if self.path:
            base += f" path={self.path}"
        return base


class DecodeError(WolfSmartsetError):
    """Response body could not be decoded as JSON."""
