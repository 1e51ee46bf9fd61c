"""Custom exception hierarchy for mtxwatch."""

from __future__ import annotations


class MtxError(Exception):
    """Base exception for all mtxwatch errors."""


class MtxConfigError(MtxError):
    """Invalid or missing configuration."""


class MtxTransportError(MtxError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class MtxApiError(MtxError):
    """The relay answered, but with a payload of unexpected shape."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)
