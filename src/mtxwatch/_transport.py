"""HTTP transport with per-attempt timeouts and a fixed retry budget."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from mtxwatch._constants import USER_AGENT
from mtxwatch.config import MtxConfig
from mtxwatch.exceptions import MtxTransportError

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status and decoded body of a completed HTTP exchange.

    ``data`` is the decoded JSON body, the raw text when the body is not
    JSON, or ``None`` for empty bodies and ``HEAD`` requests.
    """

    status: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        payload: Mapping[str, Any] | None = None,
        timeout: float | None = None,
        retries: int | None = None,
    ) -> TransportResponse:
        ...


class HttpTransport:
    """aiohttp-backed transport.

    Connection failures, timeouts and non-2xx answers are retried up to
    ``retries`` extra times (default ``config.max_retries``) with
    ``config.retry_delay`` seconds between attempts. When the budget runs
    out a non-2xx answer is returned as-is, while a connection failure is
    raised as :class:`MtxTransportError`. Cancellation is never retried.
    """

    def __init__(self, config: MtxConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def request(
        self,
        method: str,
        url: str,
        *,
        payload: Mapping[str, Any] | None = None,
        timeout: float | None = None,
        retries: int | None = None,
    ) -> TransportResponse:
        attempts_left = self._config.max_retries if retries is None else retries
        effective_timeout = self._config.request_timeout if timeout is None else timeout

        while True:
            try:
                response = await self._send(method, url, payload=payload, timeout=effective_timeout)
            except (aiohttp.ClientError, TimeoutError) as exc:
                if attempts_left <= 0:
                    raise MtxTransportError(
                        f"{method} {url} failed: {exc!r}",
                        endpoint=url,
                    ) from exc
                _logger.debug("%s %s failed (%r), %d retries left", method, url, exc, attempts_left)
            else:
                if response.ok or attempts_left <= 0:
                    return response
                _logger.debug("HTTP %s from %s %s, %d retries left", response.status, method, url, attempts_left)

            attempts_left -= 1
            if self._config.retry_delay > 0:
                await asyncio.sleep(self._config.retry_delay)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        payload: Mapping[str, Any] | None,
        timeout: float,
    ) -> TransportResponse:
        """Perform a single HTTP exchange."""
        headers: dict[str, str] = {"user-agent": USER_AGENT}
        if payload is not None:
            headers["content-type"] = "application/json"

        _logger.debug("%s %s", method, url)

        async with self._http.request(
            method,
            url,
            json=dict(payload) if payload is not None else None,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            if method.upper() == "HEAD":
                return TransportResponse(status=resp.status)
            text = await resp.text()

        if not text.strip():
            return TransportResponse(status=resp.status)
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError:
            data = text
        return TransportResponse(status=resp.status, data=data)
