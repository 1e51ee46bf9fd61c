"""High-level async client for the MediaMTX control API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import aiohttp

from mtxwatch._api import paths as _paths_api
from mtxwatch._api import probe as _probe_api
from mtxwatch._transport import HttpTransport, Transport
from mtxwatch.config import MtxConfig
from mtxwatch.exceptions import MtxError
from mtxwatch.models.path import PathConfig, PathListItem
from mtxwatch.models.requests import AddCameraRequest, CameraIdRequest
from mtxwatch.state.events import ProbeResult

_logger = logging.getLogger(__name__)


class MediaMtxClient:
    """Async client for the MediaMTX relay.

    Usage::

        async with MediaMtxClient(config) as client:
            paths = await client.list_paths()

    A pre-built ``transport`` may be injected (tests do this); the client
    then never opens an HTTP session of its own.
    """

    def __init__(
        self,
        config: MtxConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = (config or MtxConfig()).validate()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._owns_transport = False

    @property
    def config(self) -> MtxConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MediaMtxClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
            self._owns_transport = True
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._owns_transport:
            self._transport = None
            self._owns_transport = False
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise MtxError("Client not initialized. Use 'async with MediaMtxClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Control API
    # ------------------------------------------------------------------

    async def list_paths(self) -> list[PathListItem]:
        """Enumerate configured paths."""
        return await _paths_api.fetch_path_list(self._config, self._require_transport())

    async def get_path_config(self, name: str) -> PathConfig:
        """Fetch one path's configuration."""
        request = CameraIdRequest(name=name)
        return await _paths_api.fetch_path_config(self._config, self._require_transport(), request.name)

    async def get_path_configs(self, names: Sequence[str]) -> list[PathConfig]:
        """Fetch several path configurations in bounded batches, tolerating failures."""
        return await _paths_api.fetch_path_configs(self._config, self._require_transport(), names)

    async def add_path(self, name: str, source: str) -> bool:
        """Register a camera path. ``False`` if the relay rejected it."""
        request = AddCameraRequest(name=name, source=source)
        return await _paths_api.add_path(self._config, self._require_transport(), request.name, request.source)

    async def delete_path(self, name: str) -> bool:
        """Deregister a camera path. ``False`` if the relay rejected it."""
        request = CameraIdRequest(name=name)
        return await _paths_api.delete_path(self._config, self._require_transport(), request.name)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    async def probe(self, camera_id: str) -> ProbeResult:
        """Probe one camera's HLS manifest."""
        return await _probe_api.probe_stream(self._config, self._require_transport(), camera_id)
