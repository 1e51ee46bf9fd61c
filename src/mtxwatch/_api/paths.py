"""Path configuration endpoints.

Endpoints:
  - /paths/list
  - /config/paths/get/{name}
  - /config/paths/add/{name}
  - /config/paths/delete/{name}
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar
from urllib.parse import quote

from mtxwatch._constants import (
    PATH_CONFIG_ADD_ENDPOINT,
    PATH_CONFIG_DELETE_ENDPOINT,
    PATH_CONFIG_GET_ENDPOINT,
    PATHS_LIST_ENDPOINT,
)
from mtxwatch._redact import redact_for_log
from mtxwatch._transport import Transport
from mtxwatch.config import MtxConfig
from mtxwatch.exceptions import MtxApiError, MtxError, MtxTransportError
from mtxwatch.models.path import PathConfig, PathListItem

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _url(config: MtxConfig, endpoint: str, name: str | None = None) -> str:
    if name is not None:
        endpoint = endpoint.format(name=quote(name, safe="/"))
    return f"{config.api_base_url.rstrip('/')}{endpoint}"


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of *items* of at most *size* elements."""
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def build_add_payload(config: MtxConfig, source: str) -> dict[str, Any]:
    """Build the JSON body for ``/config/paths/add``."""
    defaults = config.path_defaults
    return {
        "source": source,
        "rtspTransport": defaults.rtsp_transport,
        "sourceOnDemand": defaults.source_on_demand,
        "sourceOnDemandStartTimeout": defaults.source_on_demand_start_timeout,
        "sourceOnDemandCloseAfter": defaults.source_on_demand_close_after,
        "rtspUDPReadBufferSize": defaults.rtsp_udp_read_buffer_size,
    }


async def fetch_path_list(config: MtxConfig, transport: Transport) -> list[PathListItem]:
    """Enumerate configured relay paths."""
    url = _url(config, PATHS_LIST_ENDPOINT)
    response = await transport.request("GET", url)
    if not response.ok:
        raise MtxTransportError(
            f"HTTP {response.status} from {PATHS_LIST_ENDPOINT}",
            status_code=response.status,
            endpoint=PATHS_LIST_ENDPOINT,
        )
    if not isinstance(response.data, dict):
        raise MtxApiError(
            f"{PATHS_LIST_ENDPOINT} returned {type(response.data).__name__}, expected an object",
            endpoint=PATHS_LIST_ENDPOINT,
        )
    items = response.data.get("items") or []
    if not isinstance(items, list):
        raise MtxApiError(f"{PATHS_LIST_ENDPOINT} items is not a list", endpoint=PATHS_LIST_ENDPOINT)
    return [PathListItem.model_validate(item) for item in items if isinstance(item, dict) and item.get("name")]


async def fetch_path_config(config: MtxConfig, transport: Transport, name: str) -> PathConfig:
    """Fetch the configuration of one path.

    Raises on failure; see :func:`fetch_path_configs` for the tolerant
    batch variant.
    """
    endpoint = PATH_CONFIG_GET_ENDPOINT.format(name=name)
    response = await transport.request("GET", _url(config, PATH_CONFIG_GET_ENDPOINT, name))
    if not response.ok:
        raise MtxTransportError(
            f"HTTP {response.status} from {endpoint}",
            status_code=response.status,
            endpoint=endpoint,
        )
    if not isinstance(response.data, dict):
        raise MtxApiError(f"{endpoint} did not return an object", endpoint=endpoint)
    data = dict(response.data)
    data.setdefault("name", name)
    _logger.debug("Path config %s: %s", name, redact_for_log(data))
    return PathConfig.model_validate(data)


async def _fetch_path_config_or_placeholder(config: MtxConfig, transport: Transport, name: str) -> PathConfig:
    # Any per-item failure becomes a placeholder. CancelledError propagates.
    try:
        return await fetch_path_config(config, transport, name)
    except MtxError as exc:
        _logger.warning("Failed to load config for %s: %s", name, exc)
    except Exception:
        _logger.warning("Unreadable config for %s", name, exc_info=True)
    return PathConfig.unavailable(name)


async def fetch_path_configs(config: MtxConfig, transport: Transport, names: Sequence[str]) -> list[PathConfig]:
    """Fetch configurations for *names* in batches of ``config.config_batch_size``.

    Requests inside a batch run concurrently; batches run one after the
    other. A failed item becomes :meth:`PathConfig.unavailable` instead of
    failing the whole fetch. Order of *names* is preserved.
    """
    configs: list[PathConfig] = []
    for batch in chunked(names, config.config_batch_size):
        results = await asyncio.gather(
            *(_fetch_path_config_or_placeholder(config, transport, name) for name in batch)
        )
        configs.extend(results)
    return configs


async def add_path(config: MtxConfig, transport: Transport, name: str, source: str) -> bool:
    """Register a new path. Returns ``False`` if the relay rejected it."""
    payload = build_add_payload(config, source)
    _logger.debug("Adding path %s: %s", name, redact_for_log(payload))
    response = await transport.request("POST", _url(config, PATH_CONFIG_ADD_ENDPOINT, name), payload=payload)
    if not response.ok:
        _logger.warning("Relay rejected path %s: HTTP %s %s", name, response.status, redact_for_log(response.data))
    return response.ok


async def delete_path(config: MtxConfig, transport: Transport, name: str) -> bool:
    """Deregister a path. Returns ``False`` if the relay rejected it."""
    response = await transport.request("POST", _url(config, PATH_CONFIG_DELETE_ENDPOINT, name))
    if not response.ok:
        _logger.warning("Relay refused to delete path %s: HTTP %s", name, response.status)
    return response.ok
