"""Client and store configuration for mtxwatch."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from mtxwatch.exceptions import MtxConfigError


@dataclasses.dataclass(frozen=True)
class PathDefaults:
    """Path settings sent when registering a new camera with the relay.

    These map one-to-one onto the MediaMTX path configuration keys used
    by ``/config/paths/add``.
    """

    rtsp_transport: str = "tcp"
    source_on_demand: bool = False
    source_on_demand_start_timeout: str = "10s"
    source_on_demand_close_after: str = "120s"
    rtsp_udp_read_buffer_size: int = 8 * 1024 * 1024


@dataclasses.dataclass(frozen=True)
class MtxConfig:
    """Configuration for :class:`~mtxwatch.client.MediaMtxClient` and the store.

    Parameters
    ----------
    api_base_url : str
        Base URL of the MediaMTX control API, including the ``/v3`` prefix.
    playback_base_url : str
        Origin serving HLS playback (probes are sent here).
    hls_path_prefix : str
        Path prefix under which HLS manifests are exposed.
    webrtc_scheme : str
        URL scheme for WHEP playback links.
    webrtc_host : str
        Host for WHEP playback links.
    webrtc_port : int
        MediaMTX WebRTC listener port.
    cache_ttl : float
        Seconds a fetched camera list stays valid.
    health_check_interval : float
        Seconds between periodic probe cycles.
    request_timeout : float
        Per-attempt timeout for control API calls.
    probe_timeout : float
        Timeout for a single manifest probe.
    max_retries : int
        Extra attempts for control API calls after the first one fails.
    retry_delay : float
        Seconds to wait between retry attempts.
    failure_threshold : int
        Consecutive hard probe failures before a camera leaves ``online``.
    config_batch_size : int
        Maximum concurrent path config requests during a refresh.
    notify_delay : float
        Coalescing window for subscriber notifications.
    path_defaults : PathDefaults
        Settings sent with ``add_camera``.
    """

    api_base_url: str = "http://127.0.0.1:9997/v3"
    playback_base_url: str = "http://127.0.0.1"
    hls_path_prefix: str = "/hls"
    webrtc_scheme: str = "http"
    webrtc_host: str = "127.0.0.1"
    webrtc_port: int = 8889
    cache_ttl: float = 30.0
    health_check_interval: float = 10.0
    request_timeout: float = 5.0
    probe_timeout: float = 5.0
    max_retries: int = 3
    retry_delay: float = 1.0
    failure_threshold: int = 3
    config_batch_size: int = 5
    notify_delay: float = 0.016
    path_defaults: PathDefaults = dataclasses.field(default_factory=PathDefaults)

    def validate(self) -> MtxConfig:
        """Raise :class:`MtxConfigError` when a value is out of range."""
        positive = (
            "health_check_interval",
            "request_timeout",
            "probe_timeout",
            "failure_threshold",
            "config_batch_size",
        )
        for name in positive:
            if getattr(self, name) <= 0:
                raise MtxConfigError(f"{name} must be positive, got {getattr(self, name)!r}")
        non_negative = ("cache_ttl", "max_retries", "retry_delay", "notify_delay")
        for name in non_negative:
            if getattr(self, name) < 0:
                raise MtxConfigError(f"{name} must not be negative, got {getattr(self, name)!r}")
        if not self.api_base_url:
            raise MtxConfigError("api_base_url must be set")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> MtxConfig:
        """Create configuration from ``MTX_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "MTX_API_BASE_URL": "api_base_url",
            "MTX_PLAYBACK_BASE_URL": "playback_base_url",
            "MTX_HLS_PATH_PREFIX": "hls_path_prefix",
            "MTX_WEBRTC_SCHEME": "webrtc_scheme",
            "MTX_WEBRTC_HOST": "webrtc_host",
        }
        _ENV_INT_MAP = {
            "MTX_WEBRTC_PORT": "webrtc_port",
            "MTX_MAX_RETRIES": "max_retries",
            "MTX_FAILURE_THRESHOLD": "failure_threshold",
            "MTX_CONFIG_BATCH_SIZE": "config_batch_size",
        }
        _ENV_FLOAT_MAP = {
            "MTX_CACHE_TTL": "cache_ttl",
            "MTX_HEALTH_CHECK_INTERVAL": "health_check_interval",
            "MTX_REQUEST_TIMEOUT": "request_timeout",
            "MTX_PROBE_TIMEOUT": "probe_timeout",
            "MTX_RETRY_DELAY": "retry_delay",
            "MTX_NOTIFY_DELAY": "notify_delay",
        }

        config_kwargs: dict[str, Any] = {}
        try:
            for env_key, field_name in _ENV_STR_MAP.items():
                val = env.get(env_key)
                if val is not None:
                    config_kwargs[field_name] = val.strip()
            for env_key, field_name in _ENV_INT_MAP.items():
                val = env.get(env_key)
                if val is not None:
                    config_kwargs[field_name] = int(val)
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None:
                    config_kwargs[field_name] = float(val)
        except ValueError as exc:
            raise MtxConfigError(f"Invalid MTX_* environment value: {exc}") from exc

        # Allow overriding path defaults via a nested dict
        path_overrides = overrides.pop("path_defaults", None)
        if isinstance(path_overrides, dict):
            config_kwargs["path_defaults"] = PathDefaults(**path_overrides)
        elif isinstance(path_overrides, PathDefaults):
            config_kwargs["path_defaults"] = path_overrides

        config_kwargs.update(overrides)

        return cls(**config_kwargs).validate()
