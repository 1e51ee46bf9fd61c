"""Playback URL derivation.

Pure functions: nothing here touches the network.
"""

from __future__ import annotations

from mtxwatch._constants import HLS_MANIFEST_NAME, WHEP_SUFFIX
from mtxwatch.config import MtxConfig


def hls_path(camera_id: str, *, prefix: str = "/hls") -> str:
    """Path of the camera's HLS manifest, e.g. ``/hls/cam1/index.m3u8``."""
    prefix = prefix.rstrip("/")
    return f"{prefix}/{camera_id}/{HLS_MANIFEST_NAME}"


def webrtc_url(camera_id: str, *, scheme: str = "http", host: str = "127.0.0.1", port: int = 8889) -> str:
    """WHEP endpoint of the camera, e.g. ``http://host:8889/cam1/whep``."""
    scheme = scheme.rstrip(":/")
    return f"{scheme}://{host}:{port}/{camera_id}/{WHEP_SUFFIX}"


def hls_path_for(config: MtxConfig, camera_id: str) -> str:
    return hls_path(camera_id, prefix=config.hls_path_prefix)


def webrtc_url_for(config: MtxConfig, camera_id: str) -> str:
    return webrtc_url(
        camera_id,
        scheme=config.webrtc_scheme,
        host=config.webrtc_host,
        port=config.webrtc_port,
    )


def probe_url_for(config: MtxConfig, camera_id: str) -> str:
    """Absolute manifest URL that liveness probes are sent to."""
    return f"{config.playback_base_url.rstrip('/')}{hls_path_for(config, camera_id)}"
