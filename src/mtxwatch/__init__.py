"""mtxwatch - Camera health monitoring for a MediaMTX relay."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mtxwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from mtxwatch.client import MediaMtxClient
from mtxwatch.config import MtxConfig, PathDefaults
from mtxwatch.exceptions import (
    MtxApiError,
    MtxConfigError,
    MtxError,
    MtxTransportError,
)
from mtxwatch.models import (
    Camera,
    CameraMetadata,
    CameraQuality,
    CameraStats,
    CameraStatus,
    HealthRecord,
    PathConfig,
)
from mtxwatch.state.events import ProbeOutcome, ProbeResult
from mtxwatch.state.store import CameraStore

__all__ = [
    "__version__",
    "Camera",
    "CameraMetadata",
    "CameraQuality",
    "CameraStats",
    "CameraStatus",
    "CameraStore",
    "HealthRecord",
    "MediaMtxClient",
    "MtxApiError",
    "MtxConfig",
    "MtxConfigError",
    "MtxError",
    "MtxTransportError",
    "PathConfig",
    "PathDefaults",
    "ProbeOutcome",
    "ProbeResult",
]
