"""Camera, health and stats models."""

from __future__ import annotations

from pydantic import Field

from mtxwatch._constants import UNKNOWN_SOURCE
from mtxwatch.models._base import CameraQuality, CameraStatus, MtxBaseModel


def format_camera_name(camera_id: str) -> str:
    """Turn a relay path name into a display name.

    ``"front_door"`` becomes ``"Front Door"``.
    """
    words = camera_id.replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


class CameraMetadata(MtxBaseModel):
    """Stream properties reported by consumers (not probed)."""

    fps: float | None = None
    resolution: str | None = None
    bitrate: int | None = None


class Camera(MtxBaseModel):
    """A camera published through the relay.

    ``status``, ``last_seen`` and ``error_count`` are owned by
    :class:`~mtxwatch.state.store.CameraStore`.
    """

    id: str
    """Relay path name; stable key."""
    name: str
    """Display name."""
    source: str = UNKNOWN_SOURCE
    """Upstream address (opaque, may embed credentials)."""
    status: CameraStatus = CameraStatus.CHECKING
    is_active: bool = True
    """Operator intent: should this camera be displayed."""
    location: str | None = None
    quality: CameraQuality | None = None
    hls_url: str = ""
    webrtc_url: str = ""
    last_seen: float | None = None
    """Epoch seconds of the last confirmed ``online`` probe."""
    error_count: int = Field(default=0, ge=0)
    """Consecutive hard probe failures."""
    metadata: CameraMetadata = Field(default_factory=CameraMetadata)


class HealthRecord(MtxBaseModel):
    """Reconciled probe history for one camera."""

    status: CameraStatus = CameraStatus.CHECKING
    last_check: float = 0.0
    error_count: int = Field(default=0, ge=0)


class CameraStats(MtxBaseModel):
    total: int = 0
    online: int = 0
    active: int = 0
    errors: int = 0
