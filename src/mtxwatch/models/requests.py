"""Pydantic request models for client and store entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator

from mtxwatch.models._base import CameraQuality
from mtxwatch.models.camera import CameraMetadata

# MediaMTX path names: alphanumerics plus _ . ~ - and / separators.
_PATH_NAME_RE = re.compile(r"^[A-Za-z0-9_.~\-/]+$")


class CameraIdRequest(BaseModel):
    """Request addressing a relay path."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    name: str

    @field_validator("name")
    @classmethod
    def _name_is_path(cls, value: str) -> str:
        name = value.strip().strip("/")
        if not name:
            raise ValueError("name must be non-empty")
        if not _PATH_NAME_RE.match(name):
            raise ValueError(f"name {name!r} is not a valid relay path name")
        return name


class AddCameraRequest(CameraIdRequest):
    source: str

    @field_validator("source")
    @classmethod
    def _source_non_empty(cls, value: str) -> str:
        source = value.strip()
        if not source:
            raise ValueError("source must be non-empty")
        return source


class UpdateCameraRequest(BaseModel):
    """Display fields a consumer may change on a camera."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    name: str | None = None
    location: str | None = None
    quality: CameraQuality | None = None
    metadata: CameraMetadata | None = None

    @field_validator("name")
    @classmethod
    def _name_non_empty(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError("name must be non-empty")
        return value

    @field_validator("metadata")
    @classmethod
    def _metadata_not_cleared(cls, value: CameraMetadata | None) -> CameraMetadata:
        # Unset fields never reach validators; None here is an explicit clear.
        if value is None:
            raise ValueError("metadata cannot be cleared; pass CameraMetadata() instead")
        return value
