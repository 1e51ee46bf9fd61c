"""Data models for cameras and relay responses."""

from mtxwatch.models._base import CameraQuality, CameraStatus, MtxBaseModel
from mtxwatch.models.camera import (
    Camera,
    CameraMetadata,
    CameraStats,
    HealthRecord,
    format_camera_name,
)
from mtxwatch.models.path import PathConfig, PathListItem
from mtxwatch.models.requests import AddCameraRequest, CameraIdRequest, UpdateCameraRequest

__all__ = [
    "AddCameraRequest",
    "Camera",
    "CameraIdRequest",
    "CameraMetadata",
    "CameraQuality",
    "CameraStats",
    "CameraStatus",
    "HealthRecord",
    "MtxBaseModel",
    "PathConfig",
    "PathListItem",
    "UpdateCameraRequest",
    "format_camera_name",
]
