from __future__ import annotations

import pytest

from mtxwatch.config import MtxConfig
from mtxwatch.models import (
    Camera,
    CameraQuality,
    CameraStatus,
    PathConfig,
    UpdateCameraRequest,
    format_camera_name,
)
from mtxwatch.playback import hls_path, hls_path_for, probe_url_for, webrtc_url, webrtc_url_for


@pytest.mark.parametrize(
    ("camera_id", "expected"),
    [
        ("front_door", "Front Door"),
        ("cam1", "Cam1"),
        ("GARAGE_west", "Garage West"),
        ("lobby", "Lobby"),
    ],
)
def test_format_camera_name(camera_id: str, expected: str) -> None:
    assert format_camera_name(camera_id) == expected


def test_camera_dump_uses_camel_case_aliases() -> None:
    camera = Camera(id="cam1", name="Cam1", hls_url="/hls/cam1/index.m3u8", quality=CameraQuality.UHD_4K)

    dumped = camera.model_dump(by_alias=True, mode="json")

    assert dumped["hlsUrl"] == "/hls/cam1/index.m3u8"
    assert dumped["isActive"] is True
    assert dumped["errorCount"] == 0
    assert dumped["lastSeen"] is None
    assert dumped["status"] == "checking"
    assert dumped["quality"] == "4K"
    assert dumped["metadata"] == {"fps": None, "resolution": None, "bitrate": None}


def test_camera_accepts_camel_case_input() -> None:
    camera = Camera.model_validate({"id": "cam1", "name": "Cam1", "isActive": False, "errorCount": 2})

    assert camera.is_active is False
    assert camera.error_count == 2
    assert camera.source == "unknown"
    assert camera.status == CameraStatus.CHECKING


def test_camera_rejects_negative_error_count() -> None:
    with pytest.raises(ValueError):
        Camera(id="cam1", name="Cam1", error_count=-1)


def test_path_config_keeps_raw_payload() -> None:
    config = PathConfig.model_validate({"name": "cam1", "source": "rtsp://a", "rtspTransport": "tcp"})

    assert config.source == "rtsp://a"
    assert config.raw == {"name": "cam1", "source": "rtsp://a", "rtspTransport": "tcp"}


def test_path_config_missing_source_is_unknown() -> None:
    assert PathConfig.model_validate({"name": "cam1", "source": None}).source == "unknown"
    assert PathConfig.model_validate({"name": "cam1"}).source == "unknown"


def test_unavailable_path_config() -> None:
    config = PathConfig.unavailable("cam2")

    assert config.error is True
    assert config.source == "unknown"
    assert config.raw == {}


def test_update_request_tracks_explicit_fields() -> None:
    request = UpdateCameraRequest(location=" Garage ")

    assert request.model_fields_set == {"location"}
    assert request.location == "Garage"
    with pytest.raises(ValueError):
        UpdateCameraRequest(error_count=0)  # type: ignore[call-arg]
    with pytest.raises(ValueError):
        UpdateCameraRequest(name="  ")


def test_playback_urls() -> None:
    assert hls_path("cam1") == "/hls/cam1/index.m3u8"
    assert hls_path("cam1", prefix="/") == "/cam1/index.m3u8"
    assert webrtc_url("cam1", scheme="https", host="relay.example", port=8889) == "https://relay.example:8889/cam1/whep"


def test_playback_urls_follow_config() -> None:
    config = MtxConfig(
        playback_base_url="http://relay:8888/",
        hls_path_prefix="",
        webrtc_scheme="https://",
        webrtc_host="relay",
        webrtc_port=443,
    )

    assert hls_path_for(config, "cam1") == "/cam1/index.m3u8"
    assert probe_url_for(config, "cam1") == "http://relay:8888/cam1/index.m3u8"
    assert webrtc_url_for(config, "cam1") == "https://relay:443/cam1/whep"
