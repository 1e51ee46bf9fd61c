from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from typing import Any

import aiohttp
import pytest

from mtxwatch._transport import HttpTransport, TransportResponse
from mtxwatch.config import MtxConfig
from mtxwatch.exceptions import MtxTransportError


class _ScriptedTransport(HttpTransport):
    """HttpTransport whose single-attempt send replays scripted answers."""

    def __init__(self, config: MtxConfig, *answers: TransportResponse | BaseException) -> None:
        super().__init__(config, None)  # type: ignore[arg-type]
        self.answers: deque[TransportResponse | BaseException] = deque(answers)
        self.sent: list[tuple[str, str, float]] = []

    async def _send(
        self,
        method: str,
        url: str,
        *,
        payload: Mapping[str, Any] | None,
        timeout: float,
    ) -> TransportResponse:
        self.sent.append((method, url, timeout))
        answer = self.answers.popleft()
        if isinstance(answer, BaseException):
            raise answer
        return answer


def _config(**overrides: Any) -> MtxConfig:
    return MtxConfig(retry_delay=0.0, **overrides)


@pytest.mark.asyncio
async def test_connection_error_is_retried_then_succeeds() -> None:
    transport = _ScriptedTransport(
        _config(max_retries=3),
        aiohttp.ClientConnectionError("refused"),
        TimeoutError(),
        TransportResponse(200, {"items": []}),
    )

    response = await transport.request("GET", "http://relay/v3/paths/list")

    assert response.data == {"items": []}
    assert len(transport.sent) == 3


@pytest.mark.asyncio
async def test_exhausted_budget_raises_transport_error() -> None:
    transport = _ScriptedTransport(
        _config(max_retries=2),
        TimeoutError(),
        TimeoutError(),
        TimeoutError(),
    )

    with pytest.raises(MtxTransportError) as exc_info:
        await transport.request("GET", "http://relay/v3/paths/list")

    assert exc_info.value.endpoint == "http://relay/v3/paths/list"
    assert isinstance(exc_info.value.__cause__, TimeoutError)
    assert len(transport.sent) == 3


@pytest.mark.asyncio
async def test_error_status_is_retried_then_returned() -> None:
    transport = _ScriptedTransport(
        _config(max_retries=1),
        TransportResponse(500),
        TransportResponse(502),
    )

    response = await transport.request("POST", "http://relay/v3/config/paths/add/cam1", payload={"source": "x"})

    assert response.status == 502
    assert not response.ok
    assert len(transport.sent) == 2


@pytest.mark.asyncio
async def test_explicit_zero_retries_and_timeout() -> None:
    transport = _ScriptedTransport(_config(max_retries=3), TransportResponse(404))

    response = await transport.request("HEAD", "http://relay/hls/cam1/index.m3u8", timeout=2.5, retries=0)

    assert response.status == 404
    assert transport.sent == [("HEAD", "http://relay/hls/cam1/index.m3u8", 2.5)]


@pytest.mark.asyncio
async def test_default_timeout_comes_from_config() -> None:
    transport = _ScriptedTransport(_config(request_timeout=7.0), TransportResponse(200))

    await transport.request("GET", "http://relay/v3/paths/list")

    assert transport.sent[0][2] == 7.0


@pytest.mark.asyncio
async def test_unexpected_errors_are_not_retried() -> None:
    transport = _ScriptedTransport(_config(max_retries=3), RuntimeError("bug"), TransportResponse(200))

    with pytest.raises(RuntimeError):
        await transport.request("GET", "http://relay/v3/paths/list")

    assert len(transport.sent) == 1


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self.text = text
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append((method, url, kwargs))
        return _FakeResponse(self.status, self.text)


@pytest.mark.asyncio
async def test_send_decodes_json_body() -> None:
    session = _FakeSession(200, '{"itemCount": 1, "items": [{"name": "cam1"}]}')
    transport = HttpTransport(_config(), session)  # type: ignore[arg-type]

    response = await transport.request("GET", "http://relay/v3/paths/list")

    assert response.data == {"itemCount": 1, "items": [{"name": "cam1"}]}
    _, _, kwargs = session.calls[0]
    assert kwargs["json"] is None
    assert kwargs["timeout"].total == 5.0
    assert "user-agent" in kwargs["headers"]


@pytest.mark.asyncio
async def test_send_keeps_non_json_text_and_sends_payload() -> None:
    session = _FakeSession(400, "invalid path name")
    transport = HttpTransport(_config(max_retries=0), session)  # type: ignore[arg-type]

    response = await transport.request("POST", "http://relay/v3/config/paths/add/x", payload={"source": "rtsp://a"})

    assert response.status == 400
    assert response.data == "invalid path name"
    _, _, kwargs = session.calls[0]
    assert kwargs["json"] == {"source": "rtsp://a"}
    assert kwargs["headers"]["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_send_head_and_empty_bodies_have_no_data() -> None:
    head = HttpTransport(_config(), _FakeSession(200, "ignored"))  # type: ignore[arg-type]
    empty = HttpTransport(_config(), _FakeSession(200, "  "))  # type: ignore[arg-type]

    assert await head.request("HEAD", "http://relay/hls/cam1/index.m3u8") == TransportResponse(200)
    assert await empty.request("POST", "http://relay/v3/config/paths/delete/cam1") == TransportResponse(200)
