"""HLS manifest liveness probe."""

from __future__ import annotations

from mtxwatch._transport import Transport
from mtxwatch.config import MtxConfig
from mtxwatch.playback import probe_url_for
from mtxwatch.state.events import ProbeResult


async def probe_stream(config: MtxConfig, transport: Transport, camera_id: str) -> ProbeResult:
    """Send a ``HEAD`` to the camera's manifest and classify the answer.

    Probes are not retried: the periodic cycle is the retry. A probe that
    gets no response at all raises :class:`~mtxwatch.exceptions.MtxTransportError`.
    """
    response = await transport.request(
        "HEAD",
        probe_url_for(config, camera_id),
        timeout=config.probe_timeout,
        retries=0,
    )
    return ProbeResult.from_status(camera_id, response.status)
