"""Normalized probe events.

Every liveness probe, whatever the way it ended, is converted into a
:class:`ProbeResult`. Only the state/store layer is allowed to fold them
into camera status.
"""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProbeOutcome(StrEnum):
    SUCCESS = "success"
    SOFT_FAILURE = "soft_failure"
    HARD_FAILURE = "hard_failure"
    ABORTED = "aborted"


def classify_status(status_code: int) -> ProbeOutcome:
    """Map an HTTP status from a manifest probe to an outcome.

    2xx means the stream is serving segments. 404 is ambiguous: the relay
    answers it while a source is still connecting.
    """
    if 200 <= status_code < 300:
        return ProbeOutcome.SUCCESS
    if status_code == 404:
        return ProbeOutcome.SOFT_FAILURE
    return ProbeOutcome.HARD_FAILURE


class ProbeResult(BaseModel):
    """Outcome of one probe against one camera."""

    model_config = ConfigDict(frozen=True)

    camera_id: str
    outcome: ProbeOutcome
    status_code: int | None = Field(
        default=None,
        description="HTTP status if the relay answered; None when no response arrived.",
    )
    observed_at: float = Field(default_factory=time.time)

    @field_validator("camera_id")
    @classmethod
    def _camera_id_non_empty(cls, value: str) -> str:
        camera_id = value.strip()
        if not camera_id:
            raise ValueError("camera_id must be non-empty")
        return camera_id

    @classmethod
    def from_status(cls, camera_id: str, status_code: int, *, observed_at: float | None = None) -> ProbeResult:
        kwargs = {} if observed_at is None else {"observed_at": observed_at}
        return cls(camera_id=camera_id, outcome=classify_status(status_code), status_code=status_code, **kwargs)

    @classmethod
    def no_response(cls, camera_id: str, *, observed_at: float | None = None) -> ProbeResult:
        kwargs = {} if observed_at is None else {"observed_at": observed_at}
        return cls(camera_id=camera_id, outcome=ProbeOutcome.HARD_FAILURE, **kwargs)
