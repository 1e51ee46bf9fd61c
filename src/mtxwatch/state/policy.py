"""Deterministic status reconciliation policy.

Folds one probe outcome into the previous :class:`HealthRecord`. Leaving
``online`` takes ``failure_threshold`` consecutive hard failures, while a
single success restores it, so short network blips do not make the UI
flicker and recovery shows up at once.
"""

from __future__ import annotations

from mtxwatch.models._base import CameraStatus
from mtxwatch.models.camera import HealthRecord
from mtxwatch.state.events import ProbeOutcome, ProbeResult


def reconcile(
    previous: HealthRecord | None,
    result: ProbeResult,
    *,
    failure_threshold: int,
) -> HealthRecord | None:
    """Return the new health record for a camera.

    ``previous`` is ``None`` when the camera has no history (first probe,
    or history was cleared). ``ABORTED`` results leave the record as-is.
    """
    if result.outcome == ProbeOutcome.ABORTED:
        return previous

    prev_status = previous.status if previous is not None else CameraStatus.CHECKING
    prev_errors = previous.error_count if previous is not None else 0
    held = CameraStatus.ONLINE if prev_status == CameraStatus.ONLINE else CameraStatus.CHECKING

    if result.outcome == ProbeOutcome.SUCCESS:
        status = CameraStatus.ONLINE
        error_count = 0
    elif result.outcome == ProbeOutcome.SOFT_FAILURE:
        status = held
        error_count = prev_errors
    else:
        error_count = prev_errors + 1
        if error_count < failure_threshold:
            status = held
        elif result.status_code is None:
            status = CameraStatus.ERROR
        else:
            # The relay answered, so it is up but the stream is not.
            status = CameraStatus.OFFLINE

    return HealthRecord(status=status, last_check=result.observed_at, error_count=error_count)
