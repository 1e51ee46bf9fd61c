"""Camera status store.

This is the only component allowed to change a camera's ``status``. It
owns the camera list, the per-camera health history and the list cache,
and publishes coalesced change notifications to subscribers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from mtxwatch._constants import CAMERA_LIST_CACHE_KEY
from mtxwatch._redact import redact_source
from mtxwatch.client import MediaMtxClient
from mtxwatch.config import MtxConfig
from mtxwatch.exceptions import MtxError
from mtxwatch.models._base import CameraStatus
from mtxwatch.models.camera import Camera, CameraStats, HealthRecord, format_camera_name
from mtxwatch.models.path import PathConfig
from mtxwatch.models.requests import UpdateCameraRequest
from mtxwatch.playback import hls_path_for, webrtc_url_for
from mtxwatch.state.cache import TtlCache
from mtxwatch.state.events import ProbeOutcome, ProbeResult
from mtxwatch.state.notify import CoalescingNotifier, Scheduler, asyncio_scheduler
from mtxwatch.state.policy import reconcile

_logger = logging.getLogger(__name__)


class CameraStore:
    """Flicker-resistant view of the relay's cameras.

    Usage::

        async with MediaMtxClient(config) as client:
            async with CameraStore(client) as store:
                store.subscribe(lambda: print(store.get_stats()))
                ...

    Parameters
    ----------
    client : MediaMtxClient
        Entered client used for every relay call.
    config : MtxConfig or None
        Timing and threshold policy. Defaults to the client's config.
    clock : callable
        Wall clock (epoch seconds) for ``last_seen`` and ``last_check``.
    monotonic : callable
        Monotonic clock for cache expiry.
    scheduler : callable
        Timer source for notification coalescing.
    """

    def __init__(
        self,
        client: MediaMtxClient,
        config: MtxConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
        scheduler: Scheduler = asyncio_scheduler,
    ) -> None:
        self._client = client
        self._config = (config or client.config).validate()
        self._clock = clock
        self._cameras: dict[str, Camera] = {}
        self._health: dict[str, HealthRecord] = {}
        self._cache = TtlCache(self._config.cache_ttl, clock=monotonic)
        self._notifier = CoalescingNotifier(self._config.notify_delay, scheduler=scheduler)
        self._refresh_task: asyncio.Task[None] | None = None
        self._monitor_task: asyncio.Task[None] | None = None
        # Bumped whenever health history is cleared; probes started under an
        # older epoch are stale and must not write into the fresh history.
        self._health_epoch = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CameraStore:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._monitor_task is not None and not self._monitor_task.done()

    async def start(self) -> None:
        """Load cameras and start periodic health monitoring in the background."""
        if self.running:
            return
        self._monitor_task = asyncio.create_task(self._monitor(), name="mtxwatch-monitor")

    async def stop(self) -> None:
        """Cancel monitoring and any in-flight refresh; keep known state."""
        tasks = [task for task in (self._monitor_task, self._refresh_task) if task is not None and not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._monitor_task = None
        self._refresh_task = None
        self._notifier.cancel()

    async def close(self) -> None:
        """Stop and forget everything, including subscribers."""
        await self.stop()
        self._notifier.clear()
        self._cameras = {}
        self._health.clear()
        self._cache.clear()

    async def _monitor(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._config.health_check_interval
        await self.refresh()
        deadline = loop.time()
        while True:
            await self.probe_health()
            # Fixed cadence: cycle time is absorbed into the interval.
            deadline += interval
            delay = deadline - loop.time()
            if delay < 0:
                _logger.debug("Probe cycle overran the interval by %.3fs", -delay)
                deadline = loop.time()
                delay = 0
            await asyncio.sleep(delay)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self, force_refresh: bool = False) -> None:
        """Reload the camera list from the relay.

        A non-forced call while another refresh is running does nothing.
        A forced call cancels the running refresh and replaces it. Failures
        keep the previously known cameras.
        """
        in_flight = self._refresh_task
        if in_flight is not None and not in_flight.done():
            if not force_refresh:
                _logger.debug("Refresh already in flight; skipping")
                return
            _logger.debug("Superseding in-flight refresh")
            in_flight.cancel()

        if not force_refresh:
            cached = self._cache.get(CAMERA_LIST_CACHE_KEY)
            if cached is not None:
                self._cameras = {camera.id: self._cameras.get(camera.id, camera) for camera in cached}
                self._notify()
                return

        task = asyncio.create_task(self._load_cameras(), name="mtxwatch-refresh")
        self._refresh_task = task
        await asyncio.wait([task])

    async def _load_cameras(self) -> None:
        try:
            items = await self._client.list_paths()
            configs = await self._client.get_path_configs([item.name for item in items])
        except Exception:
            _logger.warning(
                "Error loading cameras; keeping %d known cameras",
                len(self._cameras),
                exc_info=True,
            )
            self._notify()
            return
        self._apply_configs(configs)

    def _apply_configs(self, configs: Iterable[PathConfig]) -> None:
        cameras: dict[str, Camera] = {}
        for path_config in configs:
            if not path_config.name or path_config.name in cameras:
                continue
            cameras[path_config.name] = self._build_camera(path_config, self._cameras.get(path_config.name))

        for camera_id in self._cameras.keys() - cameras.keys():
            _logger.debug("Camera %s no longer configured on relay", camera_id)
            self._health.pop(camera_id, None)

        self._cameras = cameras
        self._cache.set(CAMERA_LIST_CACHE_KEY, tuple(cameras.values()))
        self._notify()

    def _build_camera(self, path_config: PathConfig, existing: Camera | None) -> Camera:
        camera_id = path_config.name
        health = self._health.get(camera_id)
        if path_config.error:
            status = CameraStatus.ERROR
        elif health is not None:
            status = health.status
        else:
            status = CameraStatus.CHECKING

        if existing is None:
            _logger.debug("Discovered camera %s (%s)", camera_id, redact_source(path_config.source))
            return Camera(
                id=camera_id,
                name=format_camera_name(camera_id),
                source=path_config.source,
                status=status,
                hls_url=hls_path_for(self._config, camera_id),
                webrtc_url=webrtc_url_for(self._config, camera_id),
                error_count=health.error_count if health is not None else 0,
            )

        # Keep operator-owned fields (is_active, name, location, quality,
        # metadata, last_seen) from the known camera.
        return existing.model_copy(
            update={
                "source": path_config.source,
                "status": status,
                "hls_url": hls_path_for(self._config, camera_id),
                "webrtc_url": webrtc_url_for(self._config, camera_id),
                "error_count": health.error_count if health is not None else 0,
            }
        )

    # ------------------------------------------------------------------
    # Health probing
    # ------------------------------------------------------------------

    async def probe_health(self) -> None:
        """Probe every known camera concurrently and fold in the outcomes."""
        camera_ids = list(self._cameras)
        if not camera_ids:
            return
        epoch = self._health_epoch
        results = await asyncio.gather(
            *(self._probe_camera(camera_id, epoch) for camera_id in camera_ids),
            return_exceptions=True,
        )
        for camera_id, result in zip(camera_ids, results):
            if isinstance(result, Exception):
                _logger.error("Error applying health check for %s", camera_id, exc_info=result)

    async def _probe_camera(self, camera_id: str, epoch: int) -> None:
        try:
            result = await self._client.probe(camera_id)
        except Exception as exc:
            _logger.debug("Health check for %s failed: %r", camera_id, exc)
            result = ProbeResult.no_response(camera_id)

        update: dict[str, Any] = {"observed_at": self._clock()}
        if epoch != self._health_epoch:
            update["outcome"] = ProbeOutcome.ABORTED
        self.apply_probe_result(result.model_copy(update=update))

    def apply_probe_result(self, result: ProbeResult) -> None:
        """Fold one probe outcome into the camera's health and status.

        Results for cameras that are no longer known are dropped.
        """
        camera = self._cameras.get(result.camera_id)
        if camera is None:
            _logger.debug("Dropping probe result for unknown camera %s", result.camera_id)
            return
        if result.outcome == ProbeOutcome.ABORTED:
            return

        record = reconcile(
            self._health.get(result.camera_id),
            result,
            failure_threshold=self._config.failure_threshold,
        )
        if record is None:
            return
        self._health[result.camera_id] = record

        changed = camera.status != record.status or camera.error_count != record.error_count
        update: dict[str, Any] = {"status": record.status, "error_count": record.error_count}
        if result.outcome == ProbeOutcome.SUCCESS:
            update["last_seen"] = result.observed_at
        self._cameras[camera.id] = camera.model_copy(update=update)

        if changed:
            if camera.status != record.status:
                _logger.debug("Camera %s: %s -> %s", camera.id, camera.status, record.status)
            self._changed()

    async def force_refresh_status(self) -> None:
        """Forget all health history, reload the list and probe everything now."""
        self._health.clear()
        self._health_epoch += 1
        self._cameras = {
            camera_id: camera.model_copy(update={"status": CameraStatus.CHECKING, "error_count": 0})
            for camera_id, camera in self._cameras.items()
        }
        self._changed()
        await self.refresh(force_refresh=True)
        await self.probe_health()

    async def cameras_for_panel(self) -> list[Camera]:
        """Freshly probed active cameras, for a dedicated monitoring view."""
        await self.force_refresh_status()
        return self.get_active_cameras()

    # ------------------------------------------------------------------
    # Relay mutations
    # ------------------------------------------------------------------

    async def add_camera(self, name: str, source: str) -> bool:
        """Register a camera on the relay, then force a refresh.

        Returns ``False`` when the relay rejects the path or cannot be
        reached. Invalid names raise ``ValueError``.
        """
        try:
            ok = await self._client.add_path(name, source)
        except MtxError as exc:
            _logger.error("Error adding camera %s: %s", name, exc)
            return False
        if ok:
            await self.refresh(force_refresh=True)
        return ok

    async def remove_camera(self, camera_id: str) -> bool:
        """Deregister a camera on the relay, then force a refresh."""
        try:
            ok = await self._client.delete_path(camera_id)
        except MtxError as exc:
            _logger.error("Error deleting camera %s: %s", camera_id, exc)
            return False
        if ok:
            self._health.pop(camera_id, None)
            if self._cameras.pop(camera_id, None) is not None:
                self._changed()
            await self.refresh(force_refresh=True)
        return ok

    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------

    def set_active(self, camera_id: str, active: bool) -> bool:
        """Set operator intent for one camera. Returns whether anything changed."""
        camera = self._cameras.get(camera_id)
        if camera is None or camera.is_active == active:
            return False
        self._cameras[camera_id] = camera.model_copy(update={"is_active": active})
        self._changed()
        return True

    def toggle_active(self, camera_id: str) -> bool:
        camera = self._cameras.get(camera_id)
        if camera is None:
            return False
        return self.set_active(camera_id, not camera.is_active)

    def toggle_many(self, camera_ids: Iterable[str]) -> int:
        """Flip ``is_active`` on each listed camera; one notification at most."""
        toggled = 0
        for camera_id in camera_ids:
            camera = self._cameras.get(camera_id)
            if camera is None:
                continue
            self._cameras[camera_id] = camera.model_copy(update={"is_active": not camera.is_active})
            toggled += 1
        if toggled:
            self._changed()
        return toggled

    def stop_all(self) -> int:
        """Deactivate every camera."""
        return self._set_active_where(lambda camera: camera.is_active, False)

    def activate_all_online(self) -> int:
        """Activate every online camera."""
        return self._set_active_where(
            lambda camera: camera.status == CameraStatus.ONLINE and not camera.is_active,
            True,
        )

    def _set_active_where(self, predicate: Callable[[Camera], bool], active: bool) -> int:
        changed = 0
        for camera_id, camera in self._cameras.items():
            if predicate(camera):
                self._cameras[camera_id] = camera.model_copy(update={"is_active": active})
                changed += 1
        if changed:
            self._changed()
        return changed

    def update_camera(self, camera_id: str, **changes: Any) -> bool:
        """Change display fields (``name``, ``location``, ``quality``, ``metadata``).

        Status fields are not accepted; they belong to the store.
        """
        camera = self._cameras.get(camera_id)
        if camera is None:
            return False
        request = UpdateCameraRequest(**changes)
        update = {field: getattr(request, field) for field in request.model_fields_set}
        if not update:
            return False
        self._cameras[camera_id] = camera.model_copy(update=update)
        self._changed()
        return True

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register for change notifications; returns an unsubscribe callable."""
        return self._notifier.add_listener(listener)

    def subscribe_to_camera(
        self,
        camera_id: str,
        listener: Callable[[Camera | None], None],
    ) -> Callable[[], None]:
        """Like :meth:`subscribe`, but the listener receives one camera (or ``None``)."""

        def _wrapper() -> None:
            listener(self.get_camera(camera_id))

        return self.subscribe(_wrapper)

    def _notify(self) -> None:
        self._notifier.schedule()

    def _changed(self) -> None:
        self._cache.invalidate(CAMERA_LIST_CACHE_KEY)
        self._notify()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_cameras(self) -> list[Camera]:
        return list(self._cameras.values())

    def get_active_cameras(self) -> list[Camera]:
        return [camera for camera in self._cameras.values() if camera.is_active]

    def get_online_cameras(self) -> list[Camera]:
        return [camera for camera in self._cameras.values() if camera.status == CameraStatus.ONLINE]

    def get_camera(self, camera_id: str) -> Camera | None:
        return self._cameras.get(camera_id)

    def get_health(self, camera_id: str) -> HealthRecord | None:
        return self._health.get(camera_id)

    @property
    def health_records(self) -> dict[str, HealthRecord]:
        return dict(self._health)

    def get_stats(self) -> CameraStats:
        cameras = self._cameras.values()
        return CameraStats(
            total=len(self._cameras),
            online=sum(1 for camera in cameras if camera.status == CameraStatus.ONLINE),
            active=sum(1 for camera in cameras if camera.is_active),
            errors=sum(1 for camera in cameras if camera.status == CameraStatus.ERROR),
        )
