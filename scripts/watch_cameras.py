#!/usr/bin/env python3
"""Watch camera health on a live MediaMTX relay.

Runs a :class:`mtxwatch.CameraStore` against the relay and prints a status
table whenever the store notifies. Configuration comes from ``MTX_*``
environment variables; the flags below override them.

Examples::

    python scripts/watch_cameras.py --api http://relay:9997/v3 --playback http://relay:8888 --hls-prefix ""
    python scripts/watch_cameras.py --panel --once
    python scripts/watch_cameras.py --add front_door rtsp://admin:pw@192.168.0.2:554/stream1
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from mtxwatch import CameraStore, MediaMtxClient, MtxConfig, MtxError  # noqa: E402
from mtxwatch._redact import redact_source  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--api", help="Control API base URL (MTX_API_BASE_URL)")
    parser.add_argument("--playback", help="HLS origin for probes (MTX_PLAYBACK_BASE_URL)")
    parser.add_argument("--hls-prefix", help="HLS path prefix (MTX_HLS_PATH_PREFIX)")
    parser.add_argument("--interval", type=float, help="Seconds between probe cycles")
    parser.add_argument("--panel", action="store_true", help="Force a fresh status pass before watching")
    parser.add_argument("--once", action="store_true", help="Print one table and exit")
    parser.add_argument("--add", nargs=2, metavar=("NAME", "SOURCE"), help="Register a camera first")
    parser.add_argument("--remove", metavar="NAME", help="Deregister a camera first")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> MtxConfig:
    overrides: dict[str, Any] = {}
    if args.api is not None:
        overrides["api_base_url"] = args.api
    if args.playback is not None:
        overrides["playback_base_url"] = args.playback
    if args.hls_prefix is not None:
        overrides["hls_path_prefix"] = args.hls_prefix
    if args.interval is not None:
        overrides["health_check_interval"] = args.interval
    return MtxConfig.from_env(**overrides)


def _print_table(store: CameraStore) -> None:
    stats = store.get_stats()
    print(f"\n{stats.total} cameras, {stats.online} online, {stats.active} active, {stats.errors} errors")
    for camera in store.get_cameras():
        marker = "*" if camera.is_active else " "
        print(
            f" {marker} {camera.id:<24} {camera.status:<9} errors={camera.error_count:<2} "
            f"{redact_source(camera.source)}"
        )


async def _run(args: argparse.Namespace) -> int:
    config = _build_config(args)
    async with MediaMtxClient(config) as client:
        store = CameraStore(client)

        if args.add:
            name, source = args.add
            if not await store.add_camera(name, source):
                print(f"Relay rejected camera {name}", file=sys.stderr)
                return 1
        if args.remove and not await store.remove_camera(args.remove):
            print(f"Relay refused to delete {args.remove}", file=sys.stderr)
            return 1

        if args.once:
            if args.panel:
                await store.cameras_for_panel()
            else:
                await store.refresh()
                await store.probe_health()
            _print_table(store)
            return 0

        store.subscribe(lambda: _print_table(store))
        async with store:
            if args.panel:
                await store.force_refresh_status()
            await asyncio.Event().wait()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except MtxError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
