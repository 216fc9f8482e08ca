from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from typing import List, Optional

import uvicorn

from wigle_bluetooth.settings import settings
from wigle_bluetooth.app import create_app
from wigle_bluetooth.core.bluez.device_class import DeviceClassResolver
from wigle_bluetooth.core.capture.combine import CombineError, combine_latest
from wigle_bluetooth.core.capture.wigle_csv import WigleCsvSink
from wigle_bluetooth.core.gps.gpsd import GpsdClient
from wigle_bluetooth.core.gps.location import LocationTracker
from wigle_bluetooth.core.orchestrator.orchestrator import Orchestrator, StartupError

logger = logging.getLogger("wigle_bluetooth")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
    )


def build_orchestrator(args: argparse.Namespace) -> Orchestrator:
    tracker = LocationTracker()
    return Orchestrator(
        sink=WigleCsvSink(args.log_root),
        tracker=tracker,
        gps_client=GpsdClient(tracker, host=args.gpsd_host, port=args.gpsd_port),
        resolver=DeviceClassResolver(adapter=args.adapter, timeout_s=settings.DBUS_TIMEOUT_S),
        max_queue=settings.QUEUE_MAXSIZE,
        adapter=args.adapter,
    )


async def _run(args: argparse.Namespace) -> int:
    orch = build_orchestrator(args)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        await orch.start()
    except StartupError as e:
        logger.critical("[FATAL] %s", e)
        return 1

    waiters = {asyncio.create_task(stop.wait(), name="stop_signal")}
    server = None
    if args.api:
        server = uvicorn.Server(uvicorn.Config(
            create_app(orch), host=args.host, port=args.port, log_level="warning",
        ))
        waiters.add(asyncio.create_task(server.serve(), name="status_api"))
        logger.info("[ORCH] Status API on http://%s:%d", args.host, args.port)

    try:
        # uvicorn traps SIGINT/SIGTERM while serving; its exit counts as a stop
        _done, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        if server is not None:
            server.should_exit = True
        for task in pending:
            if task.get_name() == "status_api":
                await task
            else:
                task.cancel()
    finally:
        await orch.shutdown()
    return 0


def run_command(args: argparse.Namespace) -> int:
    return asyncio.run(_run(args))


def combine_command(args: argparse.Namespace) -> int:
    try:
        out = combine_latest(args.log_root, args.wifi_root)
    except CombineError as e:
        logger.error("%s", e)
        return 1
    print(f"Combined CSV created at {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wigle-bluetooth",
        description="Log BLE devices to a WiGLE-compatible CSV file (requires GPS).",
    )
    # Shared by every subcommand: `wigle-bluetooth run --log-root ...`
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--log-level", default=settings.LOG_LEVEL, help="DEBUG, INFO, WARNING, ERROR")
    common.add_argument("--log-root", default=settings.LOG_ROOT, help="Directory for BLE CSV logs")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", parents=[common], help="Scan and log until SIGINT/SIGTERM")
    run.add_argument("--gpsd-host", default=settings.GPSD_HOST)
    run.add_argument("--gpsd-port", type=int, default=settings.GPSD_PORT)
    run.add_argument("--adapter", default=settings.ADAPTER, help="BlueZ adapter, e.g. hci0")
    run.add_argument("--api", action=argparse.BooleanOptionalAction, default=settings.API_ENABLED,
                     help="Serve the read-only status API")
    run.add_argument("--host", default=settings.HOST)
    run.add_argument("--port", type=int, default=settings.PORT)
    run.set_defaults(func=run_command)

    combine = sub.add_parser("combine", parents=[common], help="Merge the latest BLE log with the latest Wi-Fi log")
    combine.add_argument("--wifi-root", default=settings.WIFI_LOG_ROOT, help="Directory of WiGLE Wi-Fi CSV logs")
    combine.set_defaults(func=combine_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)
