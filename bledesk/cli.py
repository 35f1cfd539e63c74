"""
CLI interface for desk control.

Provides command-line tools for scanning BLE devices and moving the desk.
"""

import argparse
import asyncio
import logging
import sys

from bledesk.config import Config, load_config
from bledesk.controller import ControllerConfig
from bledesk.errors import (
    ConnectFailedError,
    ConnectTimeoutError,
    DeskError,
    NoProgressError,
    OutOfRangeError,
    SettingsError,
    TransportError,
)
from bledesk.favorites import DeskSettings
from bledesk.protocol import check_height
from bledesk.scanner import print_devices, scan_devices
from bledesk.session import DeskSession

EXIT_OK = 0
EXIT_ERROR = 2


def error(msg: str) -> int:
    print(f"❌ {msg}", file=sys.stderr)
    return EXIT_ERROR


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="bledesk", description="Move a Linak / IKEA Idåsen desk over BLE.")
    p.add_argument("--desk", default="", help="Set desk by name or address.")
    p.add_argument("--pos", type=float, help="Position to move desk to in cm. Ranges from 65cm to 128cm.")
    p.add_argument("--fav", default="", help="Save current position as named favorite.")
    p.add_argument("--movefav", default="", help="Load a favorite and move there.")
    p.add_argument("--listfav", action="store_true", help="List favorite positions.")
    p.add_argument("--delfav", default="", help="Remove a given favorite position.")
    p.add_argument("--timeout", type=float, help="Seconds to search for the desk.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every BLE transaction.")
    return p


async def run_scan():
    """Scan for BLE devices."""
    print("🔍 Scanning for BLE devices (10 seconds)...\n")
    devices = await scan_devices(timeout=10.0)
    print_devices(devices)

    desks = [d for d in devices if d.is_desk]
    if desks:
        print(f"\n✅ Found {len(desks)} desk(s):")
        for desk in desks:
            print(f"   • {desk.name} ({desk.address})")
    else:
        print("\n⚠️  No desks found. Make sure your desk is powered on.")


async def run_control(args: argparse.Namespace, config: Config, connect=DeskSession.connect) -> int:
    """Run the requested desk actions. Returns the process exit code."""
    try:
        settings = DeskSettings.load(config.settings_path)
    except SettingsError as e:
        return error(str(e))

    if args.listfav:
        print(settings.list_positions())
        return EXIT_OK

    if args.delfav:
        try:
            deleted = settings.del_fav(args.delfav)
        except SettingsError as e:
            return error(str(e))
        if deleted:
            print("Position deleted.")
            return EXIT_OK
        return error("Given position does not exist.")

    target = args.desk or settings.name or config.desk
    if not target:
        return error("No desk name or address specified. Please add `--desk` to specify what desk to connect to.")

    # Check what we can before spending time on a BLE scan
    fav_height = None
    try:
        if args.pos is not None:
            check_height(args.pos)
        if args.movefav:
            fav_height = settings.get_fav(args.movefav)
            if fav_height is None:
                return error(f"No such favorite {args.movefav}")
            check_height(fav_height)
        settings.set_name(target)
    except (OutOfRangeError, SettingsError) as e:
        return error(str(e))

    timeout = args.timeout if args.timeout is not None else config.connect_timeout
    controller_config = ControllerConfig(interval=config.poll_interval)

    try:
        session = await connect(target, timeout=timeout, controller_config=controller_config)
    except ConnectTimeoutError as e:
        return error(str(e))
    except ConnectFailedError as e:
        return error(f"Connection failed: {e}")

    try:
        if args.pos is not None:
            await session.move_to(args.pos)

        if args.fav:
            height = await session.current_position()
            settings.add_fav(args.fav, height)
            print(f"Saved current position ({height:.2f} cm) to {args.fav}")

        if fav_height is not None:
            await session.move_to(fav_height)

        if args.pos is None and not args.fav and fav_height is None:
            print(f"📏 Height: {await session.current_position():.2f} cm")

    except TransportError as e:
        return error(f"Communication error: {e}")
    except NoProgressError as e:
        return error(f"Desk stopped moving: {e}")
    except DeskError as e:
        return error(str(e))
    finally:
        await session.disconnect()

    return EXIT_OK


def main_scan():
    """Entry point for desk-scan command."""
    asyncio.run(run_scan())


def main(argv: list[str] | None = None):
    """Entry point for bledesk command."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        config = load_config()
    except SettingsError as e:
        sys.exit(error(str(e)))

    try:
        code = asyncio.run(run_control(args, config))
    except KeyboardInterrupt:
        print("\n🛑 Interrupted", file=sys.stderr)
        code = EXIT_ERROR
    sys.exit(code)


if __name__ == "__main__":
    main()
