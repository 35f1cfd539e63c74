"""
BLE Device Scanner

Scans for nearby Bluetooth Low Energy devices and finds a desk by name or
address.
"""

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from bledesk.errors import ConnectFailedError, ConnectTimeoutError

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10.0


@dataclass
class ScannedDevice:
    """Information about a discovered BLE device."""

    name: str | None
    address: str
    rssi: int
    manufacturer_id: int | None = None
    service_uuids: list[str] | None = None

    @property
    def is_desk(self) -> bool:
        """Check if this device appears to be a Linak desk."""
        if self.name and "desk" in self.name.lower():
            return True
        # Check for Linak service UUID
        if self.service_uuids:
            return any("99fa" in uuid.lower() for uuid in self.service_uuids)
        return False


def matches(name_or_address: str, device: BLEDevice, adv_data: AdvertisementData | None = None) -> bool:
    """Return True if the device's address or advertised local name is ``name_or_address``."""
    if device.address.lower() == name_or_address.lower():
        return True
    local_name = (adv_data.local_name if adv_data else None) or device.name
    return local_name == name_or_address


async def discover_device(
    name_or_address: str,
    timeout: float = CONNECT_TIMEOUT,
    scanner_factory=BleakScanner,
) -> BLEDevice:
    """
    Scan until a device matching ``name_or_address`` is advertised.

    The first match wins; a timeout cancels the wait and any later
    advertisement is ignored.

    Args:
        name_or_address: Local name or address to look for
        timeout: Seconds to scan before giving up
        scanner_factory: Callable taking ``detection_callback``, returning a scanner

    Raises:
        ConnectTimeoutError: If nothing matches within ``timeout``
        ConnectFailedError: If scanning could not start
    """
    found: asyncio.Future = asyncio.get_running_loop().create_future()

    def on_detection(device: BLEDevice, adv_data: AdvertisementData):
        if found.done():
            return
        if matches(name_or_address, device, adv_data):
            found.set_result(device)

    scanner = scanner_factory(detection_callback=on_detection)
    try:
        await scanner.start()
    except BleakError as e:
        raise ConnectFailedError(f"BLE scan failed: {e}") from e

    try:
        device = await asyncio.wait_for(found, timeout=timeout)
    except asyncio.TimeoutError:
        raise ConnectTimeoutError(f"Could not find '{name_or_address}' within {timeout:g}s") from None
    finally:
        with suppress(BleakError):
            await scanner.stop()

    logger.info("Found %s (%s)", device.name, device.address)
    return device


async def scan_devices(
    timeout: float = 10.0,
    filter_desks: bool = False,
) -> list[ScannedDevice]:
    """
    Scan for BLE devices.

    Args:
        timeout: Scan duration in seconds
        filter_desks: If True, only return devices that appear to be desks

    Returns:
        List of discovered devices, sorted by signal strength (strongest first)
    """
    devices: list[ScannedDevice] = []

    discovered = await BleakScanner.discover(timeout=timeout, return_adv=True)

    for address, (device, adv_data) in discovered.items():
        manufacturer_id = None
        if adv_data.manufacturer_data:
            manufacturer_id = list(adv_data.manufacturer_data.keys())[0]

        scanned = ScannedDevice(
            name=device.name,
            address=address,
            rssi=adv_data.rssi,
            manufacturer_id=manufacturer_id,
            service_uuids=adv_data.service_uuids or None,
        )

        if filter_desks and not scanned.is_desk:
            continue

        devices.append(scanned)

    devices.sort(key=lambda d: d.rssi, reverse=True)

    return devices


def print_devices(devices: list[ScannedDevice]) -> None:
    """Print a formatted table of discovered devices."""
    if not devices:
        print("No devices found.")
        return

    print(f"\n{'Name':<25} | {'Address':<17} | {'RSSI':>8} | Notes")
    print("-" * 70)

    for device in devices:
        name = device.name or "(unknown)"
        if len(name) > 24:
            name = name[:21] + "..."

        notes = []
        if device.is_desk:
            notes.append("DESK")
        if device.manufacturer_id:
            notes.append(f"MFG:0x{device.manufacturer_id:04X}")

        print(f"{name:<25} | {device.address:<17} | {device.rssi:>5} dBm | {', '.join(notes)}")
