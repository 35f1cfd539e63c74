"""
Desk link: position reads and motor commands over one BLE connection.
"""

import asyncio
import logging
from typing import Protocol

from bleak.exc import BleakError

from bledesk.errors import TransportError
from bledesk.protocol import (
    DEFAULT_PROFILE,
    DeskProfile,
    Direction,
    decode_position,
    encode_command,
    encode_stop,
)

logger = logging.getLogger(__name__)

# Faults the BLE backends raise for a broken or busy connection
BLE_ERRORS = (BleakError, asyncio.TimeoutError)


class GattConnector(Protocol):
    """Read/write access to characteristics by UUID (satisfied by BleakClient)."""

    async def read_gatt_char(self, char_specifier: str, **kwargs) -> bytearray: ...

    async def write_gatt_char(self, char_specifier: str, data: bytes, **kwargs) -> None: ...


class DeskLink:
    """
    One desk's position and control characteristics.

    The link does not own the connection; whoever opened the client
    disconnects it.
    """

    def __init__(self, client: GattConnector, profile: DeskProfile = DEFAULT_PROFILE):
        self.client = client
        self.profile = profile
        self._lock = asyncio.Lock()

    async def read_position(self) -> float:
        """
        Read the current desk height in cm.

        Raises:
            TransportError: If the BLE read fails
            MalformedReadingError: If the desk returns an unexpected payload
        """
        async with self._lock:
            try:
                data = await self.client.read_gatt_char(self.profile.position_uuid)
            except BLE_ERRORS as e:
                raise TransportError(f"Failed to read position: {e}") from e
        height = decode_position(data, self.profile.base_height, self.profile.position_size)
        logger.debug("Read position %.2f cm", height)
        return height

    async def send_command(self, direction: Direction) -> None:
        """
        Send one movement pulse.

        The desk keeps moving until the pulse is superseded or times out in
        firmware; this does not wait for the motor.

        Raises:
            TransportError: If the BLE write fails
        """
        await self._write(encode_command(direction), direction.name.lower())

    async def stop(self) -> None:
        """Halt the motor."""
        await self._write(encode_stop(), "stop")

    async def _write(self, payload: bytes, label: str) -> None:
        async with self._lock:
            try:
                await self.client.write_gatt_char(self.profile.control_uuid, payload)
            except BLE_ERRORS as e:
                raise TransportError(f"Failed to send {label} command: {e}") from e
        logger.debug("Sent %s command", label)
