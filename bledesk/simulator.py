"""
In-memory desk that speaks the same characteristic protocol as the real one.

Useful for exercising the controller and session without hardware.
"""

import struct

from bleak.exc import BleakError

from bledesk.protocol import DEFAULT_PROFILE, STOP_OPCODE, DeskProfile, Direction


class SimulatedDesk:
    """
    A GattConnector whose height moves ``step`` cm per movement pulse.

    Heights are kept in raw hundredths so repeated steps don't drift.
    The desk stops at its hardware limits, and a ``step`` of 0 models a
    desk that is jammed.
    """

    def __init__(
        self,
        height: float = 75.0,
        step: float = 0.5,
        profile: DeskProfile = DEFAULT_PROFILE,
        fail_read_on: int | None = None,
        fail_write_on: int | None = None,
        lower_limit: float | None = None,
        upper_limit: float | None = None,
    ):
        self.profile = profile
        self._raw = round((height - profile.base_height) * 100)
        self._step = round(step * 100)
        self._lower = round(((lower_limit if lower_limit is not None else profile.min_height) - profile.base_height) * 100)
        self._upper = round(((upper_limit if upper_limit is not None else profile.max_height) - profile.base_height) * 100)
        self.fail_read_on = fail_read_on
        self.fail_write_on = fail_write_on
        self.reads = 0
        self.writes: list[bytes] = []
        self.connected = True

    @property
    def height(self) -> float:
        return self.profile.base_height + self._raw / 100.0

    @property
    def transactions(self) -> int:
        return self.reads + len(self.writes)

    @property
    def commands(self) -> list[int]:
        """Opcodes written so far."""
        return [struct.unpack("<H", w)[0] for w in self.writes]

    async def read_gatt_char(self, char_specifier: str, **kwargs) -> bytearray:
        if char_specifier != self.profile.position_uuid:
            raise BleakError(f"Characteristic {char_specifier} is not readable")
        self.reads += 1
        if self.fail_read_on is not None and self.reads >= self.fail_read_on:
            raise BleakError("Simulated read failure")
        return bytearray(struct.pack("<H", self._raw) + bytes(self.profile.position_size - 2))

    async def write_gatt_char(self, char_specifier: str, data: bytes, **kwargs) -> None:
        if char_specifier != self.profile.control_uuid:
            raise BleakError(f"Characteristic {char_specifier} is not writable")
        if self.fail_write_on is not None and len(self.writes) + 1 >= self.fail_write_on:
            raise BleakError("Simulated write failure")
        self.writes.append(bytes(data))

        opcode = struct.unpack("<H", bytes(data))[0]
        if opcode == Direction.UP:
            self._raw = min(self._upper, self._raw + self._step)
        elif opcode == Direction.DOWN:
            self._raw = max(self._lower, self._raw - self._step)
        elif opcode != STOP_OPCODE:
            raise BleakError(f"Unknown opcode {opcode}")

    # Connection lifecycle, mirroring BleakClient

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> bool:
        self.connected = True
        return True

    async def disconnect(self) -> bool:
        self.connected = False
        return True
