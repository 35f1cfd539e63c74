"""Tests for DeskLink against in-memory connectors."""

import asyncio
import unittest

from bleak.exc import BleakError

from bledesk.errors import MalformedReadingError, TransportError
from bledesk.link import DeskLink
from bledesk.protocol import UUID_CONTROL, UUID_POSITION, DeskProfile, Direction
from bledesk.simulator import SimulatedDesk


class RecordingConnector:
    """Connector that replays canned reads and records writes."""

    def __init__(self, reads=(), error=None):
        self._reads = list(reads)
        self.error = error
        self.read_uuids = []
        self.writes = []

    async def read_gatt_char(self, char_specifier, **kwargs):
        self.read_uuids.append(char_specifier)
        if self.error:
            raise self.error
        return self._reads.pop(0)

    async def write_gatt_char(self, char_specifier, data, **kwargs):
        if self.error:
            raise self.error
        self.writes.append((char_specifier, bytes(data)))


class TestDeskLink(unittest.IsolatedAsyncioTestCase):
    async def test_read_position(self):
        conn = RecordingConnector(reads=[bytearray(b"\x80\x0e")])
        link = DeskLink(conn)
        self.assertAlmostEqual(await link.read_position(), 100.12)
        self.assertEqual(conn.read_uuids, [UUID_POSITION])

    async def test_send_command_writes_control_characteristic(self):
        conn = RecordingConnector()
        link = DeskLink(conn)
        await link.send_command(Direction.UP)
        await link.send_command(Direction.DOWN)
        await link.stop()
        self.assertEqual(
            conn.writes,
            [(UUID_CONTROL, b"\x47\x00"), (UUID_CONTROL, b"\x46\x00"), (UUID_CONTROL, b"\xff\x00")],
        )

    async def test_custom_profile_uuids(self):
        profile = DeskProfile(position_uuid="pos", control_uuid="ctl", base_height=60.0)
        conn = RecordingConnector(reads=[b"\x00\x00"])
        link = DeskLink(conn, profile)
        self.assertEqual(await link.read_position(), 60.0)
        await link.send_command(Direction.UP)
        self.assertEqual(conn.read_uuids, ["pos"])
        self.assertEqual(conn.writes, [("ctl", b"\x47\x00")])

    async def test_four_byte_position_profile(self):
        profile = DeskProfile(position_size=4)
        link = DeskLink(RecordingConnector(reads=[bytearray(b"\x80\x0e\x00\x00")]), profile)
        self.assertAlmostEqual(await link.read_position(), 100.12)

    async def test_simulated_desk_with_four_byte_profile(self):
        desk = SimulatedDesk(height=90.0, profile=DeskProfile(position_size=4))
        self.assertEqual(await DeskLink(desk, desk.profile).read_position(), 90.0)

    async def test_read_failure_is_transport_error(self):
        cause = BleakError("not connected")
        link = DeskLink(RecordingConnector(error=cause))
        with self.assertRaises(TransportError) as ctx:
            await link.read_position()
        self.assertIs(ctx.exception.__cause__, cause)

    async def test_read_timeout_is_transport_error(self):
        link = DeskLink(RecordingConnector(error=asyncio.TimeoutError()))
        with self.assertRaises(TransportError):
            await link.read_position()

    async def test_write_failure_is_transport_error(self):
        link = DeskLink(RecordingConnector(error=BleakError("write failed")))
        with self.assertRaises(TransportError):
            await link.send_command(Direction.DOWN)
        with self.assertRaises(TransportError):
            await link.stop()

    async def test_malformed_payload(self):
        link = DeskLink(RecordingConnector(reads=[b"\x01\x02\x03\x04"]))
        with self.assertRaises(MalformedReadingError):
            await link.read_position()

    async def test_simulated_desk_moves_per_pulse(self):
        desk = SimulatedDesk(height=80.0, step=0.5)
        link = DeskLink(desk)
        await link.send_command(Direction.UP)
        self.assertEqual(await link.read_position(), 80.5)
        await link.send_command(Direction.DOWN)
        await link.send_command(Direction.DOWN)
        self.assertEqual(await link.read_position(), 79.5)
        self.assertEqual(desk.transactions, 5)


if __name__ == "__main__":
    unittest.main()
