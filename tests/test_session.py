"""Tests for DeskSession connect / move / position."""

import asyncio
import unittest

from bledesk.controller import ControllerConfig
from bledesk.errors import ConnectFailedError, ConnectTimeoutError, OutOfRangeError
from bledesk.protocol import STOP_OPCODE, Direction
from bledesk.session import DeskSession
from bledesk.simulator import SimulatedDesk
from tests.fakes import FailingClient, FakeAdvertisement, FakeDevice, FakeScanner

DESK = FakeDevice("AA:BB:CC:DD:EE:FF", "Desk 1234")
FAST = ControllerConfig(interval=0)


def make_session(desk):
    return DeskSession(desk, controller_config=FAST, quiet=True)


class TestDeskSession(unittest.IsolatedAsyncioTestCase):
    async def test_out_of_range_touches_nothing(self):
        desk = SimulatedDesk(height=80.0)
        session = make_session(desk)
        for target in (200.0, 64.9, 128.5, -1.0):
            with self.subTest(target=target):
                with self.assertRaises(OutOfRangeError):
                    await session.move_to(target)
        self.assertEqual(desk.transactions, 0)

    async def test_move_to(self):
        desk = SimulatedDesk(height=80.0)
        result = await make_session(desk).move_to(110.0)
        self.assertLessEqual(abs(result.final_height - 110.0), 1.0)
        self.assertLessEqual(abs(desk.height - 110.0), 1.0)

    async def test_current_position(self):
        desk = SimulatedDesk(height=92.37)
        self.assertAlmostEqual(await make_session(desk).current_position(), 92.37)
        self.assertEqual(desk.writes, [])

    async def test_stop(self):
        desk = SimulatedDesk(height=92.0)
        await make_session(desk).stop()
        self.assertEqual(desk.writes, [b"\xff\x00"])

    async def test_context_manager_disconnects(self):
        desk = SimulatedDesk()
        async with make_session(desk) as session:
            await session.current_position()
            self.assertTrue(desk.is_connected)
        self.assertFalse(desk.is_connected)

    async def test_cancelled_move_stops_and_disconnects(self):
        desk = SimulatedDesk(height=80.0)
        session = DeskSession(desk, controller_config=ControllerConfig(interval=10), quiet=True)

        async def move():
            async with session:
                await session.move_to(120.0)

        task = asyncio.create_task(move())
        while not desk.writes:
            await asyncio.sleep(0)

        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(desk.commands, [Direction.UP, STOP_OPCODE])
        self.assertFalse(desk.is_connected)


class TestConnect(unittest.IsolatedAsyncioTestCase):
    async def test_connect_found(self):
        desk = SimulatedDesk(height=100.0)
        desk.connected = False
        session = await DeskSession.connect(
            "Desk 1234",
            timeout=5.0,
            quiet=True,
            controller_config=FAST,
            scanner_factory=FakeScanner.factory([(0.01, DESK, FakeAdvertisement("Desk 1234"))]),
            client_factory=lambda device, timeout: desk,
        )
        self.assertTrue(desk.is_connected)
        self.assertEqual(session.name, "Desk 1234")
        self.assertEqual(await session.current_position(), 100.0)
        await session.disconnect()
        self.assertFalse(desk.is_connected)

    async def test_connect_by_address(self):
        desk = SimulatedDesk()
        session = await DeskSession.connect(
            "aa:bb:cc:dd:ee:ff",
            timeout=5.0,
            quiet=True,
            scanner_factory=FakeScanner.factory([(0.01, DESK, FakeAdvertisement("Desk 1234"))]),
            client_factory=lambda device, timeout: desk,
        )
        self.assertIs(session.client, desk)

    async def test_connect_timeout(self):
        with self.assertRaises(ConnectTimeoutError):
            await DeskSession.connect(
                "Desk 1234",
                timeout=0.05,
                quiet=True,
                scanner_factory=FakeScanner.factory(),
                client_factory=lambda device, timeout: SimulatedDesk(),
            )

    async def test_connect_failed(self):
        clients = []

        def client_factory(device, timeout):
            clients.append(FailingClient(device, timeout))
            return clients[-1]

        with self.assertRaises(ConnectFailedError):
            await DeskSession.connect(
                "Desk 1234",
                timeout=5.0,
                retries=0,
                quiet=True,
                scanner_factory=FakeScanner.factory([(0.01, DESK, FakeAdvertisement("Desk 1234"))]),
                client_factory=client_factory,
            )
        self.assertEqual(len(clients), 1)
        self.assertEqual(clients[0].attempts, 1)
        self.assertEqual(clients[0].disconnects, 1)


if __name__ == "__main__":
    unittest.main()
