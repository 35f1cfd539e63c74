"""
Desk session: a connected, named desk.

Ties discovery, the BLE connection, the link and the position controller
together for the CLI and MCP front ends.
"""

import asyncio
import logging
import warnings
from contextlib import suppress

from bleak import BleakClient, BleakScanner

from bledesk.controller import ControllerConfig, MoveResult, PositionController
from bledesk.errors import ConnectFailedError
from bledesk.link import BLE_ERRORS, DeskLink
from bledesk.protocol import DEFAULT_PROFILE, DeskProfile, check_height
from bledesk.scanner import CONNECT_TIMEOUT, discover_device

# Suppress bleak's internal asyncio warnings (race condition in CoreBluetooth backend)
warnings.filterwarnings("ignore", message=".*invalid state.*")
logging.getLogger("bleak").setLevel(logging.ERROR)

logger = logging.getLogger(__name__)


class DeskSession:
    """A desk we are connected to."""

    def __init__(
        self,
        client,
        name: str = "Desk",
        profile: DeskProfile = DEFAULT_PROFILE,
        controller_config: ControllerConfig | None = None,
        quiet: bool = False,
    ):
        self.client = client
        self.name = name
        self.profile = profile
        self.quiet = quiet
        self.link = DeskLink(client, profile)
        self.controller = PositionController(self.link, controller_config)
        self._disconnecting = False

    def _log(self, msg: str):
        """Print message unless in quiet mode."""
        if not self.quiet:
            print(msg)

    @classmethod
    async def connect(
        cls,
        name_or_address: str,
        timeout: float = CONNECT_TIMEOUT,
        retries: int = 2,
        profile: DeskProfile = DEFAULT_PROFILE,
        controller_config: ControllerConfig | None = None,
        quiet: bool = False,
        scanner_factory=BleakScanner,
        client_factory=BleakClient,
    ) -> "DeskSession":
        """
        Find the desk by name or address and connect to it.

        Args:
            name_or_address: Advertised local name or BLE address
            timeout: Seconds to scan, and to wait for each connection attempt
            retries: Extra connection attempts after the first

        Raises:
            ConnectTimeoutError: If the desk is not advertised within ``timeout``
            ConnectFailedError: If it was found but every connection attempt failed
        """
        if not quiet:
            print(f"🔍 Searching for {name_or_address}...")
        device = await discover_device(name_or_address, timeout, scanner_factory)

        last_error = None
        for attempt in range(retries + 1):
            client = None
            try:
                client = client_factory(device, timeout=timeout)
                session = cls(client, device.name or name_or_address, profile, controller_config, quiet)
                session._log(f"🔌 Connecting{f' (attempt {attempt + 1})' if attempt > 0 else ''}...")
                await client.connect()
                session._log(f"🔗 Connected to {session.name}")
                return session
            except BLE_ERRORS as e:
                last_error = e
                logger.debug("Connection attempt %d failed: %s", attempt + 1, e)
                # Tear down any half-open connection before the next attempt
                if client is not None:
                    with suppress(*BLE_ERRORS):
                        await client.disconnect()

            if attempt < retries:
                await asyncio.sleep(1)

        raise ConnectFailedError(f"Could not connect to {name_or_address}: {last_error}") from last_error

    async def move_to(self, target: float) -> MoveResult:
        """
        Move to ``target`` cm.

        Raises:
            OutOfRangeError: If the target is outside the desk limits (nothing is sent)
            TransportError, MalformedReadingError, NoProgressError: From the controller
        """
        check_height(target, self.profile)
        self._log(f"📏 Moving to {target:.2f} cm")
        result = await self.controller.move_to(target)
        self._log(f"✅ Done: {result.final_height:.2f} cm (error: {result.error:.2f} cm)")
        return result

    async def current_position(self) -> float:
        """Current height in cm."""
        return await self.link.read_position()

    async def stop(self):
        """Halt desk movement."""
        await self.link.stop()
        self._log("🛑 Stopped")

    async def disconnect(self):
        """Disconnect from the desk gracefully."""
        if self._disconnecting:
            return
        self._disconnecting = True
        with suppress(*BLE_ERRORS):
            await self.client.disconnect()
        self._log("👋 Disconnected")

    async def __aenter__(self) -> "DeskSession":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.disconnect()
