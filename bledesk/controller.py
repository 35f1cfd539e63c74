"""
Position controller: closed-loop movement to a target height.

The desk only understands "keep moving up" / "keep moving down" pulses, so
the controller polls the height and re-issues pulses until the desk is
within tolerance of the target.
"""

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass

from bledesk.errors import NoProgressError, TransportError
from bledesk.link import DeskLink
from bledesk.protocol import POLL_INTERVAL, TOLERANCE_CM, Direction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControllerConfig:
    """
    Tuning for the convergence loop.

    Attributes:
        tolerance: Distance from target (cm) counted as arrived
        interval: Seconds between pulses, lets the desk move and the BLE stack settle
        stall_limit: Iterations without progress before giving up
        min_progress: Improvement (cm) on the best distance that counts as progress
        max_duration: Seconds before giving up regardless of progress
    """

    tolerance: float = TOLERANCE_CM
    interval: float = POLL_INTERVAL
    stall_limit: int = 6
    min_progress: float = 0.1
    max_duration: float = 120.0


@dataclass
class MoveResult:
    """Outcome of a completed move."""

    target: float
    final_height: float
    iterations: int
    elapsed: float

    @property
    def error(self) -> float:
        return abs(self.final_height - self.target)


class PositionController:
    """Drives a borrowed DeskLink towards a target height."""

    def __init__(self, link: DeskLink, config: ControllerConfig | None = None):
        self.link = link
        self.config = config or ControllerConfig()

    async def move_to(self, target: float) -> MoveResult:
        """
        Move the desk until it is within tolerance of ``target``.

        A failed read or write ends the move immediately; nothing is retried.

        Raises:
            TransportError: If the link fails
            MalformedReadingError: If the desk reports garbage
            NoProgressError: If the desk stalls or the move takes too long
        """
        cfg = self.config
        loop = asyncio.get_running_loop()
        started = loop.time()
        best = float("inf")
        stalled = 0
        iterations = 0

        try:
            while True:
                current = await self.link.read_position()
                distance = abs(current - target)

                if distance <= cfg.tolerance:
                    elapsed = loop.time() - started
                    logger.info("Reached %.2f cm (target %.2f cm) in %d steps", current, target, iterations)
                    return MoveResult(target, current, iterations, elapsed)

                if distance < best - cfg.min_progress:
                    best = distance
                    stalled = 0
                else:
                    stalled += 1

                if stalled >= cfg.stall_limit:
                    await self._abort(f"Desk stuck at {current:.2f} cm, target {target:.2f} cm")
                if loop.time() - started >= cfg.max_duration:
                    await self._abort(f"Gave up after {cfg.max_duration:g}s at {current:.2f} cm, target {target:.2f} cm")

                direction = Direction.UP if current < target else Direction.DOWN
                await self.link.send_command(direction)
                iterations += 1
                logger.debug("%.2f cm -> %.2f cm: %s", current, target, direction.name)

                await asyncio.sleep(cfg.interval)
        except asyncio.CancelledError:
            logger.warning("Move to %.2f cm cancelled, stopping desk", target)
            with suppress(TransportError):
                await self.link.stop()
            raise

    async def _abort(self, reason: str):
        logger.warning(reason)
        with suppress(TransportError):
            await self.link.stop()
        raise NoProgressError(reason)
