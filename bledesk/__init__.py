"""
bledesk - drive a Linak / IKEA Idåsen standing desk over Bluetooth Low Energy.

Reads the desk height, sends up/down pulses and converges on a target
height within a tolerance.
"""

from bledesk.controller import ControllerConfig, MoveResult, PositionController
from bledesk.errors import (
    ConnectFailedError,
    ConnectTimeoutError,
    DeskError,
    MalformedReadingError,
    NoProgressError,
    OutOfRangeError,
    SettingsError,
    TransportError,
)
from bledesk.favorites import DeskSettings
from bledesk.link import DeskLink, GattConnector
from bledesk.protocol import (
    MAX_HEIGHT_CM,
    MIN_HEIGHT_CM,
    DeskProfile,
    Direction,
    decode_position,
    encode_command,
)
from bledesk.session import DeskSession
from bledesk.simulator import SimulatedDesk

__all__ = [
    # Session
    "DeskSession",
    "DeskSettings",
    # Control
    "DeskLink",
    "GattConnector",
    "PositionController",
    "ControllerConfig",
    "MoveResult",
    "SimulatedDesk",
    # Protocol
    "DeskProfile",
    "Direction",
    "decode_position",
    "encode_command",
    "MIN_HEIGHT_CM",
    "MAX_HEIGHT_CM",
    # Errors
    "DeskError",
    "MalformedReadingError",
    "TransportError",
    "ConnectTimeoutError",
    "ConnectFailedError",
    "OutOfRangeError",
    "NoProgressError",
    "SettingsError",
]
