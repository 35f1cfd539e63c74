"""
Runtime configuration from the environment.

Values can also be placed in a ``.env`` file in the working directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from bledesk.errors import SettingsError
from bledesk.favorites import DEFAULT_SETTINGS_PATH
from bledesk.protocol import POLL_INTERVAL
from bledesk.scanner import CONNECT_TIMEOUT


@dataclass(frozen=True)
class Config:
    desk: str = ""
    settings_path: Path = DEFAULT_SETTINGS_PATH
    connect_timeout: float = CONNECT_TIMEOUT
    poll_interval: float = POLL_INTERVAL


def load_config() -> Config:
    """Read BLEDESK_* variables (after loading ``.env``)."""
    load_dotenv()
    try:
        return Config(
            desk=os.getenv("BLEDESK_DESK", ""),
            settings_path=Path(os.getenv("BLEDESK_SETTINGS", str(DEFAULT_SETTINGS_PATH))).expanduser(),
            connect_timeout=float(os.getenv("BLEDESK_CONNECT_TIMEOUT", CONNECT_TIMEOUT)),
            poll_interval=float(os.getenv("BLEDESK_POLL_INTERVAL", POLL_INTERVAL)),
        )
    except ValueError as e:
        raise SettingsError(f"Invalid BLEDESK_* setting: {e}") from e
