"""Exceptions raised by the desk library."""


class DeskError(Exception):
    """Base exception for desk errors."""

    pass


class MalformedReadingError(DeskError):
    """Raised when a characteristic payload cannot be decoded."""

    pass


class TransportError(DeskError):
    """Raised when a BLE read or write fails."""

    pass


class ConnectTimeoutError(DeskError):
    """Raised when no matching desk is advertised before the timeout."""

    pass


class ConnectFailedError(DeskError):
    """Raised when the desk was found but the connection could not be made."""

    pass


class OutOfRangeError(DeskError):
    """Raised when a target height is outside the desk limits."""

    pass


class NoProgressError(DeskError):
    """Raised when the desk stops getting closer to its target."""

    pass


class SettingsError(DeskError):
    """Raised when the favorites file cannot be read or written."""

    pass
