"""Error hierarchy shared by the channel, the device operations and the API.

The HTTP boundary maps InvalidArgumentError to 400 and every other
SwitcherError to 500, always passing the message text through.
"""

from __future__ import annotations


class SwitcherError(Exception):
    """Base class for all avswitcher failures."""

    def __init__(self, message: str, address: str = "") -> None:
        super().__init__(message)
        self.address = address


class InvalidArgumentError(SwitcherError, ValueError):
    """Raised for an unparseable or out-of-range index or flag, before any I/O."""


class TransportError(SwitcherError):
    """Raised when dialing, writing to or reading from a device fails."""


class DeviceTimeoutError(TransportError):
    """Raised when a device does not answer before the read deadline."""


class ProtocolError(SwitcherError):
    """Raised when a device reply lacks the expected delimiters or fields."""
