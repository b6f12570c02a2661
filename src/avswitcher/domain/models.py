"""Core domain models for the avswitcher service.

Commands flowing to the devices, the connection lifecycle enumerations
used by the channel, and the result objects returned to HTTP callers.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ChannelMode(str, enum.Enum):
    """Connection lifecycle used for one command exchange."""

    TRANSIENT = "transient"  # Dial, exchange, close
    POOLED = "pooled"  # Reuse a cached connection, evicted when idle


class ConnectionState(str, enum.Enum):
    """Validity of a pooled connection entry."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class UserState(str, enum.Enum):
    """Presence state of a user logged in to a VIA endpoint."""

    INACTIVE = "0"
    ACTIVE = "1"
    WAITING = "2"


# ---------------------------------------------------------------------------
# Wire command
# ---------------------------------------------------------------------------


class Command(BaseModel):
    """One request to a device: a verb and up to three parameters.

    Rendered on the wire as the non-empty fields joined by single spaces.
    Spaces inside a parameter are not escaped and read as separators on
    the device side.
    """

    model_config = ConfigDict(frozen=True)

    verb: str = Field(description="Command keyword, e.g. 'Route'")
    param1: str = Field(default="")
    param2: str = Field(default="")
    param3: str = Field(default="")

    @property
    def fields(self) -> list[str]:
        return [f for f in (self.verb, self.param1, self.param2, self.param3) if f]

    def render(self) -> str:
        return " ".join(self.fields)

    def __str__(self) -> str:
        return self.render()


# ---------------------------------------------------------------------------
# Video switcher results
# ---------------------------------------------------------------------------


class InputRoute(BaseModel):
    """Route annotated in external (0-based) indices as '<input>:<output>'."""

    input: str
    output: str | None = None


class SignalStatus(BaseModel):
    """Raw active-signal payload reported for a port."""

    port: str
    signal: str


# ---------------------------------------------------------------------------
# VIA results
# ---------------------------------------------------------------------------


class NetworkInfo(BaseModel):
    ip_address: str = ""
    gateway: str = ""
    dns: list[str] = Field(default_factory=list)
    mac_address: str = ""


class HardwareInfo(BaseModel):
    hostname: str = ""
    serial_number: str = ""
    firmware_version: str = ""
    network_info: NetworkInfo = Field(default_factory=NetworkInfo)


class ViaUsers(BaseModel):
    inactive_users: list[str] = Field(default_factory=list)
    active_users: list[str] = Field(default_factory=list)
    users_waiting: list[str] = Field(default_factory=list)
