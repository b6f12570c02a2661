"""Domain models for avswitcher.

Commands, connection lifecycle enumerations and result objects. All
models use Pydantic v2 for validation and serialization.
"""

from avswitcher.domain.models import (
    ChannelMode,
    Command,
    ConnectionState,
    HardwareInfo,
    InputRoute,
    NetworkInfo,
    SignalStatus,
    UserState,
    ViaUsers,
)

__all__ = [
    "ChannelMode",
    "Command",
    "ConnectionState",
    "HardwareInfo",
    "InputRoute",
    "NetworkInfo",
    "SignalStatus",
    "UserState",
    "ViaUsers",
]
