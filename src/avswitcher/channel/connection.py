"""TCP connection to a single device.

Wraps an asyncio stream pair together with the address it was dialed
for, so the codec and the pool can report failures against the device.
"""

from __future__ import annotations

import asyncio
import logging

from avswitcher.errors import DeviceTimeoutError, TransportError

logger = logging.getLogger(__name__)


class DeviceConnection:
    """An open stream pair to a device."""

    def __init__(
        self,
        address: str,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        self.address = address
        self.reader = reader
        self.writer = writer

    @property
    def is_closing(self) -> bool:
        return self.writer.is_closing()

    async def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self.writer.is_closing():
            return
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError as e:
            logger.debug("Error while closing connection to %s: %s", self.address, e)


async def dial(address: str, port: int, timeout: float = 5.0) -> DeviceConnection:
    """Open a TCP connection to address:port within the given timeout.

    Raises:
        DeviceTimeoutError: If the connection is not established in time.
        TransportError: If the address is unusable or the device refuses.
    """
    logger.info("Opening telnet connection with %s:%d", address, port)
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(address, port), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise DeviceTimeoutError(
            f"Timed out connecting to {address}:{port}", address=address
        ) from e
    except (OSError, UnicodeError) as e:
        raise TransportError(
            f"Failed to connect to {address}:{port}: {e}", address=address
        ) from e
    return DeviceConnection(address, reader, writer)
