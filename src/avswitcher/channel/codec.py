"""Wire framing for the line-oriented device protocol.

Commands go out as ASCII fields joined by spaces and terminated by
CR LF. Replies are read in chunks up to a delimiter byte under a single
deadline; null padding some devices emit is removed before the reply is
handed back.
"""

from __future__ import annotations

import asyncio
import logging

from avswitcher.channel.connection import DeviceConnection
from avswitcher.domain.models import Command
from avswitcher.errors import DeviceTimeoutError, InvalidArgumentError, TransportError

logger = logging.getLogger(__name__)

CARRIAGE_RETURN = b"\r"
LINE_FEED = b"\n"
TERMINATOR = CARRIAGE_RETURN + LINE_FEED

# Welcome banners end with a bare CR, command replies with LF
WELCOME_DELIMITER = CARRIAGE_RETURN
RESPONSE_DELIMITER = LINE_FEED
DEFAULT_WELCOME_TIMEOUT = 3.0
DEFAULT_RESPONSE_TIMEOUT = 5.0
DEFAULT_CHUNK_SIZE = 128


def encode_command(command: Command) -> bytes:
    """Render a command as wire bytes, terminator included."""
    try:
        return command.render().encode("ascii") + TERMINATOR
    except UnicodeEncodeError as e:
        raise InvalidArgumentError(f"Command {command.render()!r} is not ASCII") from e


async def write_command(connection: DeviceConnection, command: Command) -> None:
    """Write one framed command and wait for it to drain."""
    data = encode_command(command)
    logger.debug("Sending command %r to %s", command.render(), connection.address)
    try:
        connection.writer.write(data)
        await connection.writer.drain()
    except OSError as e:
        raise TransportError(
            f"Error writing command to {connection.address}: {e}",
            address=connection.address,
        ) from e


async def read_until(
    connection: DeviceConnection,
    delimiter: bytes,
    timeout: float,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bytes:
    """Read chunks until one contains the delimiter, then strip null bytes.

    Args:
        connection: The connection to read from.
        delimiter: Single delimiter byte, e.g. b"\\n".
        timeout: Seconds allowed for the whole read, not per chunk.
        chunk_size: Maximum bytes requested per read.

    Raises:
        DeviceTimeoutError: If the deadline passes before the delimiter.
        TransportError: If the device closes the connection or I/O fails.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    buffer = bytearray()

    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise DeviceTimeoutError(
                f"Error reading response: timed out after {timeout}s waiting for "
                f"{delimiter!r} from {connection.address}",
                address=connection.address,
            )
        try:
            chunk = await asyncio.wait_for(connection.reader.read(chunk_size), remaining)
        except asyncio.TimeoutError as e:
            raise DeviceTimeoutError(
                f"Error reading response: timed out after {timeout}s waiting for "
                f"{delimiter!r} from {connection.address}",
                address=connection.address,
            ) from e
        except OSError as e:
            raise TransportError(
                f"Error reading response from {connection.address}: {e}",
                address=connection.address,
            ) from e

        if not chunk:
            raise TransportError(
                f"Error reading response: connection closed by {connection.address}",
                address=connection.address,
            )
        buffer.extend(chunk)
        if delimiter in chunk:
            break

    return bytes(buffer).replace(b"\x00", b"")
