"""Telnet command channel.

Executes exactly one command against one device address and returns the
device's reply. Two lifecycles are supported:

    TRANSIENT -- dial, optionally read and discard the welcome banner,
                 send, read, always close.
    POOLED    -- lease the pooled connection for the address, send, read,
                 refresh its idle clock; invalidate it on I/O failure so
                 the next call dials a clean socket.

No retries are attempted; failures surface to the caller unchanged.
"""

from __future__ import annotations

import asyncio
import logging

from avswitcher.channel.codec import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_RESPONSE_TIMEOUT,
    DEFAULT_WELCOME_TIMEOUT,
    RESPONSE_DELIMITER,
    WELCOME_DELIMITER,
    read_until,
    write_command,
)
from avswitcher.channel.connection import DeviceConnection, dial
from avswitcher.channel.evictor import IdleEvictor
from avswitcher.channel.pool import ConnectionPool
from avswitcher.config.settings import ChannelConfig
from avswitcher.domain.models import ChannelMode, Command
from avswitcher.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_PORT = 5000


class CommandChannel:
    """Sends commands to devices over transient or pooled connections.

    Owns the connection pool and its idle evictor. Call ``start()`` once
    the event loop is running and ``close()`` at shutdown, or use it as
    an async context manager.
    """

    def __init__(
        self,
        port: int = DEFAULT_DEVICE_PORT,
        connect_timeout: float = 5.0,
        welcome_timeout: float = DEFAULT_WELCOME_TIMEOUT,
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        idle_timeout: float = 10.0,
        sweep_interval: float = 1.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._port = port
        self._connect_timeout = connect_timeout
        self._welcome_timeout = welcome_timeout
        self._response_timeout = response_timeout
        self._chunk_size = chunk_size
        self._pool = ConnectionPool(self._dial)
        self._evictor = IdleEvictor(
            self._pool, idle_timeout=idle_timeout, sweep_interval=sweep_interval
        )

    @classmethod
    def from_config(cls, config: ChannelConfig, port: int | None = None) -> CommandChannel:
        return cls(
            port=port if port is not None else config.device_port,
            connect_timeout=config.connect_timeout,
            welcome_timeout=config.welcome_timeout,
            response_timeout=config.response_timeout,
            idle_timeout=config.idle_timeout,
            sweep_interval=config.sweep_interval,
            chunk_size=config.read_chunk_size,
        )

    @property
    def port(self) -> int:
        return self._port

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @property
    def evictor(self) -> IdleEvictor:
        return self._evictor

    async def _dial(self, address: str) -> DeviceConnection:
        return await dial(address, self._port, timeout=self._connect_timeout)

    def start(self) -> None:
        self._evictor.start()

    async def close(self) -> None:
        await self._evictor.stop()
        await self._pool.close()

    async def execute(
        self,
        address: str,
        command: Command,
        mode: ChannelMode = ChannelMode.POOLED,
        read_welcome: bool = False,
    ) -> str:
        """Send one command to address and return the device's reply.

        Args:
            address: Device host.
            command: The command to send.
            mode: Connection lifecycle for this exchange.
            read_welcome: Read and discard a welcome banner first. Only
                          meaningful in TRANSIENT mode, where each call
                          sees a freshly dialed connection.

        Raises:
            TransportError: Dial, write or read failure (DeviceTimeoutError
                            when the read deadline passes).
        """
        if mode is ChannelMode.TRANSIENT:
            resp = await self._execute_transient(address, command, read_welcome)
        else:
            resp = await self._execute_pooled(address, command)
        logger.debug("Response from %s: %r", address, resp)
        return resp

    async def _execute_transient(
        self, address: str, command: Command, read_welcome: bool
    ) -> str:
        conn = await self._dial(address)
        try:
            if read_welcome:
                logger.debug("Reading welcome message from %s", address)
                await read_until(
                    conn, WELCOME_DELIMITER, self._welcome_timeout, self._chunk_size
                )
            return await self._exchange(conn, command)
        finally:
            await conn.close()
            logger.debug("Closed transient connection to %s", address)

    async def _execute_pooled(self, address: str, command: Command) -> str:
        async with self._pool.acquire(address) as lease:
            try:
                resp = await self._exchange(lease.connection, command)
            except (TransportError, asyncio.CancelledError):
                await lease.invalidate()
                raise
            lease.touch()
            return resp

    async def _exchange(self, conn: DeviceConnection, command: Command) -> str:
        await write_command(conn, command)
        data = await read_until(
            conn, RESPONSE_DELIMITER, self._response_timeout, self._chunk_size
        )
        return data.decode("ascii", errors="replace")

    async def __aenter__(self) -> CommandChannel:
        self.start()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()
