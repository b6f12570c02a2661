"""Shared test fixtures for the avswitcher test suite.

Provides a simulated device (an asyncio TCP server on localhost that
answers scripted commands and counts connections) and mock collaborators
for testing components in isolation.
"""

from __future__ import annotations

import asyncio
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from avswitcher.channel.channel import CommandChannel
from avswitcher.devices.via import ViaClient
from avswitcher.devices.videoswitcher import VideoSwitcher


# ---------------------------------------------------------------------------
# Simulated device
# ---------------------------------------------------------------------------


class FakeDevice:
    """Line-oriented device double listening on 127.0.0.1.

    ``replies`` maps a received command (terminator stripped) to the raw
    bytes to answer with, or is a callable returning them. Commands with
    no reply are read and left unanswered, so the client times out.

    Usage::

        async with FakeDevice({"Route 3 4": b"Route|3\\n"}) as device:
            channel = CommandChannel(port=device.port)
            ...
        assert device.connections == 1
    """

    def __init__(
        self,
        replies: dict[str, bytes] | Callable[[str], bytes | None] | None = None,
        banner: bytes | None = None,
        reply_delay: float = 0.0,
    ) -> None:
        self._replies = replies or {}
        self._banner = banner
        self._reply_delay = reply_delay
        self._server: asyncio.Server | None = None
        self._writers: list[asyncio.StreamWriter] = []
        self.host = "127.0.0.1"
        self.port = 0
        self.connections = 0
        self.disconnects = 0
        self.received: list[bytes] = []

    def _reply_for(self, command: str) -> bytes | None:
        if callable(self._replies):
            return self._replies(command)
        return self._replies.get(command)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connections += 1
        self._writers.append(writer)
        try:
            if self._banner is not None:
                writer.write(self._banner)
                await writer.drain()
            while True:
                try:
                    line = await reader.readuntil(b"\r\n")
                except (asyncio.IncompleteReadError, ConnectionError):
                    self.disconnects += 1
                    break
                self.received.append(line)
                reply = self._reply_for(line[:-2].decode("ascii"))
                if reply is None:
                    continue
                if self._reply_delay:
                    await asyncio.sleep(self._reply_delay)
                writer.write(reply)
                await writer.drain()
        finally:
            writer.close()

    async def drop_connections(self) -> None:
        """Close every server-side socket, simulating a device reboot."""
        for writer in self._writers:
            writer.close()
        self._writers.clear()
        await asyncio.sleep(0.01)

    async def start(self) -> FakeDevice:
        self._server = await asyncio.start_server(self._handle, self.host, 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self.drop_connections()
        await self._server.wait_closed()
        self._server = None

    async def __aenter__(self) -> FakeDevice:
        return await self.start()

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.stop()


@pytest.fixture
def fake_device() -> type[FakeDevice]:
    """The FakeDevice class, for use as ``async with fake_device(...)``."""
    return FakeDevice


# ---------------------------------------------------------------------------
# Mock Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_channel() -> AsyncMock:
    """A mock CommandChannel; configure execute.return_value per test."""
    return AsyncMock(spec=CommandChannel)


@pytest.fixture
def mock_switcher() -> AsyncMock:
    """A mock VideoSwitcher with all async methods stubbed."""
    return AsyncMock(spec=VideoSwitcher)


@pytest.fixture
def mock_via() -> AsyncMock:
    """A mock ViaClient with all async methods stubbed."""
    return AsyncMock(spec=ViaClient)
