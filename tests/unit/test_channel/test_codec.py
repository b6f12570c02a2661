"""Tests for command framing and delimiter-bounded reads."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from avswitcher.channel.codec import (
    LINE_FEED,
    WELCOME_DELIMITER,
    encode_command,
    read_until,
    write_command,
)
from avswitcher.channel.connection import DeviceConnection
from avswitcher.domain.models import Command
from avswitcher.errors import DeviceTimeoutError, InvalidArgumentError, TransportError


def _connection(reader: asyncio.StreamReader) -> DeviceConnection:
    writer = MagicMock()
    writer.drain = AsyncMock()
    return DeviceConnection("10.0.0.5", reader, writer)


class TestEncodeCommand:
    def test_space_joined_with_crlf(self) -> None:
        assert encode_command(Command(verb="Route", param1="3", param2="4")) == b"Route 3 4\r\n"

    def test_empty_params_skipped(self) -> None:
        assert encode_command(Command(verb="GetSerialNo")) == b"GetSerialNo\r\n"
        assert encode_command(Command(verb="PList", param1="all", param2="4")) == b"PList all 4\r\n"

    def test_non_ascii_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            encode_command(Command(verb="Route", param1="é"))


class TestWriteCommand:
    @pytest.mark.asyncio
    async def test_writes_and_drains(self) -> None:
        conn = _connection(asyncio.StreamReader())
        await write_command(conn, Command(verb="Lock", param1="1"))
        conn.writer.write.assert_called_once_with(b"Lock 1\r\n")
        conn.writer.drain.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_os_error_wrapped(self) -> None:
        conn = _connection(asyncio.StreamReader())
        conn.writer.drain.side_effect = ConnectionResetError("reset by peer")
        with pytest.raises(TransportError, match="reset by peer"):
            await write_command(conn, Command(verb="Lock", param1="1"))


class TestReadUntil:
    @pytest.mark.asyncio
    async def test_reads_to_delimiter_and_strips_nulls(self) -> None:
        reader = asyncio.StreamReader()
        reader.feed_data(b"Ro\x00ute|3\x00\x00\n")
        data = await read_until(_connection(reader), LINE_FEED, timeout=1.0)
        assert data == b"Route|3\n"

    @pytest.mark.asyncio
    async def test_accumulates_chunks(self) -> None:
        reader = asyncio.StreamReader()
        conn = _connection(reader)

        async def feed() -> None:
            reader.feed_data(b"Route")
            await asyncio.sleep(0.02)
            reader.feed_data(b"|Get|3\n")

        feeder = asyncio.create_task(feed())
        data = await read_until(conn, LINE_FEED, timeout=1.0, chunk_size=4)
        await feeder
        assert data == b"Route|Get|3\n"

    @pytest.mark.asyncio
    async def test_welcome_delimiter(self) -> None:
        reader = asyncio.StreamReader()
        reader.feed_data(b"Welcome to the switcher\r")
        data = await read_until(_connection(reader), WELCOME_DELIMITER, timeout=1.0)
        assert data == b"Welcome to the switcher\r"

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        reader = asyncio.StreamReader()
        reader.feed_data(b"partial")
        with pytest.raises(DeviceTimeoutError, match="timed out"):
            await read_until(_connection(reader), LINE_FEED, timeout=0.05)

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self) -> None:
        with pytest.raises(TransportError):
            await read_until(_connection(asyncio.StreamReader()), LINE_FEED, timeout=0.05)

    @pytest.mark.asyncio
    async def test_eof_raises(self) -> None:
        reader = asyncio.StreamReader()
        reader.feed_data(b"Route|")
        reader.feed_eof()
        with pytest.raises(TransportError, match="connection closed"):
            await read_until(_connection(reader), LINE_FEED, timeout=1.0)
