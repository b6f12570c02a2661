"""Address-keyed pool of device connections.

At most one entry exists per address. A per-address asyncio.Lock is
held for the whole lease, so get-or-create and the write-then-read
exchange on a pooled socket are serialized per address while different
addresses proceed independently. The entry's state is the single source
of truth for whether its connection may be used: the idle sweep only
closes an entry under the same lock and marks it CLOSED, and a lease
never hands out an entry it has not seen OPEN.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from avswitcher.channel.connection import DeviceConnection
from avswitcher.domain.models import ConnectionState
from avswitcher.errors import TransportError

logger = logging.getLogger(__name__)

Dialer = Callable[[str], Awaitable[DeviceConnection]]


class ConnectionEntry:
    """Pool-owned record of one pooled connection."""

    def __init__(self, address: str) -> None:
        self.address = address
        self.connection: DeviceConnection | None = None
        self.state = ConnectionState.CONNECTING
        self.last_used = asyncio.get_running_loop().time()

    def touch(self) -> None:
        self.last_used = asyncio.get_running_loop().time()

    def idle_for(self) -> float:
        return asyncio.get_running_loop().time() - self.last_used


class Lease:
    """Exclusive use of a pooled connection, valid inside ``acquire``."""

    def __init__(self, pool: ConnectionPool, entry: ConnectionEntry, is_new: bool) -> None:
        self._pool = pool
        self._entry = entry
        self.is_new = is_new

    @property
    def connection(self) -> DeviceConnection:
        if self._entry.connection is None or self._entry.state is not ConnectionState.OPEN:
            raise TransportError(
                f"Connection to {self._entry.address} is not open",
                address=self._entry.address,
            )
        return self._entry.connection

    @property
    def state(self) -> ConnectionState:
        return self._entry.state

    def touch(self) -> None:
        """Refresh the idle clock after a successful exchange."""
        self._entry.touch()

    async def invalidate(self) -> None:
        """Close and remove the entry; the address lock is already held."""
        await self._pool._discard(self._entry, reason="invalidated")


class ConnectionPool:
    """Registry of live connections with get-or-create semantics.

    Usage::

        pool = ConnectionPool(dialer)
        async with pool.acquire("10.0.0.5") as lease:
            await write_command(lease.connection, command)
            ...
            lease.touch()
        await pool.close()
    """

    def __init__(self, dialer: Dialer) -> None:
        self._dialer = dialer
        self._entries: dict[str, ConnectionEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, address: object) -> bool:
        return address in self._entries

    @property
    def addresses(self) -> list[str]:
        return list(self._entries)

    @asynccontextmanager
    async def _locked(self, address: str) -> AsyncIterator[None]:
        """Hold the address lock, dropping it once nobody holds or awaits it.

        The lock map holds only live entries and addresses in use.
        """
        lock = self._locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[address] = lock
        self._lock_users[address] = self._lock_users.get(address, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[address] -= 1
            if not self._lock_users[address]:
                del self._lock_users[address]
                if address not in self._entries:
                    self._locks.pop(address, None)

    def _in_use(self, address: str) -> bool:
        return self._lock_users.get(address, 0) > 0

    @asynccontextmanager
    async def acquire(self, address: str) -> AsyncIterator[Lease]:
        """Lease the pooled connection for address, dialing if needed.

        The address lock is held until the block exits, so callers get
        exclusive use of the socket for one full exchange.

        Raises:
            TransportError: If a new connection has to be dialed and fails.
        """
        async with self._locked(address):
            entry = self._entries.get(address)
            is_new = False
            if entry is None or entry.state is not ConnectionState.OPEN:
                entry = await self._open_entry(address)
                is_new = True
            else:
                logger.debug("Using already open connection with %s", address)
            yield Lease(self, entry, is_new)

    async def _open_entry(self, address: str) -> ConnectionEntry:
        entry = ConnectionEntry(address)
        self._entries[address] = entry
        try:
            entry.connection = await self._dialer(address)
        except BaseException:
            entry.state = ConnectionState.CLOSED
            self._entries.pop(address, None)
            raise
        entry.state = ConnectionState.OPEN
        entry.touch()
        return entry

    async def _discard(self, entry: ConnectionEntry, reason: str) -> None:
        if entry.state is ConnectionState.CLOSED:
            return
        entry.state = ConnectionState.CLOSED
        if self._entries.get(entry.address) is entry:
            del self._entries[entry.address]
        logger.info("Closing connection to %s (%s)", entry.address, reason)
        if entry.connection is not None:
            await entry.connection.close()

    async def invalidate(self, address: str) -> bool:
        """Close and remove the entry for address, if any."""
        async with self._locked(address):
            entry = self._entries.get(address)
            if entry is None:
                return False
            await self._discard(entry, reason="invalidated")
            return True

    async def evict_idle(self, idle_timeout: float) -> list[str]:
        """Close every entry unused for at least idle_timeout seconds.

        Entries currently leased are skipped; they are refreshed when the
        lease completes.
        """
        evicted = []
        for address, entry in list(self._entries.items()):
            if entry.idle_for() < idle_timeout:
                continue
            if self._in_use(address):
                continue
            async with self._locked(address):
                if self._entries.get(address) is not entry:
                    continue
                if entry.idle_for() < idle_timeout:
                    continue
                await self._discard(entry, reason="idle")
                evicted.append(address)
        return evicted

    async def close(self) -> None:
        """Close all pooled connections."""
        for address in list(self._entries):
            await self.invalidate(address)
        logger.info("Connection pool closed")
