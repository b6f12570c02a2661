"""Telnet command channel for avswitcher.

Owns device connections, frames commands and parses replies, and
translates port indices between the service and the device.

Public API:
    CommandChannel -- Executes one command in transient or pooled mode
    ConnectionPool -- Address-keyed registry of pooled connections
    IdleEvictor -- Periodic sweep closing idle pooled connections
"""

from avswitcher.channel.channel import CommandChannel
from avswitcher.channel.evictor import IdleEvictor
from avswitcher.channel.pool import ConnectionPool

__all__ = ["CommandChannel", "ConnectionPool", "IdleEvictor"]
