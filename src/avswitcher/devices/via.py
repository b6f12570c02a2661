"""VIA collaboration endpoint operations.

Queries the VIA's connection state, volume, hardware details and the
presence of logged-in users. Replies are '|' delimited; hardware and
network fields use 'KEY:value' tokens.
"""

from __future__ import annotations

import logging

from avswitcher.channel.channel import CommandChannel
from avswitcher.domain.models import (
    ChannelMode,
    Command,
    HardwareInfo,
    NetworkInfo,
    UserState,
    ViaUsers,
)
from avswitcher.errors import ProtocolError, TransportError

logger = logging.getLogger(__name__)


def parse_response(resp: str, delimiter: str = "|") -> str:
    """Return the field after the first delimiter, or the whole reply."""
    pieces = resp.split(delimiter)
    msg = pieces[1] if len(pieces) >= 2 else pieces[0]
    return msg.strip("\r\n")


def is_acknowledged(resp: str, verb: str) -> bool:
    """True for a "Successful" reply or a non-error answer echoing verb."""
    if "Successful" in resp:
        return True
    echoed, sep, value = resp.strip("\r\n ").partition("|")
    if echoed != verb or not sep or not value:
        return False
    return not value.lower().startswith("error")


def parse_volume(resp: str, address: str = "") -> int:
    """Parse 'Vol|Get|NN' into NN."""
    token = resp.strip("\r\n ").split("|")[-1]
    try:
        return int(token)
    except ValueError as e:
        raise ProtocolError(
            f"Unexpected volume response from {address or 'VIA'}: {resp.strip()!r}",
            address=address,
        ) from e


def parse_ip_info(resp: str) -> tuple[str, NetworkInfo]:
    """Parse an IpInfo reply into (hostname, network info)."""
    hostname = ""
    network = NetworkInfo()
    for item in resp.split("|"):
        if ":" not in item:
            continue
        key, value = item.split(":", 1)
        value = value.strip("\r\n")
        if "IP" in key:
            network.ip_address = value
        elif "GAT" in key:
            network.gateway = value
        elif "DNS" in key:
            network.dns = [value]
        elif "Host" in key:
            hostname = value
    return hostname, network


def parse_users(resp: str, address: str = "") -> ViaUsers:
    """Sort a PList reply's '#'-separated 'nickname_state' items by state."""
    users = ViaUsers()
    full_list = resp.strip("\r\n").split("|")
    if len(full_list) < 4:
        raise ProtocolError(
            f"Unexpected user list from {address or 'VIA'}: {resp.strip()!r}",
            address=address,
        )

    for user in full_list[3].split("#"):
        if not user:
            continue
        parts = user.split("_")
        if len(parts) < 2:
            continue
        nickname, state = parts[0], parts[1].strip()
        if state == UserState.INACTIVE.value:
            users.inactive_users.append(nickname)
        elif state == UserState.ACTIVE.value:
            users.active_users.append(nickname)
        elif state == UserState.WAITING.value:
            users.users_waiting.append(nickname)
    return users


class ViaClient:
    """Operations on a VIA collaboration endpoint."""

    def __init__(
        self,
        channel: CommandChannel,
        mode: ChannelMode = ChannelMode.TRANSIENT,
        read_welcome: bool = True,
    ) -> None:
        self._channel = channel
        self._mode = mode
        self._read_welcome = read_welcome

    async def _send(self, address: str, command: Command) -> str:
        return await self._channel.execute(address, command, self._mode, self._read_welcome)

    async def is_connected(self, address: str) -> bool:
        """Probe the VIA; a transport failure means not connected."""
        logger.info("Getting connected status of %s", address)
        try:
            resp = await self._send(address, Command(verb="GetSerialNo"))
        except TransportError as e:
            logger.info("VIA %s is not reachable: %s", address, e)
            return False
        if not is_acknowledged(resp, "GetSerialNo"):
            logger.info("VIA %s did not acknowledge: %r", address, resp.strip())
            return False
        return True

    async def get_volume(self, address: str) -> int:
        logger.info("Sending command to get VIA volume to %s", address)
        resp = await self._send(address, Command(verb="Vol", param1="Get"))
        return parse_volume(resp, address)

    async def get_hardware_info(self, address: str) -> HardwareInfo:
        """Collect serial number, firmware, MAC and IP details."""
        logger.info("Getting hardware info of %s", address)

        serial = await self._send(address, Command(verb="GetSerialNo"))
        version = await self._send(address, Command(verb="GetVersion"))
        mac_addr = await self._send(address, Command(verb="GetMacAdd"))
        ip_info = await self._send(address, Command(verb="IpInfo"))

        hostname, network = parse_ip_info(ip_info)
        network.mac_address = parse_response(mac_addr)
        return HardwareInfo(
            hostname=hostname,
            serial_number=parse_response(serial),
            firmware_version=parse_response(version),
            network_info=network,
        )

    async def get_status_of_users(self, address: str) -> ViaUsers:
        logger.info("Sending command to get VIA users info to %s", address)
        resp = await self._send(address, Command(verb="PList", param1="all", param2="4"))
        return parse_users(resp, address)
