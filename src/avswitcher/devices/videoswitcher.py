"""Matrix video switcher operations.

Each operation validates and translates its port indices to the
switcher's 1-based numbering, executes one command through the
CommandChannel and parses the '|' delimited reply. Indices returned by
the device are translated back to 0-based before they leave this module.

Wire commands::

    Route <in> <out>      -> Route|<in>
    Route Get <out>       -> Route|Get|<in>
    Lock 1 | Lock 0       -> Lock|<state>
    Signal <port>         -> Signal|<payload>
"""

from __future__ import annotations

import logging

from avswitcher.channel.channel import CommandChannel
from avswitcher.channel.indexing import to_device_index, to_external_index
from avswitcher.domain.models import ChannelMode, Command, InputRoute, SignalStatus
from avswitcher.errors import InvalidArgumentError, ProtocolError

logger = logging.getLogger(__name__)

ROUTE = "Route"
LOCK = "Lock"
SIGNAL = "Signal"


def split_reply(response: str, verb: str, address: str = "") -> list[str]:
    """Split a reply on '|' and check that it acknowledges verb."""
    text = response.strip("\r\n ")
    pieces = text.split("|")
    if len(pieces) < 2:
        raise ProtocolError(
            f"Unexpected response from {address or 'device'}: {text!r} has no '|' delimiter",
            address=address,
        )
    if pieces[0].strip() != verb:
        raise ProtocolError(
            f"Unexpected response from {address or 'device'}: expected {verb!r}, got {text!r}",
            address=address,
        )
    return [p.strip() for p in pieces]


def parse_index_reply(response: str, verb: str, address: str = "") -> int:
    """Return the 0-based index carried in the last token of a reply."""
    token = split_reply(response, verb, address)[-1]
    if ":" in token:
        token = token.rsplit(":", 1)[1]
    try:
        return to_external_index(token)
    except InvalidArgumentError as e:
        raise ProtocolError(
            f"Unexpected response from {address or 'device'}: invalid port index in {response.strip()!r}",
            address=address,
        ) from e


def _validated_device_index(value: str, name: str) -> int:
    try:
        return to_device_index(value)
    except InvalidArgumentError as e:
        raise InvalidArgumentError(
            f"Error! {name} parameter {value} is not valid! It must be zero or greater"
        ) from e


class VideoSwitcher:
    """Operations on a matrix video switcher reachable through a channel."""

    def __init__(self, channel: CommandChannel) -> None:
        self._channel = channel

    async def switch_input(
        self,
        address: str,
        input: str,
        output: str,
        mode: ChannelMode = ChannelMode.POOLED,
        read_welcome: bool = False,
    ) -> InputRoute:
        """Route input to output; indices are 0-based strings."""
        i = _validated_device_index(input, "Input")
        o = _validated_device_index(output, "Output")
        logger.debug("Routing %s to %s on %s (device ports %d -> %d)", input, output, address, i, o)

        command = Command(verb=ROUTE, param1=str(i), param2=str(o))
        resp = await self._channel.execute(address, command, mode, read_welcome)

        routed = parse_index_reply(resp, ROUTE, address)
        logger.info("Routed input %d to output %s on %s", routed, output, address)
        return InputRoute(input=f"{routed}:{int(output)}", output=str(int(output)))

    async def get_current_input_by_output_port(
        self,
        address: str,
        port: str,
        mode: ChannelMode = ChannelMode.POOLED,
        read_welcome: bool = False,
    ) -> InputRoute:
        """Return the input currently routed to output port."""
        p = _validated_device_index(port, "Port")
        logger.debug("Getting input for output port %s on %s", port, address)

        command = Command(verb=ROUTE, param1="Get", param2=str(p))
        resp = await self._channel.execute(address, command, mode, read_welcome)

        current = parse_index_reply(resp, ROUTE, address)
        return InputRoute(input=f"{current}:{int(port)}")

    async def set_front_lock(
        self,
        address: str,
        locked: bool,
        mode: ChannelMode = ChannelMode.POOLED,
        read_welcome: bool = False,
    ) -> bool:
        """Lock or unlock the front-panel buttons."""
        logger.debug("Setting front button lock status to %s on %s", locked, address)
        command = Command(verb=LOCK, param1="1" if locked else "0")
        resp = await self._channel.execute(address, command, mode, read_welcome)
        split_reply(resp, LOCK, address)
        return True

    async def get_active_signal_by_port(
        self,
        address: str,
        port: str,
        mode: ChannelMode = ChannelMode.TRANSIENT,
        read_welcome: bool = True,
    ) -> SignalStatus:
        """Return the raw signal-detect payload for an input port."""
        p = _validated_device_index(port, "Port")
        command = Command(verb=SIGNAL, param1=str(p))
        resp = await self._channel.execute(address, command, mode, read_welcome)

        text = resp.strip("\r\n ")
        split_reply(text, SIGNAL, address)
        payload = text.split("|", 1)[1].strip()
        return SignalStatus(port=str(int(port)), signal=payload)
