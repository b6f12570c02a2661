"""Command-line interface for avswitcher.

Runs the HTTP control service, or sends a single raw command to a device
for bench testing.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="avswitcher",
        description="HTTP control service for legacy AV hardware",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/avswitcher.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Start the HTTP control service")

    send_parser = subparsers.add_parser("send", help="Send one raw command to a device")
    send_parser.add_argument("address", help="Device host")
    send_parser.add_argument("verb", help="Command verb, e.g. Route")
    send_parser.add_argument("params", nargs="*", help="Up to three parameters")
    send_parser.add_argument(
        "--welcome", action="store_true",
        help="Read and discard the welcome banner before sending",
    )
    send_parser.add_argument(
        "--pooled", action="store_true",
        help="Send over a pooled connection instead of a one-shot one",
    )
    send_parser.add_argument(
        "--port", type=int, default=None,
        help="Device TCP port (default: channel.device_port from config)",
    )

    args = parser.parse_args(argv)
    if args.command == "send" and len(args.params) > 3:
        parser.error("send accepts at most three parameters")
    return args


async def _send(settings, args) -> str:
    """Send one command and return the reply."""
    from avswitcher.channel.channel import CommandChannel
    from avswitcher.domain.models import ChannelMode, Command

    params = list(args.params) + [""] * (3 - len(args.params))
    command = Command(verb=args.verb, param1=params[0], param2=params[1], param3=params[2])

    mode = ChannelMode.POOLED if args.pooled else ChannelMode.TRANSIENT
    channel = CommandChannel.from_config(settings.channel, port=args.port)
    async with channel:
        return await channel.execute(
            args.address, command, mode, read_welcome=args.welcome
        )


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the avswitcher CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from avswitcher.config.settings import load_settings
    from avswitcher.errors import SwitcherError
    from avswitcher.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        logger.info("Starting control service on %s:%d", settings.server.host, settings.server.port)
        from avswitcher.api.server import main as serve
        serve(settings)

    elif args.command == "send":
        try:
            reply = asyncio.run(_send(settings, args))
        except SwitcherError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(reply.rstrip("\r\n"))


if __name__ == "__main__":
    main()
