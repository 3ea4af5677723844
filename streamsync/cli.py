"""Command line for connecting to Twitch and setting the stream title and category."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .twitch import TwitchError, TwitchProvider

log = logging.getLogger(__name__)


def apply_stream_info(
    provider: TwitchProvider, title: str, category: str = "", use_twitch: bool = True
) -> list[str]:
    """Push title and category to every selected, connected platform.

    Returns the names of the platforms that were updated; raises ValueError
    for an empty title and TwitchError when the update fails.
    """
    title = title.strip()
    category = category.strip()
    if not title:
        raise ValueError("Stream title is empty")
    updated = []
    if use_twitch and provider.is_connected():
        provider.update_channel(title, category)
        updated.append("Twitch")
    return updated


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamsync", description="Sync stream title and category to Twitch."
    )
    parser.add_argument("--config-dir", help="directory holding credentials and tokens")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("status", help="show the connection state")
    connect = commands.add_parser("connect", help="authorize with Twitch in the browser")
    connect.add_argument("--timeout", type=float, default=300.0)
    commands.add_parser("disconnect", help="forget the stored Twitch session")
    apply = commands.add_parser("apply", help="update the stream title and category")
    apply.add_argument("--title", required=True)
    apply.add_argument("--category", default="", help="game or category name")
    apply.add_argument(
        "--no-twitch", dest="use_twitch", action="store_false", help="skip Twitch"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    provider = TwitchProvider(args.config_dir)
    provider.try_restore()

    if args.command == "status":
        if provider.is_connected():
            print(f"Twitch: connected as {provider.display_name}")
        else:
            print("Twitch: not connected")
        return 0

    if args.command == "connect":
        if provider.is_connected():
            print(f"Twitch: already connected as {provider.display_name}")
            return 0
        try:
            provider.connect(args.timeout)
        except TwitchError as exc:
            print(f"Authorization failed: {exc}", file=sys.stderr)
            return 1
        print(f"Twitch: connected as {provider.display_name}")
        return 0

    if args.command == "disconnect":
        provider.disconnect()
        print("Twitch: disconnected")
        return 0

    try:
        updated = apply_stream_info(provider, args.title, args.category, args.use_twitch)
    except ValueError as exc:
        print(f"Warning: {exc}", file=sys.stderr)
        return 2
    except TwitchError as exc:
        print(f"Failed to apply to Twitch: {exc}", file=sys.stderr)
        return 1
    if not updated:
        print("No connected platforms to update.")
        return 1
    print(f"Updated: {', '.join(updated)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())