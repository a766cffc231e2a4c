import argparse
import asyncio
import logging
import sys

from nextmeet.config import Settings
from nextmeet.exceptions import NextMeetError
from nextmeet.serializers import MeetingRecord
from nextmeet.services.meetings import (
    refresh_tokens,
    retrieve,
    retrieve_all,
    retrieve_with_tokens,
    today_json,
)
from nextmeet.services.tokens import TokenManager
from nextmeet.utils import format_meeting

logger = logging.getLogger(__name__)

NO_MEETING_MESSAGE = "No upcoming meetings"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nextmeet",
        description="Show the next meeting on today's Google Calendar and its conferencing link.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-m", "--link", action="store_true", help="print only the next meeting's link")
    mode.add_argument("-j", "--json", action="store_true", help="print today's raw events JSON")
    mode.add_argument(
        "-mf", "--machine-full", action="store_true", help="print the next meeting as a JSON record"
    )
    mode.add_argument(
        "-al", "--additional-links", action="store_true", help="print links found in the next meeting's description"
    )
    mode.add_argument("-a", "--all", action="store_true", help="list all of today's accepted meetings")
    mode.add_argument("--login", action="store_true", help="authorize again and save new tokens")
    parser.add_argument("-d", "--debug", action="store_true", help="echo the raw calendar response")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


async def _print_json(settings: Settings, manager: TokenManager) -> int:
    # Errors in this mode go to stdout
    try:
        print(await today_json(settings, manager))
    except NextMeetError as e:
        print(f"Error: {e}")
        return 1
    return 0


async def _print_next_without_login(settings: Settings, manager: TokenManager, links_only: bool) -> int:
    """Machine-facing modes: never start an interactive login."""
    try:
        tokens = await refresh_tokens(manager)
    except NextMeetError as e:
        logger.debug(f"Token refresh failed: {e}")
        print("Error: Could not refresh tokens", file=sys.stderr)
        return 1

    meeting = await retrieve_with_tokens(settings, tokens)
    if meeting is None:
        print("")
    elif links_only:
        print(" ".join(meeting.get_other_links()))
    else:
        print(MeetingRecord.from_meeting(meeting, settings.timezone).to_json())
    return 0


async def run(args: argparse.Namespace, settings: Settings) -> int:
    manager = TokenManager(settings)

    if args.json:
        return await _print_json(settings, manager)

    if args.machine_full or args.additional_links:
        return await _print_next_without_login(settings, manager, links_only=args.additional_links)

    if args.login:
        await asyncio.to_thread(manager.login)
        print("Authorization successful, token saved.")
        return 0

    if args.all:
        for meeting in await retrieve_all(settings, manager):
            print(f"{format_meeting(meeting, settings.timezone)}\n")
        return 0

    meeting = await retrieve(settings, manager, debug=args.debug)

    if args.link:
        link = meeting.get_link() if meeting else None
        if not link:
            return 1
        print(link)
        return 0

    if meeting is None:
        print(NO_MEETING_MESSAGE)
    else:
        print(format_meeting(meeting, settings.timezone))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = Settings.from_env()
        return asyncio.run(run(args, settings))
    except NextMeetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
