"""Meeting selection over today's events, and the fetch pipelines the CLI runs."""

import asyncio
import logging
from datetime import datetime

from nextmeet.config import Settings
from nextmeet.integrations.calendar import fetch_today, fetch_today_raw
from nextmeet.models import Meeting, TokenPair
from nextmeet.services.tokens import TokenManager

logger = logging.getLogger(__name__)


def _is_listable(meeting: Meeting) -> bool:
    return meeting.accepted() and meeting.start_time() is not None and meeting.get_link() is not None


def next_meeting(meetings: list[Meeting], now: datetime) -> Meeting | None:
    """Pick the meeting whose start is closest to ``now``, before or after.

    Only accepted meetings with a link, a parseable start and an end strictly
    after ``now`` are considered, so a meeting already under way still
    qualifies. Ties go to the earliest in ``meetings``.
    """
    candidates = []
    for meeting in meetings:
        end = meeting.end_time()
        if _is_listable(meeting) and end is not None and end > now:
            candidates.append(meeting)

    if not candidates:
        return None
    return min(candidates, key=lambda m: abs((m.start_time() - now).total_seconds()))


def all_meetings(meetings: list[Meeting]) -> list[Meeting]:
    """Accepted meetings with a start and a link, sorted by start."""
    return sorted(filter(_is_listable, meetings), key=lambda m: m.start_time())


async def resolve_tokens(manager: TokenManager) -> TokenPair:
    # The login listener blocks its thread until the browser calls back
    return await asyncio.to_thread(manager.obtain_valid_tokens)


async def refresh_tokens(manager: TokenManager) -> TokenPair:
    return await asyncio.to_thread(manager.refresh_saved_tokens)


async def retrieve_with_tokens(
    settings: Settings,
    tokens: TokenPair,
    debug: bool = False,
    now: datetime | None = None,
) -> Meeting | None:
    now = now or datetime.now(settings.timezone)
    meetings = await fetch_today(settings, tokens.access_token, now=now, debug=debug)
    meeting = next_meeting(meetings, now)
    if meeting is None:
        logger.info(f"No upcoming meeting among {len(meetings)} events")
    return meeting


async def retrieve(settings: Settings, manager: TokenManager, debug: bool = False) -> Meeting | None:
    """Resolve tokens (logging in if needed) and return the next meeting."""
    tokens = await resolve_tokens(manager)
    return await retrieve_with_tokens(settings, tokens, debug=debug)


async def retrieve_all(settings: Settings, manager: TokenManager) -> list[Meeting]:
    tokens = await resolve_tokens(manager)
    meetings = await fetch_today(settings, tokens.access_token, now=datetime.now(settings.timezone))
    return all_meetings(meetings)


async def today_json(settings: Settings, manager: TokenManager) -> str:
    """Raw provider JSON for today's window."""
    tokens = await resolve_tokens(manager)
    return await fetch_today_raw(settings, tokens.access_token, now=datetime.now(settings.timezone))
