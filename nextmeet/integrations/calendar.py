"""Google Calendar events API, today's window only."""

import logging
from datetime import datetime, time, tzinfo
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from nextmeet.config import CALENDAR_API_URL, Settings
from nextmeet.exceptions import NetworkError, ParseError
from nextmeet.models import EventList, Meeting

logger = logging.getLogger(__name__)


def today_window(tz: tzinfo, now: datetime | None = None) -> tuple[str, str]:
    """RFC3339 bounds of the local day: 00:00:00 to 23:59:59 in ``tz``."""
    day = (now or datetime.now(tz)).astimezone(tz).date()
    start = datetime.combine(day, time(0, 0, 0), tzinfo=tz)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=tz)
    return start.isoformat(), end.isoformat()


def events_url(email: str) -> str:
    return f"{CALENDAR_API_URL}/calendars/{quote(email, safe='@')}/events"


async def fetch_today_raw(
    settings: Settings,
    access_token: str,
    now: datetime | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Fetch today's events and return the response body untouched.

    Recurring events are expanded into single instances and deleted events
    are left out.

    Raises:
        NetworkError: The request failed or returned an error status.
    """
    time_min, time_max = today_window(settings.timezone, now)
    params = {
        "timeMin": time_min,
        "timeMax": time_max,
        "singleEvents": "true",
        "showDeleted": "false",
    }
    headers = {"Authorization": f"Bearer {access_token}"}

    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout, transport=transport) as client:
            resp = await client.get(events_url(settings.email), params=params, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"Calendar API error: {e.response.status_code} {e.response.text[:200]}")
        raise NetworkError(f"Calendar API returned {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error(f"Calendar request failed: {e}")
        raise NetworkError(f"Failed to reach Google Calendar: {e}") from e

    return resp.text


def parse_events(body: str) -> list[Meeting]:
    """Decode an events list body.

    Raises:
        ParseError: The body is not a valid events list.
    """
    try:
        return EventList.model_validate_json(body).items
    except ValidationError as e:
        raise ParseError(f"Unexpected calendar response: {e.error_count()} validation errors") from e


async def fetch_today(
    settings: Settings,
    access_token: str,
    now: datetime | None = None,
    debug: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Meeting]:
    """Fetch today's events as meetings, in the order Google returned them.

    With ``debug`` the raw body is echoed to stdout first.
    """
    body = await fetch_today_raw(settings, access_token, now=now, transport=transport)
    if debug:
        print(body)

    meetings = parse_events(body)
    logger.debug(f"Fetched {len(meetings)} events")
    return meetings
