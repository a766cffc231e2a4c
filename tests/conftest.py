"""
Pytest configuration and shared fixtures for nextmeet tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from nextmeet.config import Settings
from nextmeet.models import Attendee, EventTime, Meeting
from nextmeet.store import CredentialStore

NOW = datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temporary credential file, in UTC."""
    return Settings(
        client_id="some_client_id",
        client_secret="client_secret",
        email="my-email@example.org",
        token_path=tmp_path / ".nextmeet",
        timezone=timezone.utc,
        auth_host="127.0.0.1",
        auth_port=35426,
        auth_timeout=5,
        http_timeout=5,
    )


@pytest.fixture
def store(settings):
    return CredentialStore(settings.token_path)


@pytest.fixture
def now():
    return NOW


def make_meeting(
    summary="Standup",
    start_offset=timedelta(minutes=30),
    duration=timedelta(minutes=30),
    link="https://meet.google.com/abc-defg-hij",
    description=None,
    response_status="accepted",
    now=NOW,
) -> Meeting:
    """Build a meeting relative to ``now``; pass ``start_offset=None`` for an all-day event."""
    if start_offset is None:
        start = EventTime(date=now.date().isoformat())
        end = EventTime(date=(now.date() + timedelta(days=1)).isoformat())
    else:
        start = EventTime(date_time=(now + start_offset).isoformat())
        end = EventTime(date_time=(now + start_offset + duration).isoformat())

    attendees = []
    if response_status is not None:
        attendees.append(Attendee(response_status=response_status, is_self=True))

    return Meeting(
        summary=summary,
        start=start,
        end=end,
        conferencing_link=link,
        description=description,
        attendees=attendees,
    )
