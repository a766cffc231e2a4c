"""Pydantic models for credential state and Google Calendar events."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

_GATHER_LINK = re.compile(r'https://app.gather.town[^\s"]*')
_ZOOM_LINK = re.compile(r'https://[^\s"]*zoom.us[^\s"]*')
_HREF = re.compile(r'href="([^"]+)')


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str | None = None


class Attendee(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    response_status: str = Field(alias="responseStatus")
    is_self: bool = Field(default=False, alias="self")


class EventTime(BaseModel):
    """Start or end of an event. All-day events only carry a ``date``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    date_time: str | None = Field(default=None, alias="dateTime")
    date: str | None = None

    def instant(self) -> datetime | None:
        """Parse ``dateTime`` into an aware datetime, or None."""
        if not self.date_time:
            return None
        try:
            parsed = datetime.fromisoformat(self.date_time)
        except ValueError:
            return None
        # RFC3339 always carries an offset; a naive value is not an instant
        if parsed.tzinfo is None:
            return None
        return parsed


class Meeting(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    summary: str | None = None
    start: EventTime | None = None
    end: EventTime | None = None
    conferencing_link: str | None = Field(default=None, alias="hangoutLink")
    description: str | None = None
    attendees: list[Attendee] = Field(default_factory=list)

    def start_time(self) -> datetime | None:
        return self.start.instant() if self.start else None

    def end_time(self) -> datetime | None:
        return self.end.instant() if self.end else None

    def accepted(self) -> bool:
        """True when our own attendee entry has accepted the invitation."""
        return any(a.is_self and a.response_status == "accepted" for a in self.attendees)

    def get_link(self) -> str | None:
        """Resolve the conferencing link.

        Priority: gather.town URL in the description, then a zoom.us URL in
        the description, then the native ``hangoutLink`` field.
        """
        if self.description:
            for pattern in (_GATHER_LINK, _ZOOM_LINK):
                match = pattern.search(self.description)
                if match:
                    return match.group(0)
        return self.conferencing_link

    def get_other_links(self) -> list[str]:
        """All ``href`` targets in the description, in order of appearance."""
        if not self.description:
            return []
        return _HREF.findall(self.description)

    def __str__(self) -> str:
        from nextmeet.utils import format_meeting

        return format_meeting(self)


class EventList(BaseModel):
    """Body of ``GET /calendars/{id}/events``."""

    items: list[Meeting]
