"""Machine-readable meeting output."""

from datetime import tzinfo

from pydantic import BaseModel, Field

from nextmeet.models import Meeting
from nextmeet.utils import format_date, format_time


class DateTimeOut(BaseModel):
    date: str
    time: str


class MeetingRecord(BaseModel):
    summary: str | None = None
    start: DateTimeOut | None = None
    end: DateTimeOut | None = None
    description: str | None = None
    conferencing_link: str | None = Field(default=None, serialization_alias="hangoutLink")

    @classmethod
    def from_meeting(cls, meeting: Meeting, tz: tzinfo | None = None) -> "MeetingRecord":
        def _split(dt):
            if not dt:
                return None
            return DateTimeOut(date=format_date(dt, tz), time=format_time(dt, tz))

        return cls(
            summary=meeting.summary,
            start=_split(meeting.start_time()),
            end=_split(meeting.end_time()),
            description=meeting.description,
            conferencing_link=meeting.conferencing_link,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
