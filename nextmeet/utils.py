from datetime import datetime, tzinfo

from nextmeet.models import Meeting


def format_time(dt: datetime | None, tz: tzinfo | None = None) -> str | None:
    """Format an instant as ``HH:MM`` in ``tz`` (system local zone when None)."""
    if not dt:
        return None
    return dt.astimezone(tz).strftime("%H:%M")


def format_date(dt: datetime | None, tz: tzinfo | None = None) -> str | None:
    """Format an instant as ``dd/mm/YYYY`` in ``tz``."""
    if not dt:
        return None
    return dt.astimezone(tz).strftime("%d/%m/%Y")


def format_meeting(meeting: Meeting, tz: tzinfo | None = None) -> str:
    """Render a meeting for the terminal.

    Missing fields are shown as placeholders instead of being left out:

        Standup
        09:30 - 09:45
        Description: Daily sync
        Meet: https://meet.google.com/abc-defg-hij
    """
    summary = meeting.summary or "No summary"
    start = format_time(meeting.start_time(), tz) or "No start time"
    end = format_time(meeting.end_time(), tz) or "No end time"
    description = meeting.description or "No description"
    link = meeting.get_link() or "not present"

    return f"{summary}\n{start} - {end}\nDescription: {description}\nMeet: {link}"
