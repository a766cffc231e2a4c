import os
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from nextmeet.exceptions import ConfigurationError

load_dotenv()

AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_API_URL = "https://www.googleapis.com/calendar/v3"

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events.readonly",
    "https://www.googleapis.com/auth/calendar.readonly",
]

LOCALTIME_PATH = Path("/etc/localtime")


def _local_timezone() -> tzinfo:
    """Return the system zone with its DST rules, or the current fixed offset."""
    try:
        with LOCALTIME_PATH.open("rb") as f:
            return ZoneInfo.from_file(f, key="localtime")
    except (OSError, ValueError):
        return datetime.now().astimezone().tzinfo


@dataclass
class Settings:
    client_id: str
    client_secret: str
    email: str  # Calendar id of the account being watched
    token_path: Path
    timezone: tzinfo
    # Loopback redirect listener
    auth_host: str
    auth_port: int
    auth_timeout: float | None  # None blocks until the browser calls back
    http_timeout: float

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.auth_host}:{self.auth_port}/auth"

    @classmethod
    def from_env(cls) -> "Settings":
        client_id = os.environ.get("NEXTMEET_CLIENT_ID")
        client_secret = os.environ.get("NEXTMEET_CLIENT_SECRET")
        email = os.environ.get("NEXTMEET_EMAIL")

        missing = [
            name
            for name, value in (
                ("NEXTMEET_CLIENT_ID", client_id),
                ("NEXTMEET_CLIENT_SECRET", client_secret),
                ("NEXTMEET_EMAIL", email),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

        token_path = Path(os.environ.get("NEXTMEET_TOKEN_PATH", "~/.nextmeet")).expanduser()

        # Fall back to the system zone so "today" matches the user's clock
        tz_name = os.environ.get("TIMEZONE")
        try:
            timezone = ZoneInfo(tz_name) if tz_name else _local_timezone()
        except ZoneInfoNotFoundError as e:
            raise ConfigurationError(f"Unknown timezone: {tz_name}") from e

        try:
            auth_port = int(os.environ.get("NEXTMEET_AUTH_PORT", "35426"))
            raw_timeout = os.environ.get("NEXTMEET_AUTH_TIMEOUT")
            auth_timeout = float(raw_timeout) if raw_timeout else None
            http_timeout = float(os.environ.get("NEXTMEET_HTTP_TIMEOUT", "15"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            email=email,
            token_path=token_path,
            timezone=timezone,
            auth_host="127.0.0.1",
            auth_port=auth_port,
            auth_timeout=auth_timeout,
            http_timeout=http_timeout,
        )
