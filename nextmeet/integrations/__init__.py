from .calendar import fetch_today, fetch_today_raw
from .oauth import login, refresh

__all__ = [
    "fetch_today",
    "fetch_today_raw",
    "login",
    "refresh",
]
