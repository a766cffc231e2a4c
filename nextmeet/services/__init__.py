from .meetings import all_meetings, next_meeting
from .tokens import TokenManager

__all__ = ["TokenManager", "all_meetings", "next_meeting"]
