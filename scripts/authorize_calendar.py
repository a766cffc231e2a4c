#!/usr/bin/env python3
"""Authorize Google Calendar access.

Run with: python scripts/authorize_calendar.py

Opens the consent page in your browser (or prints its URL) and waits for
Google to redirect back to the local listener, then saves the tokens.
"""
import logging
import sys

from nextmeet.config import Settings
from nextmeet.exceptions import NextMeetError
from nextmeet.services.tokens import TokenManager

if __name__ == "__main__":
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    print("Starting Google Calendar authorization...")
    print("Complete the consent in your browser; this waits until Google redirects back.\n")

    try:
        settings = Settings.from_env()
        TokenManager(settings).login()
    except NextMeetError as e:
        print(f"\n✗ Authorization failed: {e}")
        sys.exit(1)

    print(f"\n✓ Authorization successful! Token saved to {settings.token_path}.")
