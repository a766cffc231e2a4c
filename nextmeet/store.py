"""Credential file persistence.

A single JSON document ``{"access_token": ..., "refresh_token": ...}`` at a
fixed per-user path. There is no locking: concurrent invocations that both
save tokens race, and the last writer wins.
"""

import logging
from pathlib import Path

from nextmeet.exceptions import CredentialIOError
from nextmeet.models import TokenPair

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, path: Path):
        self.path = path

    def load(self) -> TokenPair:
        """Read the saved token pair.

        Raises:
            CredentialIOError: The file is missing or is not a valid token pair.
        """
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise CredentialIOError(f"Credential file not found: {self.path}") from e

        try:
            tokens = TokenPair.model_validate_json(raw)
        except ValueError as e:
            # Covers ValidationError and undecodable bytes
            raise CredentialIOError(f"Failed to parse credential file: {self.path}") from e

        logger.debug(f"Loaded tokens from {self.path}")
        return tokens

    def save(self, tokens: TokenPair) -> None:
        """Write the token pair, replacing any previous one."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Restrict the file before the refresh token is written to it
            self.path.touch(mode=0o600, exist_ok=True)
            self.path.chmod(0o600)
            self.path.write_text(tokens.model_dump_json())
        except OSError as e:
            raise CredentialIOError(f"Error saving tokens to {self.path}: {e}") from e

        logger.debug(f"Saved tokens to {self.path}")
