"""Token lifecycle: load saved tokens, refresh them, fall back to a fresh login.

The chain runs once per invocation and never loops:

    Unknown -> Loaded | Absent
    Loaded  -> Refreshed | NeedsLogin
    Absent, NeedsLogin -> Authorized | Failed

Every access token handed out has just been refreshed or issued, since expiry
is not tracked locally.
"""

import logging

from nextmeet.config import Settings
from nextmeet.exceptions import CredentialIOError, TokenExchangeError
from nextmeet.integrations import oauth
from nextmeet.models import TokenPair
from nextmeet.store import CredentialStore

logger = logging.getLogger(__name__)


class TokenManager:
    def __init__(self, settings: Settings, store: CredentialStore | None = None):
        self.settings = settings
        self.store = store or CredentialStore(settings.token_path)

    def refresh_saved_tokens(self) -> TokenPair:
        """Load and refresh saved tokens without ever prompting for a login.

        Raises:
            CredentialIOError: Nothing usable is saved.
            TokenExchangeError: The saved refresh token was rejected.
        """
        tokens = self.store.load()
        return oauth.refresh(self.settings, self.store, tokens)

    def login(self) -> TokenPair:
        return oauth.login(self.settings, self.store)

    def obtain_valid_tokens(self) -> TokenPair:
        """Return a freshly refreshed or freshly issued token pair.

        Load and refresh failures fall back to the interactive login; errors
        raised by the login itself propagate.
        """
        try:
            return self.refresh_saved_tokens()
        except CredentialIOError as e:
            logger.info(f"No saved tokens ({e}), starting login")
        except TokenExchangeError as e:
            logger.info(f"Could not refresh saved tokens ({e}), starting login")

        return self.login()
