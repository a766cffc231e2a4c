"""Google OAuth2 for an installed app: PKCE login through a loopback listener, and refresh.

The login is interactive. The consent URL is opened in the default browser and
a listener on ``settings.redirect_uri`` waits for Google to redirect back with
the authorization code. That wait blocks the calling thread until the browser
round-trip completes (or ``settings.auth_timeout`` elapses, when set).
"""

import logging
import socket
import sys
import webbrowser
from urllib.parse import parse_qs, urlsplit

import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from nextmeet.config import AUTH_URL, SCOPES, TOKEN_URL, Settings
from nextmeet.exceptions import AuthorizationError, TokenExchangeError
from nextmeet.models import TokenPair
from nextmeet.store import CredentialStore

logger = logging.getLogger(__name__)

_SUCCESS_MESSAGE = "Go back to your terminal :)"
_FAILURE_MESSAGE = "Authorization failed, check your terminal."


def _create_flow(settings: Settings) -> Flow:
    """Create an OAuth flow configured for the loopback redirect.

    The flow generates its own PKCE verifier and sends the S256 challenge
    with the authorization URL.
    """
    client_config = {
        "installed": {
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "auth_uri": AUTH_URL,
            "token_uri": TOKEN_URL,
            "redirect_uris": [settings.redirect_uri],
        }
    }
    return Flow.from_client_config(
        client_config,
        scopes=SCOPES,
        redirect_uri=settings.redirect_uri,
        autogenerate_code_verifier=True,
    )


def open_browser(url: str) -> None:
    """Open ``url`` in the default browser, printing it when that is not possible."""
    try:
        opened = webbrowser.open(url, new=1, autoraise=True)
    except webbrowser.Error as e:
        logger.debug(f"Browser launch raised: {e}")
        opened = False

    if not opened:
        print(f"Failed to open browser automatically. Go to {url}", file=sys.stderr)


def parse_callback_request(request_line: str) -> str:
    """Extract the authorization code from the redirect's HTTP request line.

    >>> parse_callback_request("GET /auth?state=x&code=4%2F0Ab HTTP/1.1")
    '4/0Ab'

    Raises:
        AuthorizationError: The request carries no ``code`` parameter.
    """
    parts = request_line.split()
    if len(parts) < 2:
        raise AuthorizationError("No code received: malformed callback request")

    params = parse_qs(urlsplit(parts[1]).query)
    if "error" in params:
        raise AuthorizationError(f"Authorization was denied: {params['error'][0]}")

    codes = params.get("code")
    if not codes or not codes[0]:
        raise AuthorizationError("No code received")
    return codes[0]


def _http_response(message: str, status: str = "200 OK") -> bytes:
    body = f"<html><body><p>{message}</p></body></html>".encode()
    head = (
        f"HTTP/1.1 {status}\r\n"
        "content-type: text/html; charset=utf-8\r\n"
        f"content-length: {len(body)}\r\n"
        "connection: close\r\n\r\n"
    )
    return head.encode("ascii") + body


def wait_for_code(host: str, port: int, timeout: float | None = None) -> str:
    """Accept exactly one connection on ``host:port`` and return its ``code``.

    Blocks until the browser is redirected back, or until ``timeout`` seconds
    when given.
    """
    try:
        server = socket.create_server((host, port))
    except OSError as e:
        raise AuthorizationError(f"Could not listen on {host}:{port}: {e}") from e

    with server:
        server.settimeout(timeout)
        logger.info(f"Waiting for OAuth redirect on {host}:{port}")
        try:
            conn, _ = server.accept()
        except TimeoutError as e:
            raise AuthorizationError(f"No authorization received within {timeout} seconds") from e

        with conn:
            conn.settimeout(timeout)
            try:
                with conn.makefile("rb") as reader:
                    request_line = reader.readline(65537).decode("latin-1")
                    # Drain the headers so closing does not reset the connection
                    for _ in range(100):
                        if reader.readline(65537) in (b"\r\n", b"\n", b""):
                            break
            except OSError as e:
                raise AuthorizationError(f"Failed to read OAuth redirect: {e}") from e

            try:
                code = parse_callback_request(request_line)
            except AuthorizationError:
                try:
                    conn.sendall(_http_response(_FAILURE_MESSAGE, "400 Bad Request"))
                except OSError as e:
                    logger.debug(f"Could not send failure page: {e}")
                raise

            conn.sendall(_http_response(_SUCCESS_MESSAGE))

    return code


def login(settings: Settings, store: CredentialStore) -> TokenPair:
    """Run the interactive consent flow and persist the resulting tokens.

    Raises:
        AuthorizationError: No code came back from the browser.
        TokenExchangeError: Google rejected the code exchange.
    """
    flow = _create_flow(settings)

    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")
    logger.info("Starting OAuth consent in the browser")
    open_browser(auth_url)

    code = wait_for_code(settings.auth_host, settings.auth_port, settings.auth_timeout)

    try:
        token = flow.fetch_token(code=code)
    except (OAuth2Error, requests.RequestException) as e:
        logger.error(f"Code exchange failed: {e}")
        raise TokenExchangeError(f"Failed to get access token: {e}") from e
    except Warning as e:
        # oauthlib raises its scope-change warning when fewer scopes are granted
        logger.error(f"Code exchange failed: {e}")
        raise TokenExchangeError(f"Failed to get access token: {e}") from e

    tokens = TokenPair(
        access_token=token["access_token"],
        refresh_token=token.get("refresh_token"),
    )
    store.save(tokens)
    logger.info("Google Calendar authorization successful, token saved")
    return tokens


def refresh(settings: Settings, store: CredentialStore, tokens: TokenPair) -> TokenPair:
    """Trade the refresh token for a new access token and persist the pair.

    The existing refresh token is kept when Google does not issue a new one.

    Raises:
        TokenExchangeError: No refresh token, or Google rejected it.
    """
    if not tokens.refresh_token:
        raise TokenExchangeError("No refresh token available")

    creds = Credentials(
        token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_uri=TOKEN_URL,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
    )

    try:
        creds.refresh(Request())
    except (RefreshError, TransportError) as e:
        logger.warning(f"Failed to refresh tokens: {e}")
        raise TokenExchangeError(f"Failed to refresh tokens: {e}") from e

    refreshed = TokenPair(
        access_token=creds.token,
        refresh_token=creds.refresh_token or tokens.refresh_token,
    )
    store.save(refreshed)
    logger.info("Refreshed access token")
    return refreshed
