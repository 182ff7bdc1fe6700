from typing import Any, Dict, Iterable, Optional

import httpx

from utils.credentials import SpotifyCredentials
from utils.logger import log_info, timed
from .auth import SpotifyAuth
from .callback_server import AuthCodeCapture
from .client import SpotifyClient


def get_spotify_client(
    page: Any,
    config: Dict[str, Any],
    credentials: SpotifyCredentials,
    *,
    scopes: Optional[Iterable[str]] = None,
    state: Optional[str] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> SpotifyClient:
    """Log in through `page` and return a client holding fresh tokens."""

    auth = SpotifyAuth(
        config,
        client_id=credentials.client_id,
        client_secret=credentials.client_secret,
        transport=transport,
    )
    request = auth.begin_oauth_flow(scopes=scopes, state=state)

    log_info(f"Creating spotify client for {credentials.username}...")
    timeout = float(config.get("auth_timeout", 0) or 0) or None
    with timed(f"Logged in to spotify as {credentials.username}"):
        code = AuthCodeCapture(request, timeout=timeout).run(page, credentials.username, credentials.password)
        auth.exchange_code_for_token(code=code)

    return SpotifyClient(config, auth=auth, transport=transport)
