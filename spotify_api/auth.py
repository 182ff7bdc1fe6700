import json
import logging
import secrets
import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import httpx

from constants import DEFAULT_REDIRECT_URI, SPOTIFY_SCOPES
from .token_manager import TokenInfo, TokenManager

logger = logging.getLogger(__name__)

SPOTIFY_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"


def get_redirect_uri(config: Dict[str, Any]) -> str:
    return str((config or {}).get("spotify_redirect_uri", "")).strip() or DEFAULT_REDIRECT_URI


def extract_code_from_redirect_url(redirect_url: str) -> Dict[str, str]:
    """Parse a redirect URL and return {"code", "state", "error"} (missing keys omitted)."""

    parsed = urllib.parse.urlparse(str(redirect_url or "").strip())
    qs = urllib.parse.parse_qs(parsed.query)
    out: Dict[str, str] = {}
    if qs.get("code"):
        out["code"] = str(qs["code"][0])
    if qs.get("state"):
        out["state"] = str(qs["state"][0])
    if qs.get("error"):
        out["error"] = str(qs["error"][0])
    return out


@dataclass(frozen=True)
class AuthorizationRequest:
    auth_url: str
    state: str
    redirect_uri: str


class SpotifyAuth:
    """Spotify OAuth (Authorization Code with client secret) helper."""

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        client_id: str,
        client_secret: str,
        token_manager: Optional[TokenManager] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config or {}
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_manager = token_manager or TokenManager()
        self._transport = transport

    @property
    def redirect_uri(self) -> str:
        return get_redirect_uri(self.config)

    def get_authorize_url(
        self,
        *,
        state: Optional[str] = None,
        scopes: Optional[Iterable[str]] = None,
        show_dialog: bool = False,
    ) -> str:
        if not self.client_id:
            raise ValueError("Missing Spotify client id")

        scope_list = list(scopes if scopes is not None else self.config.get("spotify_scopes", SPOTIFY_SCOPES))
        scope_str = " ".join([str(s).strip() for s in scope_list if str(s).strip()])

        params: Dict[str, str] = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "show_dialog": "true" if show_dialog else "false",
        }
        if scope_str:
            params["scope"] = scope_str
        if state:
            params["state"] = str(state)

        return f"{SPOTIFY_ACCOUNTS_BASE_URL}/authorize?{urllib.parse.urlencode(params)}"

    def begin_oauth_flow(
        self,
        *,
        scopes: Optional[Iterable[str]] = None,
        state: Optional[str] = None,
        show_dialog: Optional[bool] = None,
    ) -> AuthorizationRequest:
        """Return the authorize URL plus the state the callback must echo back."""

        state = state or secrets.token_urlsafe(16).rstrip("=")
        if show_dialog is None:
            show_dialog = bool(self.config.get("spotify_show_dialog", True))
        url = self.get_authorize_url(state=state, scopes=scopes, show_dialog=show_dialog)
        return AuthorizationRequest(auth_url=url, state=state, redirect_uri=self.redirect_uri)

    def exchange_code_for_token(self, *, code: str) -> TokenInfo:
        payload = self._post_form(
            f"{SPOTIFY_ACCOUNTS_BASE_URL}/api/token",
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
        )
        token = TokenInfo.from_spotify_token_response(payload)
        if not token.access_token:
            raise RuntimeError(f"Spotify token exchange failed: {payload}")

        self.token_manager.save(token)
        return token

    def refresh_access_token(self, *, refresh_token: str) -> TokenInfo:
        payload = self._post_form(
            f"{SPOTIFY_ACCOUNTS_BASE_URL}/api/token",
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
        )

        token = TokenInfo.from_spotify_token_response(payload)

        # Spotify may omit refresh_token on refresh; keep existing.
        if not token.refresh_token:
            token = TokenInfo(
                access_token=token.access_token,
                token_type=token.token_type,
                expires_at=token.expires_at,
                refresh_token=refresh_token,
                scope=token.scope,
            )

        if not token.access_token:
            raise RuntimeError(f"Spotify token refresh failed: {payload}")

        self.token_manager.save(token)
        return token

    def _post_form(self, url: str, form: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: str(v) for k, v in (form or {}).items() if v is not None}

        try:
            with httpx.Client(
                timeout=float(self.config.get("http_timeout", 30)),
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                resp = client.post(
                    url,
                    data=data,
                    auth=(self.client_id, self.client_secret),
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            raise RuntimeError(f"Spotify token request failed: {e}") from e

        if resp.status_code >= 400:
            raise RuntimeError(f"Spotify token request failed (HTTP {resp.status_code}): {resp.text}")

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Spotify token response was not JSON: {resp.text}") from e

        if not isinstance(payload, dict):
            raise RuntimeError(f"Spotify token response was not an object: {payload}")

        logger.debug("Spotify token response received (scope=%s)", payload.get("scope"))
        return payload
