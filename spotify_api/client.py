import time
from typing import Any, Dict, List, Optional, Sequence

import httpx

from constants import SPOTIFY_MAX_ITEMS_PER_REQUEST
from .auth import SpotifyAuth
from .token_manager import TokenInfo, TokenManager


SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"


class SpotifyClient:
    """Thin Spotify Web API client.

    This client expects an OAuth access token (Authorization Code flow).

    Design goals:
    - Optional retry on rate limiting (429 Retry-After) and 5xx, off by default
    - Provide high-level helpers that return *fully paged* lists
    """

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        auth: Optional[SpotifyAuth] = None,
        token_manager: Optional[TokenManager] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config or {}
        self.auth = auth
        self.token_manager = token_manager or (auth.token_manager if auth else TokenManager())
        self._http = httpx.Client(
            base_url=SPOTIFY_API_BASE_URL,
            timeout=float(self.config.get("http_timeout", 30)),
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SpotifyClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -----------------
    # Token management
    # -----------------

    def get_token(self) -> TokenInfo:
        token = self.token_manager.load()
        if token is None:
            raise RuntimeError("No Spotify token available. Run the OAuth flow first.")

        if not self.token_manager.is_expired(token):
            return token

        if not bool(self.config.get("spotify_auto_refresh", True)):
            raise RuntimeError("Spotify token expired and spotify_auto_refresh is disabled.")

        if not token.refresh_token or self.auth is None:
            raise RuntimeError("Spotify token expired and no refresh_token is available.")

        return self.auth.refresh_access_token(refresh_token=token.refresh_token)

    # -----------------
    # HTTP helpers
    # -----------------

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make a Spotify Web API request and return parsed JSON.

        Retry behavior (only when spotify_max_retries > 0):
        - 429: honors Retry-After (Spotify rate limiting)
        - 5xx: exponential backoff
        """

        max_retries = int(self.config.get("spotify_max_retries", 0))

        attempt = 0
        while True:
            attempt += 1
            token = self.get_token()

            try:
                resp = self._http.request(
                    method.upper(),
                    path,
                    params={k: str(v) for k, v in (params or {}).items() if v is not None} or None,
                    json=json_body,
                    headers={
                        "Authorization": f"{token.token_type} {token.access_token}",
                        "Accept": "application/json",
                    },
                )
            except httpx.HTTPError as e:
                raise RuntimeError(f"Spotify API request failed: {e}") from e

            status = resp.status_code
            if status == 429 and attempt <= max_retries:
                try:
                    delay = float(resp.headers.get("Retry-After", 1))
                except ValueError:
                    delay = 1.0
                time.sleep(max(1.0, delay))
                continue

            if status >= 500 and attempt <= max_retries:
                time.sleep(min(30.0, float(2 ** (attempt - 1))))
                continue

            if status >= 400:
                raise RuntimeError(f"Spotify API error {status}: {resp.text}")

            if not resp.content:
                return {}

            try:
                return resp.json()
            except ValueError as e:
                raise RuntimeError(f"Spotify API response was not JSON (status {status}): {resp.text}") from e

    def _paginate(self, path: str, *, params: Optional[Dict[str, Any]] = None, page_key: str = "items") -> List[Dict[str, Any]]:
        """Fetch all pages for an endpoint that returns {items, next, limit, offset}."""

        out: List[Dict[str, Any]] = []
        limit = int((params or {}).get("limit") or 50)
        offset = int((params or {}).get("offset") or 0)

        while True:
            page = self.request_json("GET", path, params={**(params or {}), "limit": limit, "offset": offset})
            items = page.get(page_key) or []
            if isinstance(items, list):
                out.extend([x for x in items if isinstance(x, dict)])

            if not page.get("next") or not items:
                break
            offset += len(items)

        return out

    # -----------------
    # Convenience endpoints
    # -----------------

    def me(self) -> Dict[str, Any]:
        return self.request_json("GET", "/me")

    def current_user_playlists(self, *, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        return self.request_json("GET", "/me/playlists", params={"limit": limit, "offset": offset})

    def create_playlist(self, name: str, *, public: bool = True, description: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": name, "public": bool(public)}
        if description:
            body["description"] = description
        return self.request_json("POST", "/me/playlists", json_body=body)

    def add_items_to_playlist(self, playlist_id: str, uris: Sequence[str]) -> Dict[str, Any]:
        """Append up to 100 track URIs to a playlist."""

        uris = [str(u) for u in (uris or []) if str(u).strip()]
        if len(uris) > SPOTIFY_MAX_ITEMS_PER_REQUEST:
            raise ValueError(f"Spotify accepts at most {SPOTIFY_MAX_ITEMS_PER_REQUEST} items per call, got {len(uris)}")
        return self.request_json("POST", f"/playlists/{playlist_id}/tracks", json_body={"uris": uris})

    # -----------------
    # High-level helpers (fully paged)
    # -----------------

    def get_user_playlists(self, *, limit: int = 50) -> List[Dict[str, Any]]:
        return self._paginate("/me/playlists", params={"limit": min(50, int(limit))}, page_key="items")
