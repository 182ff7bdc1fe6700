import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TokenInfo:
    """Canonical token payload held by TokenManager."""

    access_token: str
    token_type: str
    expires_at: float
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @staticmethod
    def from_spotify_token_response(payload: Dict[str, Any], *, now: Optional[float] = None) -> "TokenInfo":
        """Convert Spotify token response JSON into TokenInfo.

        Spotify returns:
        - access_token
        - token_type
        - expires_in (seconds)
        - refresh_token (optional)
        - scope (space-delimited string)
        """

        now_ts = float(time.time() if now is None else now)
        expires_in = float(payload.get("expires_in", 0))

        return TokenInfo(
            access_token=str(payload.get("access_token", "")),
            token_type=str(payload.get("token_type", "Bearer")),
            expires_at=now_ts + expires_in,
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
        )


class TokenManager:
    """Holds the current session's token in memory; nothing is written to disk."""

    def __init__(self, token: Optional[TokenInfo] = None):
        self._token = token

    def load(self) -> Optional[TokenInfo]:
        return self._token

    def save(self, token: TokenInfo) -> None:
        self._token = token

    @staticmethod
    def is_expired(token: TokenInfo, *, skew_seconds: int = 60) -> bool:
        return time.time() >= float(token.expires_at) - float(skew_seconds)
