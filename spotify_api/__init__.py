"""Spotify Web API integration (Authorization Code flow driven through a browser).

Tokens are kept in memory for the lifetime of one run.
"""

from .auth import SpotifyAuth
from .callback_server import AuthCodeCapture, AuthorizationError, CallbackListener
from .client import SpotifyClient
from .playlist_builder import create_playlist_from_tracks
from .session import get_spotify_client
from .token_manager import TokenManager

__all__ = [
    "AuthCodeCapture",
    "AuthorizationError",
    "CallbackListener",
    "SpotifyAuth",
    "SpotifyClient",
    "TokenManager",
    "create_playlist_from_tracks",
    "get_spotify_client",
]
