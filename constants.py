import re

# 1001tracklists page markers
SPOTIFY_ICON_CLASS = "fa-spotify"
TRACK_VALUE_CLASS = "trackValue"
CLICK_HANDLER_ATTR = "onclick"

# Media-link lookup (idObject=5 selects the track media object type)
MEDIALINK_LOOKUP_URL = "https://www.1001tracklists.com/ajax/get_medialink.php"
MEDIALINK_OBJECT_ID = 5

SPOTIFY_EMBED_TRACK_RE = re.compile(r"https://open\.spotify\.com/embed/track/(\w+)")

# Spotify Web API rejects more than 100 items per add call.
SPOTIFY_MAX_ITEMS_PER_REQUEST = 100

DEFAULT_REDIRECT_URI = "http://127.0.0.1:49494/callback"

SPOTIFY_SCOPES = [
    "ugc-image-upload",
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "app-remote-control",
    "streaming",
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-private",
    "playlist-modify-public",
    "user-follow-modify",
    "user-follow-read",
    "user-read-playback-position",
    "user-top-read",
    "user-read-recently-played",
    "user-library-modify",
    "user-library-read",
    "user-read-email",
    "user-read-private",
]

# Spotify accounts page selectors
LOGIN_USERNAME_SELECTOR = "#login-username"
LOGIN_PASSWORD_SELECTOR = "#login-password"
LOGIN_BUTTON_SELECTOR = "#login-button"
AUTH_ACCEPT_SELECTOR = '[data-testid="auth-accept"]'
