from typing import Any, Dict, List

from scraper.browser import open_browser
from spotify_api.session import get_spotify_client
from utils.credentials import load_spotify_credentials
from utils.logger import log_info, log_success


def run_login(config: Dict[str, Any]) -> Dict[str, Any]:
    """Authenticate through the browser and report who we are signed in as."""
    credentials = load_spotify_credentials(config)
    with open_browser(config) as page:
        with get_spotify_client(page, config, credentials) as client:
            me = client.me() or {}

    display = (me.get("display_name") or me.get("id") or "").strip()
    log_success(f"Signed in as: {display or credentials.username}")
    return me


def run_list_playlists(config: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Print every playlist of the signed-in user as `[name] uri`."""
    credentials = load_spotify_credentials(config)
    with open_browser(config) as page:
        with get_spotify_client(page, config, credentials) as client:
            playlists = client.get_user_playlists(limit=50)

    if not playlists:
        log_info("No playlists found for this account.")
    for p in playlists:
        log_info(f"[{p.get('name') or '(unnamed)'}] {p.get('uri')}")
    return playlists
