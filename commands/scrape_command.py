import json
import os
from typing import Any, Dict, List, Optional

import questionary

from scraper.browser import open_browser
from scraper.models import ResolvedTrack
from scraper.resolver import resolve_tracks
from scraper.tracklist import scrape_tracklist
from spotify_api.playlist_builder import create_playlist_from_tracks
from spotify_api.session import get_spotify_client
from utils.credentials import load_spotify_credentials
from utils.logger import log_info, log_success, log_warning, timed


def _ask_for_url() -> str:
    answer = questionary.text("Tracklist URL to scrape:").ask()
    return (answer or "").strip()


def save_resolved_tracks(path: str, tracks: List[ResolvedTrack]) -> None:
    """Write the scrape/resolve result as JSON (one object per scraped track)."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([t.to_dict() for t in tracks], f, indent=2, ensure_ascii=False)
    log_info(f"Saved {len(tracks)} tracks to {path}")


def run_scrape(
    config: Dict[str, Any],
    url: Optional[str] = None,
    *,
    playlist_name: Optional[str] = None,
    save_json: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Scrape a tracklist page and turn its Spotify links into a new playlist.

    Returns the playlist summary, or None when there was nothing to do.
    """
    url = (url or "").strip() or _ask_for_url()
    if not url:
        log_warning("No tracklist URL provided.")
        return None

    # Secrets first: a missing credential must stop us before the browser opens.
    credentials = load_spotify_credentials(config)

    with open_browser(config) as page:
        title, scraped = scrape_tracklist(page, url)

        with timed("looking up spotify track ids"):
            resolved = resolve_tracks(scraped, config)

        if save_json:
            save_resolved_tracks(save_json, resolved)

        name = (playlist_name or "").strip() or title or url
        client = get_spotify_client(page, config, credentials)
        with client:
            summary = create_playlist_from_tracks(
                client,
                name,
                resolved,
                public=bool(config.get("playlist_public", True)),
                batch_size=int(config.get("playlist_batch_size", 100)),
                description=f"Scraped from {url}",
            )

    log_success(f"Playlist '{summary['name']}' created with {summary['added']} tracks: {summary['uri']}")
    return summary
