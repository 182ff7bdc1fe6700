from typing import Any, Dict, List, Optional, Sequence

from constants import SPOTIFY_MAX_ITEMS_PER_REQUEST
from scraper.models import ResolvedTrack
from utils.logger import log_info


def chunked(items: Sequence[str], size: int) -> List[List[str]]:
    size = max(1, int(size))
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def create_playlist_from_tracks(
    client: Any,
    name: str,
    tracks: Sequence[ResolvedTrack],
    *,
    public: bool = True,
    batch_size: int = SPOTIFY_MAX_ITEMS_PER_REQUEST,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a playlist and append every resolved track, in order.

    Unresolved tracks are skipped. Batches never exceed the API limit of 100;
    a failing batch aborts and earlier batches stay in the playlist.

    Returns:
        Summary dict: {id, uri, name, added, batches}
    """
    batch_size = min(SPOTIFY_MAX_ITEMS_PER_REQUEST, max(1, int(batch_size)))

    playlist = client.create_playlist(name, public=public, description=description)
    playlist_id = playlist.get("id")
    if not playlist_id:
        raise RuntimeError(f"Spotify did not return a playlist id: {playlist}")
    log_info(f"Creating spotify playlist {name}... {playlist.get('uri')}")

    resolved = [t for t in tracks if t.is_resolved]
    uris = []
    for i, track in enumerate(resolved, start=1):
        log_info(f"[{i}/{len(resolved)}] {track.title}")
        uris.append(track.uri)

    batches = chunked(uris, batch_size)
    for batch in batches:
        client.add_items_to_playlist(playlist_id, batch)

    return {
        "id": playlist_id,
        "uri": playlist.get("uri"),
        "name": name,
        "added": len(uris),
        "batches": len(batches),
    }
