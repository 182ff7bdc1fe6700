import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

import httpx
from tqdm import tqdm

from constants import MEDIALINK_LOOKUP_URL, MEDIALINK_OBJECT_ID, SPOTIFY_EMBED_TRACK_RE
from scraper.models import ResolvedTrack, ScrapedTrack
from utils.logger import log_info, log_warning


def extract_spotify_id(payload: Any) -> Optional[str]:
    """Return the Spotify track id of the first matching embed player, if any.

    Expected shape: {"data": [{"player": "<iframe src=...>"}, ...]}
    """

    if not isinstance(payload, dict) or "data" not in payload:
        return None

    players = payload.get("data")
    if not isinstance(players, list):
        return None

    for entry in players:
        player = entry.get("player") if isinstance(entry, dict) else None
        if not isinstance(player, str):
            continue
        match = SPOTIFY_EMBED_TRACK_RE.search(player)
        if match:
            return match.group(1)
    return None


def lookup_medialinks(client: httpx.Client, source_track_id: str, *, lookup_url: str = MEDIALINK_LOOKUP_URL) -> Any:
    """Fetch the media-link payload for one tracklist track id."""

    resp = client.get(lookup_url, params={"idObject": MEDIALINK_OBJECT_ID, "idItem": source_track_id})
    resp.raise_for_status()
    return resp.json()


def _resolve_worker(
    client: httpx.Client,
    track: ScrapedTrack,
    lookup_url: str,
    isolate_failures: bool,
) -> ResolvedTrack:
    try:
        payload = lookup_medialinks(client, track.source_track_id, lookup_url=lookup_url)
    except (httpx.HTTPError, ValueError) as e:
        if not isolate_failures:
            raise RuntimeError(f"Lookup failed for track {track.source_track_id}: {e}") from e
        log_warning(f"Lookup failed for track {track.source_track_id} ({track.title or 'untitled'}): {e}")
        return ResolvedTrack.from_scraped(track)

    return ResolvedTrack.from_scraped(track, extract_spotify_id(payload))


async def resolve_tracks_async(
    tracks: Sequence[ScrapedTrack],
    config: Optional[Dict[str, Any]] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> List[ResolvedTrack]:
    """
    Look up every track concurrently.

    Args:
        tracks: Scraped tracks, in page order
        config: Optional config dict (lookup_url, lookup_workers, lookup_isolate_failures, http_timeout)
        transport: Optional httpx transport (tests)

    Returns:
        Resolved tracks in the same order as `tracks`.
    """
    config = config or {}
    if not tracks:
        return []

    lookup_url = str(config.get("lookup_url") or MEDIALINK_LOOKUP_URL)
    isolate_failures = bool(config.get("lookup_isolate_failures", True))
    max_workers = int(config.get("lookup_workers") or 0) or len(tracks)

    # One pooled connection per worker so no lookup waits on the pool.
    limits = httpx.Limits(max_connections=max_workers, max_keepalive_connections=max_workers)

    loop = asyncio.get_event_loop()
    with httpx.Client(timeout=float(config.get("http_timeout", 30)), limits=limits, transport=transport) as client:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            tasks = []
            with tqdm(total=len(tracks), desc="Looking up", unit="track") as pbar:
                for track in tracks:
                    task = loop.run_in_executor(executor, _resolve_worker, client, track, lookup_url, isolate_failures)
                    task.add_done_callback(lambda _: pbar.update(1))
                    tasks.append(task)
                return list(await asyncio.gather(*tasks))


def resolve_tracks(
    tracks: Sequence[ScrapedTrack],
    config: Optional[Dict[str, Any]] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> List[ResolvedTrack]:
    log_info(f"Finding spotify links for {len(tracks)} tracks")
    resolved = asyncio.run(resolve_tracks_async(tracks, config, transport=transport))
    log_info(f"Found {sum(1 for t in resolved if t.is_resolved)} spotify links")
    return resolved
