"""Extract Spotify track references from a 1001tracklists page.

Each Spotify icon (`.fa-spotify`) sits inside a clickable span whose inline
`onclick` handler carries the site's numeric track id. The human-readable
title lives in a `.trackValue` element somewhere in the surrounding row, so it
is located by walking up from the icon until exactly one such element is in
scope.
"""

import logging
import re
from typing import Any, List, Optional, Tuple

from bs4 import BeautifulSoup

from constants import CLICK_HANDLER_ATTR, SPOTIFY_ICON_CLASS, TRACK_VALUE_CLASS
from scraper.models import ScrapedTrack

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"\d+")


def find_title_element(node: Any, selector: str = f".{TRACK_VALUE_CLASS}") -> Optional[Any]:
    """Return the single `selector` match in the nearest ancestor scope of `node`.

    Works on any tree node exposing `.parent` and `.select(selector)`. A level
    with zero or several matches is skipped; the walk ends at the root.
    """

    if node is None:
        return None

    matches = node.select(selector)
    if len(matches) == 1:
        return matches[0]

    if node.parent is None:
        return None
    return find_title_element(node.parent, selector)


def find_click_handler(node: Any) -> Optional[str]:
    """Return the `onclick` text of `node` or its nearest ancestor carrying one."""

    current = node
    while current is not None:
        attrs = getattr(current, "attrs", None) or {}
        handler = attrs.get(CLICK_HANDLER_ATTR)
        if handler is not None:
            return str(handler)
        current = current.parent
    return None


def source_track_id_from_handler(handler: Optional[str]) -> Optional[str]:
    """Return the first run of digits in a click handler, if any."""

    if not handler:
        return None
    match = _DIGITS_RE.search(handler)
    return match.group(0) if match else None


def _element_text(element: Any) -> Optional[str]:
    # Inline tags join without a separator, like the rendered innerText.
    text = " ".join(element.get_text().split())
    return text or None


def extract_tracks(html: str) -> List[ScrapedTrack]:
    """Return the Spotify-linked tracks of a tracklist page, in document order.

    Extraction problems are logged and reported as an empty result.
    """

    try:
        soup = BeautifulSoup(html or "", "html.parser")
        tracks: List[ScrapedTrack] = []
        for icon in soup.select(f".{SPOTIFY_ICON_CLASS}"):
            track_id = source_track_id_from_handler(find_click_handler(icon))
            if track_id is None:
                continue

            title_element = find_title_element(icon)
            tracks.append(
                ScrapedTrack(
                    source_track_id=track_id,
                    title=_element_text(title_element) if title_element is not None else None,
                )
            )
        return tracks
    except Exception as e:
        logger.error(f"Error extracting tracks: {e}")
        return []


def scrape_tracklist(page: Any, url: str) -> Tuple[str, List[ScrapedTrack]]:
    """Navigate `page` to `url`; return (page title, scraped tracks)."""

    logger.info(f"Navigating to {url}")
    page.goto(url)
    title = page.title()
    logger.info(f"Finished navigating to {url} ({title})")

    return title, extract_tracks(page.content())
