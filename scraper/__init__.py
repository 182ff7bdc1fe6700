"""Tracklist scraping and Spotify id resolution."""

from .models import ResolvedTrack, ScrapedTrack
from .resolver import resolve_tracks
from .tracklist import extract_tracks, scrape_tracklist

__all__ = [
    "ResolvedTrack",
    "ScrapedTrack",
    "extract_tracks",
    "resolve_tracks",
    "scrape_tracklist",
]
