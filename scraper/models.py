from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ScrapedTrack:
    """A Spotify reference found on a tracklist page."""

    source_track_id: str
    title: Optional[str] = None


@dataclass(frozen=True)
class ResolvedTrack:
    """A scraped track plus the Spotify track id found for it (if any)."""

    source_track_id: str
    title: Optional[str] = None
    resolved_id: Optional[str] = None

    @staticmethod
    def from_scraped(track: ScrapedTrack, resolved_id: Optional[str] = None) -> "ResolvedTrack":
        return ResolvedTrack(source_track_id=track.source_track_id, title=track.title, resolved_id=resolved_id)

    @property
    def is_resolved(self) -> bool:
        return bool(self.resolved_id)

    @property
    def uri(self) -> Optional[str]:
        return f"spotify:track:{self.resolved_id}" if self.resolved_id else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "source_track_id": self.source_track_id,
            "resolved_id": self.resolved_id,
        }
