"""
Data models for lyrics lookups

This module defines the value types that flow through the lyrics pipeline:

- ParsedQuery: Best-guess artist/title pair derived from a free-text query
- LyricsLine: One timed line of a synchronized lyrics document
- LyricsResult: What a successful lookup returns (plain text and/or timed lines)
- CacheEntry: A cached lookup outcome, possibly negative, with its expiry

All models except CacheEntry are immutable once constructed. A lookup that
finds nothing is represented by None rather than by an empty LyricsResult, and
that None is cached just like a real result.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any


SOURCE_NAME = "Musixmatch"


@dataclass(frozen=True)
class ParsedQuery:
    """
    Artist/title pair extracted from a raw query string

    Attributes:
        title: Track title, never empty for a meaningful query
        artist: Artist name, None when no separator could be found
    """
    title: str
    artist: Optional[str] = None

    @property
    def has_artist(self) -> bool:
        return bool(self.artist)

    def __str__(self) -> str:
        if self.artist:
            return f"{self.artist} - {self.title}"
        return self.title


@dataclass(frozen=True)
class LyricsLine:
    """
    Single timed lyrics line

    Attributes:
        offset_ms: Playback offset in milliseconds
        text: Line text as sung
    """
    offset_ms: int
    text: str

    def to_lrc(self) -> str:
        """Render the line as an LRC entry, e.g. ``[01:02.50]text``"""
        minutes, rest = divmod(self.offset_ms, 60000)
        seconds, millis = divmod(rest, 1000)
        return f"[{minutes:02d}:{seconds:02d}.{millis // 10:02d}]{self.text}"


@dataclass(frozen=True)
class LyricsResult:
    """
    Lyrics found for a track

    At least one of plain_text and lines is present for a real result.

    Attributes:
        plain_text: Plain display text, one lyric line per text line
        lines: Timed lines in playback order (synchronized lyrics)
        track_name: Track name reported by the provider
        artist_name: Artist name reported by the provider
        artwork_url: Largest album cover URL reported by the provider
        source: Provider label shown to the host
    """
    plain_text: Optional[str] = None
    lines: Optional[List[LyricsLine]] = None
    track_name: Optional[str] = None
    artist_name: Optional[str] = None
    artwork_url: Optional[str] = None
    source: str = SOURCE_NAME

    @property
    def has_lyrics(self) -> bool:
        return bool(self.plain_text) or bool(self.lines)

    @property
    def is_synced(self) -> bool:
        return bool(self.lines)

    def to_lrc(self) -> Optional[str]:
        """Render the timed lines as an LRC document, None for plain-only results"""
        if not self.lines:
            return None
        return "\n".join(line.to_lrc() for line in self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'plain_text': self.plain_text,
            'lines': [
                {'offset_ms': line.offset_ms, 'text': line.text}
                for line in self.lines or []
            ],
            'track_name': self.track_name,
            'artist_name': self.artist_name,
            'artwork_url': self.artwork_url,
            'source': self.source,
        }


@dataclass
class CacheEntry:
    """
    Cached outcome of a lookup

    Attributes:
        key: Normalized "artist|title" key
        value: The result, or None for a cached "no lyrics found"
        expires_at: Absolute expiry in clock seconds
    """
    key: str
    value: Optional[LyricsResult]
    expires_at: float = field(default=0.0)

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
