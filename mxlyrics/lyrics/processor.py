"""
Lyrics text processing

Turns the raw material the provider gives back into display-ready data:

- parse_query(): splits a free-text "Artist - Title" query into a ParsedQuery,
  dropping promotional bracket text such as "[Official Video]"
- clean_lyrics_text(): removes inline "[m:ss.xx]" markers and blank lines
- strip_commercial_footer(): removes the footer the provider appends to lyrics
- parse_subtitles(): converts the provider's "mxm" subtitle JSON into timed lines
- lines_to_text(): flattens timed lines back into plain text
"""

import json
import re
from typing import Any, List, Optional, Union

from .models import LyricsLine, ParsedQuery
from ..utils.logger import get_logger


logger = get_logger(__name__)

TIMESTAMP_REGEX = re.compile(r'\[\d{1,2}:\d{2}(?:\.\d{1,3})?\]')

BRACKET_JUNK = re.compile(
    r'\s*\[([^\]]*(?:official|lyrics?|video|audio|mv|visualizer|color\s*coded|hd|4k)[^\]]*)\]',
    re.IGNORECASE
)

# Checked in this order; the plain hyphen comes last so "Jay-Z - Song" splits on " - "
SEPARATORS = [' - ', ' – ', ' — ', ' ~ ', '-']

COMMERCIAL_FOOTERS = [
    '******* This Lyrics is NOT for Commercial use *******',
    '(1409618976710)',
]


def parse_query(raw: str) -> ParsedQuery:
    """
    Split a raw query into artist and title

    Bracketed promotional text is removed first. The first separator (in
    priority order) whose first occurrence yields two non-empty halves wins.

    Args:
        raw: Query such as "Artist Name - Song Title [Official Video]"

    Returns:
        ParsedQuery; artist is None when no usable separator was found
    """
    cleaned = BRACKET_JUNK.sub('', raw or '').strip()

    for separator in SEPARATORS:
        index = cleaned.find(separator)
        if 0 < index < len(cleaned) - len(separator):
            artist = cleaned[:index].strip()
            title = cleaned[index + len(separator):].strip()
            if artist and title:
                return ParsedQuery(title=title, artist=artist)

    return ParsedQuery(title=cleaned)


def clean_lyrics_text(lyrics: Optional[str]) -> str:
    """
    Strip timestamp markers and blank lines from lyrics text

    Args:
        lyrics: Raw lyrics text, possibly annotated with [mm:ss.xx] markers

    Returns:
        Trimmed non-empty lines joined with newlines
    """
    if not lyrics:
        return ""

    cleaned = TIMESTAMP_REGEX.sub('', lyrics)
    lines = [line.strip() for line in cleaned.splitlines()]
    return '\n'.join(line for line in lines if line)


def strip_commercial_footer(lyrics: str) -> str:
    """Remove the provider's commercial-use footer from a lyrics body"""
    for footer in COMMERCIAL_FOOTERS:
        if footer in lyrics:
            lyrics = lyrics.replace(footer, '')
    return lyrics.strip()


def parse_subtitles(body: Union[str, list, dict, None]) -> Optional[List[LyricsLine]]:
    """
    Parse a subtitle document into timed lines

    The document is a JSON array of cues, or an object wrapping one under
    "subtitle". Each cue looks like {"text": "...", "time": {"total": 12.34}}.

    Args:
        body: JSON text, or the already decoded document

    Returns:
        Lines in source order, or None when the document is malformed or has
        no usable cue. A malformed cue discards the whole document.
    """
    if body is None:
        return None

    try:
        document: Any = json.loads(body) if isinstance(body, str) else body

        if isinstance(document, dict):
            document = document.get('subtitle')
        if not isinstance(document, list) or not document:
            return None

        lines = []
        for cue in document:
            time_info = cue.get('time') or {}
            total = time_info.get('total')
            seconds = 0.0 if total is None else float(total)
            text = cue.get('text')
            if isinstance(text, str) and text:
                lines.append(LyricsLine(offset_ms=int(round(seconds * 1000)), text=text))

        return lines or None

    except (ValueError, TypeError, AttributeError) as e:
        logger.debug(f"Discarding malformed subtitle document: {e}")
        return None


def lines_to_text(lines: List[LyricsLine]) -> str:
    """Join timed lines into plain text"""
    return '\n'.join(line.text for line in lines)
