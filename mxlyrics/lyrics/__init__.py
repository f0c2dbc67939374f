"""
Lyrics data and processing

Key components:
- models: ParsedQuery, LyricsLine, LyricsResult, CacheEntry
- processor: query parsing, subtitle parsing and lyrics text cleanup
- ResultCache: bounded TTL cache, negative results included

The lookup entry point itself lives in mxlyrics.service.
"""

from .models import ParsedQuery, LyricsLine, LyricsResult, CacheEntry, SOURCE_NAME
from .processor import parse_query, parse_subtitles, clean_lyrics_text
from .cache import ResultCache, make_cache_key

__all__ = [
    # Models
    'ParsedQuery',
    'LyricsLine',
    'LyricsResult',
    'CacheEntry',
    'SOURCE_NAME',

    # Processing
    'parse_query',
    'parse_subtitles',
    'clean_lyrics_text',

    # Cache
    'ResultCache',
    'make_cache_key'
]
