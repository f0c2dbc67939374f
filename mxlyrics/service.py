"""
Lyrics lookup service - the entry point for hosts

LyricsService wires the whole pipeline together:

    raw query -> parse_query -> ResultCache lookup
              -> (miss) LyricsFetcher -> ResultCache store -> result

It never raises from a lookup. Anything that goes wrong, including failure to
obtain a user token, ends up as None ("no lyrics found"), and that outcome is
cached for the cache TTL like any other.

Usage:
    from mxlyrics.service import get_lyrics_service

    service = get_lyrics_service()
    result = service.find_lyrics("Daft Punk - One More Time")
    if result:
        print(result.plain_text)
"""

from typing import Optional

from .lyrics.cache import ResultCache, make_cache_key
from .lyrics.models import LyricsResult, SOURCE_NAME
from .lyrics.processor import parse_query
from .config.auth import TokenManager, TokenStore
from .config.settings import get_settings
from .musixmatch.fetcher import LyricsFetcher
from .musixmatch.http import HttpClient
from .musixmatch.token import AppIdentity, TokenAcquirer
from .utils.logger import get_logger


class LyricsService:
    """Cached Musixmatch lyrics lookups for free-text or structured queries"""

    source_name = SOURCE_NAME

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        token_manager: Optional[TokenManager] = None,
        fetcher: Optional[LyricsFetcher] = None,
        cache: Optional[ResultCache] = None
    ):
        """
        Build the service, creating any collaborator not supplied from settings

        Args:
            http: Shared HTTP transport
            token_manager: Token lifecycle manager
            fetcher: Endpoint fallback chain
            cache: Result cache
        """
        settings = get_settings()
        self.logger = get_logger(__name__)

        self.http = http if http is not None else HttpClient()
        self.app_identity = AppIdentity(settings.musixmatch.app_id)

        if token_manager is None:
            token_manager = TokenManager(
                acquirer=TokenAcquirer(self.http, self.app_identity),
                store=TokenStore(settings.get_token_storage_path()),
            )
        self.token_manager = token_manager

        if fetcher is None:
            fetcher = LyricsFetcher(self.http, self.token_manager, self.app_identity)
        self.fetcher = fetcher

        if cache is None:
            cache = ResultCache(ttl=settings.cache.ttl, max_entries=settings.cache.max_entries)
        self.cache = cache

    def find_lyrics(self, query: str) -> Optional[LyricsResult]:
        """
        Look up lyrics for a free-text "Artist - Title" query

        Args:
            query: Raw query, promotional brackets like "[Official Video]" are ignored

        Returns:
            The lyrics, or None when nothing was found or anything failed
        """
        try:
            parsed = parse_query(query)
            if not parsed.title:
                return None

            key = make_cache_key(parsed.artist, parsed.title)
            entry = self.cache.get_entry(key)
            if entry is not None:
                self.logger.debug(f"Cache hit for '{parsed}'")
                return entry.value

            result = None
            try:
                result = self.fetcher.fetch(parsed.artist, parsed.title)
            except Exception as e:
                self.logger.warning(f"Musixmatch lookup failed for '{parsed}': {e}")

            if result is not None:
                self.logger.info(f"Musixmatch lyrics found for '{parsed}' (synced: {result.is_synced})")
            else:
                self.logger.info(f"No Musixmatch lyrics for '{parsed}'")

            self.cache.put(key, result)
            return result

        except Exception as e:
            self.logger.error(f"Unexpected error while looking up lyrics for '{query}': {e}")
            return None

    def load_lyrics(self, artist: Optional[str], title: str) -> Optional[LyricsResult]:
        """
        Look up lyrics for a structured track (as reported by an audio player)

        The pair goes through the same query parsing as free text, so bracketed
        promotional text in the title is dropped too.
        """
        query = f"{artist} - {title}" if artist else title
        return self.find_lyrics(query)

    def shutdown(self) -> None:
        """Release the HTTP session"""
        self.http.close()


# Global lyrics service instance
_lyrics_service: Optional[LyricsService] = None


def get_lyrics_service() -> LyricsService:
    """Get global lyrics service instance"""
    global _lyrics_service
    if not _lyrics_service:
        _lyrics_service = LyricsService()
    return _lyrics_service


def reset_lyrics_service() -> None:
    """Shut down and drop the global lyrics service instance"""
    global _lyrics_service
    if _lyrics_service:
        _lyrics_service.shutdown()
    _lyrics_service = None
