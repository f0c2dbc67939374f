"""
Musixmatch lyrics retrieval

Looks a track up through an ordered list of strategies and returns the first
result any of them produces:

1. macro.subtitles.get with artist and title: plain lyrics, rich-synced
   subtitles and track metadata in one round trip
2. track.search (best-rated single hit) followed by track.subtitle.get
3. macro.subtitles.get with the title only, for queries whose artist part
   was mis-parsed

A strategy that fails (network error, non-200 status, unexpected payload) just
yields nothing and the next one runs. The only error that escapes is
AcquisitionError, raised when no user token can be obtained at all.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from .http import HttpClient
from .token import AppIdentity
from ..config.auth import TokenManager
from ..config.settings import get_settings
from ..exceptions import AcquisitionError, MxLyricsError, ProviderStatusError
from ..lyrics.models import LyricsResult
from ..lyrics.processor import (
    parse_subtitles,
    clean_lyrics_text,
    strip_commercial_footer,
    lines_to_text
)
from ..utils.logger import get_logger, log_performance


Strategy = Callable[[], Optional[LyricsResult]]

ARTWORK_FIELDS = ['album_coverart_800x800', 'album_coverart_350x350', 'album_coverart_100x100']


def dig(data: Any, *keys: Any) -> Any:
    """
    Walk nested dicts/lists, returning None as soon as a step is missing

    The provider returns [] instead of {} for empty sections, so every step
    checks the container type.
    """
    for key in keys:
        if isinstance(key, int):
            if not isinstance(data, list) or len(data) <= key:
                return None
        elif not isinstance(data, dict):
            return None
        data = data[key] if isinstance(key, int) else data.get(key)
        if data is None:
            return None
    return data


def first_result(strategies: Iterable[Strategy]) -> Optional[LyricsResult]:
    """Run strategies in order and return the first non-None result"""
    for strategy in strategies:
        result = strategy()
        if result is not None:
            return result
    return None


class LyricsFetcher:
    """Fetches lyrics for an artist/title pair from the desktop API"""

    def __init__(self, http: HttpClient, token_manager: TokenManager, app_identity: AppIdentity):
        """
        Initialize the fetcher

        Args:
            http: Transport for API calls
            token_manager: Source of the usertoken parameter
            app_identity: Source of the app_id parameter
        """
        settings = get_settings()
        self.logger = get_logger(__name__)
        self.http = http
        self.token_manager = token_manager
        self.app_identity = app_identity

        base_url = settings.musixmatch.api_base_url.rstrip('/')
        self.search_endpoint = f"{base_url}/track.search"
        self.subtitle_endpoint = f"{base_url}/track.subtitle.get"
        self.macro_endpoint = f"{base_url}/macro.subtitles.get"

    @log_performance
    def fetch(self, artist: Optional[str], title: str) -> Optional[LyricsResult]:
        """
        Look up lyrics, trying each endpoint in turn

        Args:
            artist: Artist name, or None when the query had no artist part
            title: Track title

        Returns:
            The first result found, or None

        Raises:
            AcquisitionError: If no user token could be obtained
        """
        strategies: List[Strategy] = []
        if artist:
            strategies.append(lambda: self._attempt("macro", self.try_macro_endpoint, artist, title))
        strategies.append(lambda: self._attempt("search", self.try_search_and_subtitles, artist, title))
        if artist:
            strategies.append(lambda: self._attempt("macro (title only)", self.try_macro_endpoint, None, title))

        return first_result(strategies)

    def _attempt(self, name: str, strategy: Callable[[Optional[str], str], Optional[LyricsResult]],
                 artist: Optional[str], title: str) -> Optional[LyricsResult]:
        try:
            result = strategy(artist, title)
        except AcquisitionError:
            raise
        except MxLyricsError as e:
            self.logger.debug(f"Lyrics strategy '{name}' failed for '{artist} - {title}': {e}")
            return None
        except Exception as e:
            self.logger.warning(f"Unexpected error in lyrics strategy '{name}' for '{artist} - {title}': {e}")
            return None

        if result is None:
            self.logger.debug(f"Lyrics strategy '{name}' found nothing for '{artist} - {title}'")
        return result

    def call_api(self, url: str, params: Dict[str, Any]) -> Any:
        """
        Call an authenticated endpoint and return the envelope body

        A 401 status drops the token it was made with (unless it has already
        been replaced) so the next lookup acquires a new one. The call itself
        is not retried.

        Raises:
            AcquisitionError: If no token could be obtained
            MxLyricsError: On network, status or payload errors
        """
        token = self.token_manager.get_token()
        request_params = dict(params)
        request_params['app_id'] = self.app_identity.app_id
        request_params['usertoken'] = token.value

        try:
            return self.http.get_api(url, params=request_params)
        except ProviderStatusError as e:
            if e.is_auth_error:
                self.token_manager.invalidate(token.value)
            raise

    def try_macro_endpoint(self, artist: Optional[str], title: str) -> Optional[LyricsResult]:
        """Lyrics, subtitles and track metadata in a single macro call"""
        params = {
            'format': 'json',
            'namespace': 'lyrics_richsynched',
            'subtitle_format': 'mxm',
            'q_track': title,
        }
        if artist:
            params['q_artist'] = artist

        body = self.call_api(self.macro_endpoint, params)
        macro_calls = dig(body, 'macro_calls')
        if not macro_calls:
            return None

        lyrics = dig(macro_calls, 'track.lyrics.get', 'message', 'body', 'lyrics', 'lyrics_body')
        track = dig(macro_calls, 'matcher.track.get', 'message', 'body', 'track') or {}
        subtitles = dig(
            macro_calls, 'track.subtitles.get', 'message', 'body',
            'subtitle_list', 0, 'subtitle', 'subtitle_body'
        )

        if lyrics or subtitles:
            return self.format_result(subtitles, lyrics, track)
        return None

    def try_search_and_subtitles(self, artist: Optional[str], title: str) -> Optional[LyricsResult]:
        """Find the best-rated matching track, then fetch its subtitles by id"""
        params = {
            'page_size': 1,
            'page': 1,
            's_track_rating': 'desc',
            'q_track': title,
        }
        if artist:
            params['q_artist'] = artist

        search_body = self.call_api(self.search_endpoint, params)
        track = dig(search_body, 'track_list', 0, 'track')
        track_id = dig(track, 'track_id')
        if track_id is None:
            return None

        subtitle_body = self.call_api(self.subtitle_endpoint, {
            'subtitle_format': 'mxm',
            'track_id': track_id,
        })
        subtitles = dig(subtitle_body, 'subtitle', 'subtitle_body')

        if subtitles:
            return self.format_result(subtitles, None, track)
        return None

    def format_result(self, subtitles: Optional[str], lyrics: Optional[str],
                      track: Dict[str, Any]) -> Optional[LyricsResult]:
        """
        Build a LyricsResult from raw subtitle and lyrics bodies

        Plain text comes from the lyrics body when there is one, otherwise from
        the timed lines. Returns None when neither yields any text.
        """
        if not isinstance(track, dict):
            track = {}
        lines = parse_subtitles(subtitles) if subtitles else None

        if isinstance(lyrics, str) and lyrics:
            text = clean_lyrics_text(strip_commercial_footer(lyrics))
        elif lines:
            text = lines_to_text(lines)
        else:
            text = None

        if not text and not lines:
            return None

        artwork = next((track.get(name) for name in ARTWORK_FIELDS if track.get(name)), None)

        return LyricsResult(
            plain_text=text or None,
            lines=lines,
            track_name=track.get('track_name'),
            artist_name=track.get('artist_name'),
            artwork_url=artwork,
        )
