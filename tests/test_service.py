"""Test the cached lookup service"""

import pytest
from unittest.mock import Mock

from mxlyrics.config.auth import TokenManager, TokenStore
from mxlyrics.exceptions import AcquisitionError
from mxlyrics.lyrics.cache import ResultCache
from mxlyrics.lyrics.models import LyricsResult
from mxlyrics.musixmatch.fetcher import LyricsFetcher
from mxlyrics.musixmatch.token import AppIdentity
from mxlyrics.service import LyricsService


@pytest.fixture
def fetcher():
    return Mock()


@pytest.fixture
def service(mock_http, mock_token_manager, fetcher, clock):
    return LyricsService(
        http=mock_http,
        token_manager=mock_token_manager,
        fetcher=fetcher,
        cache=ResultCache(ttl=300, max_entries=100, clock=clock)
    )


class TestLyricsService:
    """Test query handling, caching and error containment"""

    def test_source_name(self, service):
        assert service.source_name == "Musixmatch"

    def test_find_lyrics_parses_query(self, service, fetcher):
        expected = LyricsResult(plain_text="One more time")
        fetcher.fetch.return_value = expected

        assert service.find_lyrics("Daft Punk - One More Time [Official Video]") is expected
        fetcher.fetch.assert_called_once_with("Daft Punk", "One More Time")

    def test_second_lookup_is_cached(self, service, fetcher):
        fetcher.fetch.return_value = LyricsResult(plain_text="x")

        first = service.find_lyrics("Daft Punk - One More Time")
        second = service.find_lyrics("daft punk - one more time")

        assert first is second
        assert fetcher.fetch.call_count == 1

    def test_negative_result_is_cached(self, service, fetcher):
        fetcher.fetch.return_value = None

        assert service.find_lyrics("Nobody - Nothing") is None
        assert service.find_lyrics("Nobody - Nothing") is None
        assert fetcher.fetch.call_count == 1

    def test_cache_expires(self, service, fetcher, clock):
        fetcher.fetch.return_value = LyricsResult(plain_text="x")

        service.find_lyrics("A - B")
        clock.advance(301)
        service.find_lyrics("A - B")

        assert fetcher.fetch.call_count == 2

    def test_token_failure_returns_none(self, service, fetcher):
        fetcher.fetch.side_effect = AcquisitionError("no token")

        assert service.find_lyrics("A - B") is None
        assert service.find_lyrics("A - B") is None
        assert fetcher.fetch.call_count == 1

    def test_unexpected_error_returns_none(self, service, fetcher):
        fetcher.fetch.side_effect = RuntimeError("boom")
        assert service.find_lyrics("A - B") is None

    def test_empty_query(self, service, fetcher):
        assert service.find_lyrics("") is None
        assert service.find_lyrics("[Official Video]") is None
        fetcher.fetch.assert_not_called()

    def test_title_only_query(self, service, fetcher):
        fetcher.fetch.return_value = None
        service.find_lyrics("Song Title Only")
        fetcher.fetch.assert_called_once_with(None, "Song Title Only")

    def test_load_lyrics(self, service, fetcher):
        fetcher.fetch.return_value = None

        service.load_lyrics("Daft Punk", "One More Time [Official Video]")
        service.load_lyrics(None, "Solo Title")

        assert fetcher.fetch.call_args_list[0].args == ("Daft Punk", "One More Time")
        assert fetcher.fetch.call_args_list[1].args == (None, "Solo Title")

    def test_shutdown_closes_http(self, service, mock_http):
        service.shutdown()
        mock_http.close.assert_called_once()


class TestEndToEnd:
    """Test the full pipeline with only the transport mocked"""

    def test_lookup_then_cache_hit(self, temp_dir, clock, mock_http, macro_body, subtitle_body, sample_track):
        acquirer = Mock()
        acquirer.acquire.return_value = "f" * 40
        token_manager = TokenManager(
            acquirer, TokenStore(temp_dir / "token.json"), ttl=55, persist_interval=5, clock=clock
        )
        identity = AppIdentity()
        service = LyricsService(
            http=mock_http,
            token_manager=token_manager,
            fetcher=LyricsFetcher(mock_http, token_manager, identity),
            cache=ResultCache(clock=clock)
        )
        mock_http.get_api.return_value = macro_body(
            lyrics="One more time\nWe're gonna celebrate",
            subtitles=subtitle_body,
            track=sample_track
        )

        result = service.find_lyrics("Daft Punk - One More Time")

        assert result.has_lyrics
        assert result.plain_text
        assert len(result.lines) >= 1
        assert result.to_lrc().startswith("[00:01.50]One more time")

        again = service.find_lyrics("Daft Punk - One More Time")
        assert again is result
        assert mock_http.get_api.call_count == 1
        assert acquirer.acquire.call_count == 1
        assert (temp_dir / "token.json").exists()
