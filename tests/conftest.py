"""Test configuration and fixtures"""

import json
import pytest
import tempfile
from pathlib import Path
from unittest.mock import Mock

from mxlyrics.config.auth import Token
from mxlyrics.musixmatch.http import HttpClient


HEX_TOKEN = "0123456789abcdef0123456789abcdef01234567"


class FakeClock:
    """Manually advanced time source, in epoch seconds"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def clock():
    """Fake clock starting at a fixed epoch"""
    return FakeClock()


@pytest.fixture
def mock_http():
    """HttpClient double; tests set get_text/get_api behaviour"""
    return Mock(spec=HttpClient)


@pytest.fixture
def mock_token_manager(clock):
    """Token manager that always hands out the same valid token"""
    manager = Mock()
    manager.get_token.return_value = Token(value=HEX_TOKEN, expires_at=clock() + 55)
    return manager


@pytest.fixture
def subtitle_body():
    """Subtitle document in the provider's "mxm" format, as a JSON string"""
    return json.dumps([
        {"text": "One more time", "time": {"total": 1.5, "minutes": 0, "seconds": 1, "hundredths": 50}},
        {"text": "We're gonna celebrate", "time": {"total": 4.25, "minutes": 0, "seconds": 4, "hundredths": 25}},
    ])


@pytest.fixture
def sample_track():
    """Track metadata as returned by the matcher and search endpoints"""
    return {
        'track_id': 15445219,
        'track_name': 'One More Time',
        'artist_name': 'Daft Punk',
        'album_coverart_100x100': 'https://s.mxmcdn.net/images-storage/100x100.jpg',
        'album_coverart_350x350': '',
        'album_coverart_800x800': '',
    }


@pytest.fixture
def macro_body():
    """Builder for macro.subtitles.get bodies (already unwrapped from the envelope)"""
    def build(lyrics=None, subtitles=None, track=None):
        return {
            'macro_calls': {
                'track.lyrics.get': {
                    'message': {
                        'header': {'status_code': 200 if lyrics else 404},
                        'body': {'lyrics': {'lyrics_body': lyrics}} if lyrics else [],
                    }
                },
                'matcher.track.get': {
                    'message': {
                        'header': {'status_code': 200},
                        'body': {'track': track} if track else [],
                    }
                },
                'track.subtitles.get': {
                    'message': {
                        'header': {'status_code': 200 if subtitles else 404},
                        'body': {
                            'subtitle_list': [{'subtitle': {'subtitle_body': subtitles}}]
                        } if subtitles else [],
                    }
                },
            }
        }
    return build


@pytest.fixture
def envelope():
    """Builder for full API responses as they come off the wire"""
    def build(body, status_code=200, hint=None):
        header = {'status_code': status_code}
        if hint:
            header['hint'] = hint
        return {'message': {'header': header, 'body': body}}
    return build
