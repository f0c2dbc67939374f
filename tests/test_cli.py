"""Test the command-line interface"""

import json
import pytest
from unittest.mock import Mock, patch
from click.testing import CliRunner

from mxlyrics import __version__
from mxlyrics.config.auth import Token
from mxlyrics.config.settings import Settings
from mxlyrics.lyrics.models import LyricsLine, LyricsResult
from mxlyrics.main import cli, mask_token


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def service():
    service = Mock()
    with patch('mxlyrics.main.get_lyrics_service', return_value=service), \
            patch('mxlyrics.main.reset_lyrics_service'), \
            patch('mxlyrics.main.configure_from_settings'):
        yield service


@pytest.fixture
def synced_result():
    return LyricsResult(
        plain_text="One more time\nWe're gonna celebrate",
        lines=[LyricsLine(1500, "One more time"), LyricsLine(4250, "We're gonna celebrate")],
        track_name="One More Time",
        artist_name="Daft Punk"
    )


class TestCli:
    """Test CLI commands"""

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_lyrics_query(self, runner, service, synced_result):
        service.find_lyrics.return_value = synced_result

        result = runner.invoke(cli, ['lyrics', 'Daft Punk - One More Time'])

        assert result.exit_code == 0
        assert "Daft Punk - One More Time" in result.output
        assert "We're gonna celebrate" in result.output
        service.find_lyrics.assert_called_once_with('Daft Punk - One More Time')

    def test_lyrics_artist_and_title(self, runner, service, synced_result):
        service.load_lyrics.return_value = synced_result

        result = runner.invoke(cli, ['lyrics', '--artist', 'Daft Punk', '--title', 'One More Time'])

        assert result.exit_code == 0
        service.load_lyrics.assert_called_once_with('Daft Punk', 'One More Time')

    def test_lyrics_synced(self, runner, service, synced_result):
        service.find_lyrics.return_value = synced_result

        result = runner.invoke(cli, ['lyrics', '--synced', 'Daft Punk - One More Time'])

        assert result.exit_code == 0
        assert "[00:01.50]One more time" in result.output
        assert "[00:04.25]We're gonna celebrate" in result.output

    def test_lyrics_output_file(self, runner, service, synced_result, temp_dir):
        service.find_lyrics.return_value = synced_result
        target = temp_dir / "lyrics.txt"

        result = runner.invoke(cli, ['lyrics', 'Daft Punk - One More Time', '--output', str(target)])

        assert result.exit_code == 0
        assert target.read_text(encoding='utf-8') == synced_result.plain_text + "\n"

    def test_lyrics_not_found(self, runner, service):
        service.find_lyrics.return_value = None

        result = runner.invoke(cli, ['lyrics', 'Nobody - Nothing'])

        assert result.exit_code == 1

    def test_lyrics_requires_query(self, runner, service):
        result = runner.invoke(cli, ['lyrics'])
        assert result.exit_code == 2
        service.find_lyrics.assert_not_called()

    def test_token(self, runner, service):
        service.token_manager.get_token.return_value = Token(
            value="0123456789abcdef0123456789abcdef01234567",
            expires_at=4_102_444_800.0
        )
        service.app_identity.app_id = "web-desktop-app-v1.0"
        service.app_identity.discovered = False

        result = runner.invoke(cli, ['token', '--refresh'])

        assert result.exit_code == 0
        assert "012345...234567" in result.output
        assert "web-desktop-app-v1.0 (configured)" in result.output
        assert "0123456789abcdef0123456789abcdef01234567" not in result.output
        service.token_manager.get_token.assert_called_once_with(force_refresh=True)

    def test_config_show(self, runner, service):
        result = runner.invoke(cli, ['config', 'show'])

        assert "Musixmatch:" in result.output
        assert "token_ttl" in result.output


    def test_lyrics_json(self, runner, service, synced_result):
        service.find_lyrics.return_value = synced_result

        result = runner.invoke(cli, ['lyrics', '--json', 'Daft Punk - One More Time'])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['track_name'] == "One More Time"
        assert data['lines'][0] == {'offset_ms': 1500, 'text': "One more time"}
        assert data['source'] == "Musixmatch"

    def test_config_set(self, runner, service, temp_dir):
        """Test changes are written to the user config file"""
        settings = Settings(config_path=str(temp_dir / "missing.yaml"))
        settings.security.config_directory = str(temp_dir)

        with patch('mxlyrics.main.get_settings', return_value=settings):
            result = runner.invoke(cli, ['config', 'set', '--cache-ttl', '600', '--log-level', 'debug'])

        assert result.exit_code == 0
        assert "Cache TTL: 600s" in result.output
        saved = Settings(config_path=str(temp_dir / "config.yaml"))
        assert saved.cache.ttl == 600
        assert saved.logging.level == "DEBUG"

    def test_config_set_without_changes(self, runner, service):
        result = runner.invoke(cli, ['config', 'set'])

        assert result.exit_code == 0
        assert "No changes specified" in result.output


class TestMaskToken:
    """Test token masking"""

    def test_long_token(self):
        assert mask_token("abcdef1234567890") == "abcdef...567890"

    def test_short_token(self):
        assert mask_token("abc") == "***"
