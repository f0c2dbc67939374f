"""Test configuration loading and validation"""

import yaml

from mxlyrics.config.settings import Settings


class TestSettings:
    """Test defaults, YAML loading and environment overrides"""

    def test_defaults(self, monkeypatch, temp_dir):
        monkeypatch.chdir(temp_dir)
        for var in ('MXM_APP_ID', 'MXM_API_BASE_URL', 'MXM_TOKEN_FILE', 'MXLYRICS_LOG_LEVEL'):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(config_path=str(temp_dir / "missing.yaml"))

        assert settings.musixmatch.app_id == "web-desktop-app-v1.0"
        assert settings.musixmatch.token_ttl == 55.0
        assert settings.musixmatch.token_persist_interval == 5.0
        assert settings.cache.ttl == 300.0
        assert settings.cache.max_entries == 100
        assert settings.network.request_timeout == 8.0

    def test_yaml_file(self, temp_dir):
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.dump({
            'cache': {'ttl': 60, 'max_entries': 10},
            'network': {'request_timeout': 3},
            'unknown_section': {'x': 1},
        }))

        settings = Settings(config_path=str(config_file))

        assert settings.cache.ttl == 60
        assert settings.cache.max_entries == 10
        assert settings.network.request_timeout == 3

    def test_environment_overrides(self, monkeypatch, temp_dir):
        monkeypatch.setenv('MXM_APP_ID', 'web-desktop-app-v2.0')
        monkeypatch.setenv('MXM_TOKEN_FILE', str(temp_dir / "tok.json"))

        settings = Settings(config_path=str(temp_dir / "missing.yaml"))

        assert settings.musixmatch.app_id == 'web-desktop-app-v2.0'
        assert settings.get_token_storage_path() == temp_dir / "tok.json"

    def test_validation(self, temp_dir):
        settings = Settings(config_path=str(temp_dir / "missing.yaml"))
        assert settings.validate()

        settings.cache.max_entries = 0
        settings.musixmatch.token_ttl = -1
        assert not settings.validate()

    def test_save_config(self, temp_dir):
        settings = Settings(config_path=str(temp_dir / "missing.yaml"))
        settings.cache.ttl = 120
        target = temp_dir / "out" / "config.yaml"

        settings.save_config(str(target))

        assert Settings(config_path=str(target)).cache.ttl == 120

    def test_summary(self, temp_dir):
        settings = Settings(config_path=str(temp_dir / "missing.yaml"))
        settings.cache.max_entries = 50

        summary = str(settings)

        assert "50 entries @ 300s" in summary
        assert "Timeout: 8s" in summary
