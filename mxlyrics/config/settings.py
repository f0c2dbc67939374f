"""
Configuration management for mxlyrics

This module handles loading, validation, and management of application settings
from multiple sources including YAML files and environment variables. It provides
a centralized configuration system that supports hot-reloading and validation.

The configuration is organized into logical sections using dataclasses:
- Musixmatch provider settings (endpoints, app id, token lifetime)
- Result cache settings (TTL, capacity)
- Network options (timeout, user agent)
- Logging output
- Token storage locations

The token file path and app id can be overridden from environment variables,
while everything else normally lives in a YAML file.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


DEFAULT_APP_ID = "web-desktop-app-v1.0"


@dataclass
class MusixmatchConfig:
    """
    Musixmatch provider configuration

    Endpoints and token lifetime for the desktop API. The app id is only the
    starting value: a homepage scrape may replace it at runtime.
    """
    app_id: str = DEFAULT_APP_ID
    api_base_url: str = "https://apic-desktop.musixmatch.com/ws/1.1"
    homepage_url: str = "https://www.musixmatch.com/"
    token_ttl: float = 55.0  # seconds
    token_persist_interval: float = 5.0  # seconds
    script_hints: List[str] = field(default_factory=lambda: ["main", "app", "bundle"])


@dataclass
class CacheConfig:
    """
    In-memory result cache configuration

    Entries (including "no lyrics found") live for `ttl` seconds; at most
    `max_entries` are kept.
    """
    ttl: float = 300.0
    max_entries: int = 100


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls application logging behavior including log levels, file output,
    rotation, and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class NetworkConfig:
    """
    Network and HTTP configuration settings

    Every request (homepage scrape, token endpoint, lyrics endpoints) uses the
    same timeout. Failed requests are never retried in place.
    """
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    request_timeout: float = 8.0


@dataclass
class SecurityConfig:
    """
    Security and storage configuration

    Controls where the provider token is persisted between runs.
    """
    token_storage_path: str = "~/.mxlyrics/mxm_token.json"
    config_directory: str = "~/.mxlyrics/"


class Settings:
    """
    Main settings class that manages all configuration

    This class serves as the central configuration manager, loading settings
    from multiple sources (YAML files, environment variables) and providing
    a unified interface for accessing configuration throughout the application.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".mxlyrics"

        # Initialize all configuration objects with default values
        self.musixmatch = MusixmatchConfig()
        self.cache = CacheConfig()
        self.logging = LoggingConfig()
        self.network = NetworkConfig()
        self.security = SecurityConfig()

        # Load configuration from various sources in order of precedence
        self._load_config()
        self._load_environment_variables()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in multiple locations in order of
        precedence. The first file found will be used.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except Exception as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _sections(self) -> Dict[str, Any]:
        return {
            'musixmatch': self.musixmatch,
            'cache': self.cache,
            'logging': self.logging,
            'network': self.network,
            'security': self.security,
        }

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Updates only the attributes that exist in both the config file and
        the dataclass definition.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load overrides from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'MXM_APP_ID': lambda v: setattr(self.musixmatch, 'app_id', v),
            'MXM_API_BASE_URL': lambda v: setattr(self.musixmatch, 'api_base_url', v),
            'MXM_TOKEN_FILE': lambda v: setattr(self.security, 'token_storage_path', v),
            'MXLYRICS_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_config_directory(self) -> Path:
        """
        Get the expanded config directory path

        Returns:
            Path object for the configuration directory
        """
        return Path(self.security.config_directory).expanduser()

    def get_token_storage_path(self) -> Path:
        """
        Get the expanded token storage path

        Returns:
            Path object for the token storage file
        """
        return Path(self.security.token_storage_path).expanduser()

    def save_config(self, path: Optional[str] = None) -> None:
        """
        Save current configuration to file

        Args:
            path: Custom path to save config, defaults to user config directory

        Raises:
            Exception: If the configuration cannot be saved
        """
        if not path:
            path = self.get_config_directory() / "config.yaml"
        else:
            path = Path(path)

        config_data = {
            name: self._dataclass_to_dict(section)
            for name, section in self._sections().items()
        }

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except Exception as e:
            raise Exception(f"Failed to save config to {path}: {e}")

    def _dataclass_to_dict(self, obj) -> Dict[str, Any]:
        """Convert a config dataclass to a plain dictionary for YAML output"""
        result = {}
        for key, value in obj.__dict__.items():
            result[key] = value
        return result

    def validate(self) -> bool:
        """
        Validate current configuration

        Returns:
            True if configuration is valid, False otherwise
        """
        errors = []

        if not self.musixmatch.app_id:
            errors.append("Musixmatch app_id must not be empty")

        if self.musixmatch.token_ttl <= 0:
            errors.append(f"Invalid token TTL: {self.musixmatch.token_ttl}")

        if self.musixmatch.token_persist_interval < 0:
            errors.append(f"Invalid token persist interval: {self.musixmatch.token_persist_interval}")

        if self.cache.ttl <= 0:
            errors.append(f"Invalid cache TTL: {self.cache.ttl}")

        if self.cache.max_entries < 1:
            errors.append(f"Invalid cache size: {self.cache.max_entries}")

        if self.network.request_timeout <= 0:
            errors.append(f"Invalid request timeout: {self.network.request_timeout}")

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True

    def __str__(self) -> str:
        sections = [
            f"App ID: {self.musixmatch.app_id}",
            f"Token file: {self.security.token_storage_path}",
            f"Cache: {self.cache.max_entries} entries @ {self.cache.ttl:g}s",
            f"Timeout: {self.network.request_timeout:g}s",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
