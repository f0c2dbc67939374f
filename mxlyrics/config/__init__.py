"""
Configuration management package for mxlyrics

Two components:

1. Settings Management (settings.py):
   - Application configuration from YAML files and environment variables
   - Settings validation and persistence

2. Token Management (auth.py):
   - Musixmatch user token lifecycle with sliding expiry
   - Token file persistence across application restarts

Only settings are re-exported here: the logger imports them, and the token
module imports the logger. Import token classes from mxlyrics.config.auth.

Usage:

    from mxlyrics.config import get_settings

    settings = get_settings()
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',
    'reload_settings',
    'Settings'
]
