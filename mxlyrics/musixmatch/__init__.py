"""
Musixmatch desktop API client

- HttpClient: session-backed transport that unwraps the provider envelope
- TokenAcquirer / AppIdentity: obtain user tokens and track the client app id
- LyricsFetcher: endpoint fallback chain returning LyricsResult objects
"""

from .http import HttpClient
from .token import TokenAcquirer, AppIdentity
from .fetcher import LyricsFetcher

__all__ = [
    'HttpClient',
    'TokenAcquirer',
    'AppIdentity',
    'LyricsFetcher'
]
