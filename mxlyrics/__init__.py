"""
mxlyrics: Musixmatch lyrics lookups with automatic token management

Fetches plain and time-synchronized lyrics from the Musixmatch desktop API for
an "Artist - Title" query. The API wants a rotating, undocumented user token;
this package obtains one (scraping the public website first, falling back to
the token endpoint), keeps it alive across calls and restarts, and caches
lookup results for a few minutes.

## Package Layout

**Configuration (`mxlyrics/config/`)**
- YAML + environment settings (`settings.py`)
- User token persistence and lifecycle (`auth.py`)

**Musixmatch client (`mxlyrics/musixmatch/`)**
- HTTP transport and response envelope handling (`http.py`)
- Token acquisition by scrape or endpoint (`token.py`)
- Endpoint fallback chain for lyrics (`fetcher.py`)

**Lyrics (`mxlyrics/lyrics/`)**
- Result models, query/subtitle/text processing, result cache

**Service (`mxlyrics/service.py`)**
- `LyricsService`, the single entry point for hosts

**Utilities (`mxlyrics/utils/`)**
- Colored console and rotating file logging

## Quick Start

```bash
pip install -e .
mxlyrics lyrics "Daft Punk - One More Time"
mxlyrics lyrics "Daft Punk - One More Time" --synced
```

```python
from mxlyrics.service import get_lyrics_service

result = get_lyrics_service().find_lyrics("Daft Punk - One More Time")
```

Lookups are best-effort: when nothing is found, or anything fails along the
way, the service returns None instead of raising.
"""

__version__ = "0.3.0"

__author__ = "mxlyrics contributors"

__description__ = "Fetch plain and synchronized lyrics from Musixmatch with automatic token management"

__all__ = [
    "__version__",
    "__author__",
    "__description__"
]
