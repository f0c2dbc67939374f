"""
HTTP transport for the Musixmatch desktop API

A thin wrapper over requests. Every request uses the configured timeout and
is never retried here: callers fall through to their next strategy instead.

requests.Session is not documented as thread-safe, so each thread gets its
own session (created on first use). A session passed in explicitly is used
by every thread as-is.

All API responses come wrapped in an envelope:

    {"message": {"header": {"status_code": 200, ...}, "body": {...}}}

get_api() unwraps it and raises ProviderStatusError for any status other
than 200.
"""

import threading
from typing import Any, Dict, List, Optional

import requests

from ..config.settings import get_settings
from ..exceptions import TransientNetworkError, ProviderStatusError, ParseError
from ..utils.logger import get_logger


class HttpClient:
    """GET client shared by the token acquirer and the lyrics fetcher"""

    def __init__(self, timeout: Optional[float] = None, user_agent: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the HTTP client

        Args:
            timeout: Request timeout in seconds (connect and read), defaults to settings
            user_agent: User-Agent header, defaults to settings
            session: Pre-built session shared by all threads, mainly for tests
        """
        settings = get_settings()
        self.logger = get_logger(__name__)
        self.timeout = timeout if timeout is not None else settings.network.request_timeout
        self.headers = {
            'Accept': 'application/json',
            'User-Agent': user_agent or settings.network.user_agent,
        }

        self._shared_session = session
        if session is not None:
            session.headers.update(self.headers)

        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The session for the calling thread"""
        if self._shared_session is not None:
            return self._shared_session

        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            raise TransientNetworkError(
                f"Request to {url} failed: {e}",
                details={'url': url, 'original_error': e}
            ) from e

    def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        GET a document as text (homepage HTML, script bundles)

        Raises:
            TransientNetworkError: On timeouts, connection failures and non-2xx responses
        """
        return self._get(url, params).text

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a document and decode it as JSON

        Raises:
            TransientNetworkError: On network failures
            ParseError: If the body is not valid JSON
        """
        response = self._get(url, params)
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}", details={'url': url}) from e

    def get_api(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a provider endpoint and return the unwrapped envelope body

        Raises:
            TransientNetworkError: On network failures
            ParseError: If the response is not an envelope
            ProviderStatusError: If message.header.status_code is not 200
        """
        data = self.get_json(url, params)

        message = data.get('message') if isinstance(data, dict) else None
        if not isinstance(message, dict):
            raise ParseError(f"Missing response envelope from {url}", details={'url': url})

        header = message.get('header')
        if not isinstance(header, dict):
            raise ParseError(f"Malformed response header from {url}", details={'url': url})

        try:
            status_code = int(header.get('status_code') or 0)
        except (TypeError, ValueError):
            status_code = 0

        if status_code != 200:
            raise ProviderStatusError(
                status_code,
                details={'url': url, 'hint': header.get('hint')}
            )

        return message.get('body')

    def close(self) -> None:
        """Release pooled connections of every session this client opened"""
        if self._shared_session is not None:
            self._shared_session.close()

        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()
