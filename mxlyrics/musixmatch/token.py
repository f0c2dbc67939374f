"""
Musixmatch user token acquisition

The desktop API needs a short-lived "usertoken". There is no documented way to
obtain one, so two strategies are tried in order:

1. Scrape: fetch the public homepage, look for a token in the inline scripts,
   then in the bundled scripts it links to (main/app/bundle). This mimics a
   real browser visit and is the least likely to be rate limited.
2. API: call token.get with the current app id and read body.user_token.

While scanning scripts the scraper also picks up any app id it sees and
stores it in AppIdentity, whether or not a token was found. The lyrics
fetcher sends that app id on every call.
"""

import re
import threading
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .http import HttpClient
from ..config.settings import get_settings, DEFAULT_APP_ID
from ..exceptions import AcquisitionError, MxLyricsError, ParseError
from ..utils.logger import get_logger, log_performance


TOKEN_PATTERN = re.compile(r'usertoken["\']?\s*[:=]\s*["\']([a-f0-9]{40,})["\']', re.IGNORECASE)
CONFIG_TOKEN_PATTERN = re.compile(r'token["\']?\s*[:=]\s*["\']([a-f0-9]{40,})["\']', re.IGNORECASE)
APP_ID_PATTERN = re.compile(r'app_id["\']?\s*[:=]\s*["\']([^"\']+)["\']', re.IGNORECASE)


class AppIdentity:
    """
    Client identifier sent with every API call

    Shared between the token acquirer (writer) and the lyrics fetcher (reader).
    Last write wins.
    """

    def __init__(self, default: str = DEFAULT_APP_ID):
        self.default = default
        self._app_id: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def app_id(self) -> str:
        with self._lock:
            return self._app_id or self.default

    def update(self, app_id: str) -> None:
        with self._lock:
            self._app_id = app_id

    @property
    def discovered(self) -> bool:
        with self._lock:
            return self._app_id is not None


class TokenAcquirer:
    """Obtains fresh user tokens, scraping first and falling back to the token endpoint"""

    def __init__(self, http: HttpClient, app_identity: Optional[AppIdentity] = None):
        """
        Initialize the acquirer

        Args:
            http: Transport used for both the scrape and the endpoint call
            app_identity: Shared app id holder, a new one is created if omitted
        """
        settings = get_settings()
        self.logger = get_logger(__name__)
        self.http = http
        self.app_identity = app_identity or AppIdentity(settings.musixmatch.app_id)

        self.homepage_url = settings.musixmatch.homepage_url
        self.token_endpoint = f"{settings.musixmatch.api_base_url.rstrip('/')}/token.get"
        self.script_hints = list(settings.musixmatch.script_hints)

    @log_performance
    def acquire(self) -> str:
        """
        Obtain a new user token

        Returns:
            The token value

        Raises:
            AcquisitionError: If both the scrape and the token endpoint fail
        """
        token = None
        try:
            token = self.extract_token_from_website()
        except Exception as e:
            self.logger.debug(f"Failed to extract token from website, falling back to API: {e}")

        if token:
            return token

        return self.fetch_token_from_api()

    def extract_token_from_website(self) -> Optional[str]:
        """
        Scrape the homepage and its bundled scripts for a token

        Returns:
            Token value, or None if no script contained one

        Script tags whose src cannot be parsed as a URL are skipped.

        Raises:
            TransientNetworkError: If the homepage itself cannot be fetched
            ParseError: If the homepage markup is rejected by the parser
        """
        self.logger.debug("Attempting to extract token from Musixmatch website")

        html = self.http.get_text(self.homepage_url)
        try:
            soup = BeautifulSoup(html, "html.parser")
        except ParserRejectedMarkup as e:
            raise ParseError(
                f"Failed to parse Musixmatch homepage: {e}",
                details={'url': self.homepage_url, 'original_error': e}
            ) from e

        script_urls: List[str] = []
        inline_scripts: List[str] = []
        for script in soup.find_all("script"):
            src = script.get("src")
            if src:
                try:
                    path = urlparse(src).path
                    script_url = urljoin(self.homepage_url, src)
                except ValueError as e:
                    self.logger.debug(f"Skipping malformed script URL {src!r}: {e}")
                    continue
                if any(hint in path for hint in self.script_hints):
                    script_urls.append(script_url)
            elif script.string:
                inline_scripts.append(script.string)

        for content in inline_scripts:
            token = self.extract_token_from_script(content)
            if token:
                self.logger.debug("Extracted token from inline script")
                return token

        for script_url in script_urls:
            try:
                content = self.http.get_text(script_url)
            except MxLyricsError as e:
                self.logger.debug(f"Skipping script {script_url}: {e}")
                continue

            token = self.extract_token_from_script(content)
            if token:
                self.logger.debug(f"Extracted token from script: {script_url}")
                return token

        self.logger.debug("No token found in website scripts")
        return None

    def extract_token_from_script(self, content: str) -> Optional[str]:
        """
        Scan a script body for a token, recording any app id seen on the way

        Args:
            content: JavaScript source

        Returns:
            The first token match, or None
        """
        app_id_match = APP_ID_PATTERN.search(content)
        if app_id_match:
            self.app_identity.update(app_id_match.group(1))
            self.logger.debug(f"Extracted app_id: {app_id_match.group(1)}")

        for pattern in (TOKEN_PATTERN, CONFIG_TOKEN_PATTERN):
            match = pattern.search(content)
            if match:
                return match.group(1)

        return None

    def fetch_token_from_api(self) -> str:
        """
        Request a token from the token endpoint

        Raises:
            AcquisitionError: On network failure, non-200 status or missing user_token
        """
        app_id = self.app_identity.app_id
        self.logger.debug(f"Fetching token from Musixmatch API (app_id={app_id})")

        try:
            body = self.http.get_api(self.token_endpoint, params={'app_id': app_id})
        except MxLyricsError as e:
            raise AcquisitionError(
                f"Token endpoint request failed: {e}",
                details={'url': self.token_endpoint, 'original_error': e}
            ) from e

        token = body.get('user_token') if isinstance(body, dict) else None
        if not token or not isinstance(token, str):
            raise AcquisitionError(
                "Failed to extract token from API response",
                details={'url': self.token_endpoint}
            )

        self.logger.debug("Successfully fetched token from API")
        return token
