"""
User token lifecycle for the Musixmatch desktop API

This module keeps a single valid user token available to the lyrics fetcher
across calls and across process restarts.

Key features:
- In-memory token with a sliding expiry: each use extends it by the TTL
- Throttled persistence so heavy call volume does not mean heavy disk I/O
- Token file restored on startup, so a restart within the TTL skips acquisition
- One lock around every read and write of the token state

The token file is a small JSON document:

    {"value": "<token>", "expires": <epoch milliseconds>}

Reading or writing it is best-effort. A missing, unreadable or corrupt file
simply means "no cached token" and leads to a fresh acquisition.
"""

import json
import threading
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

from .settings import get_settings
from ..exceptions import PersistenceError
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..musixmatch.token import TokenAcquirer


@dataclass(frozen=True)
class Token:
    """
    A user token and the moment it stops being usable

    Attributes:
        value: Opaque token string sent as the usertoken parameter
        expires_at: Absolute expiry in epoch seconds
    """
    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at

    def remaining(self, now: float) -> float:
        """Seconds left before expiry (never negative)"""
        return max(0.0, self.expires_at - now)


@dataclass(frozen=True)
class TokenFileRecord:
    """On-disk form of a Token, expiry stored in epoch milliseconds"""
    value: str
    expires: int

    @classmethod
    def from_token(cls, token: Token) -> "TokenFileRecord":
        return cls(value=token.value, expires=int(token.expires_at * 1000))

    def to_token(self) -> Token:
        return Token(value=self.value, expires_at=self.expires / 1000.0)

    def to_dict(self) -> Dict[str, Any]:
        return {'value': self.value, 'expires': self.expires}

    @classmethod
    def from_dict(cls, data: Any) -> "TokenFileRecord":
        """
        Build a record from decoded JSON

        Raises:
            ValueError: If fields are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("Token record must be a JSON object")

        value = data.get('value')
        expires = data.get('expires')
        if not isinstance(value, str) or not value:
            raise ValueError("Token record has no value")
        if isinstance(expires, bool) or not isinstance(expires, (int, float)):
            raise ValueError("Token record has no numeric expiry")

        return cls(value=value, expires=int(expires))


class TokenStore:
    """Reads and writes the token file"""

    def __init__(self, path: Path):
        """
        Args:
            path: Location of the token file
        """
        self.path = Path(path)

    def load(self) -> Optional[TokenFileRecord]:
        """
        Load the stored record

        Returns:
            The record, or None if the file does not exist

        Raises:
            PersistenceError: If the file exists but cannot be read or decoded
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return TokenFileRecord.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            raise PersistenceError(
                f"Failed to load stored token: {e}",
                details={'file_path': str(self.path), 'original_error': e}
            ) from e

    def save(self, record: TokenFileRecord) -> None:
        """
        Write the record, replacing any previous one

        Raises:
            PersistenceError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + '.tmp')
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f)
            tmp_path.replace(self.path)

            try:
                # 0o600 = owner read/write only
                self.path.chmod(0o600)
            except OSError:
                # Not supported everywhere (e.g. Windows)
                pass

        except OSError as e:
            raise PersistenceError(
                f"Failed to save token: {e}",
                details={'file_path': str(self.path), 'original_error': e}
            ) from e

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(f"Failed to remove token file: {e}",
                                   details={'file_path': str(self.path)}) from e


class TokenManager:
    """
    Hands out a valid user token, acquiring and persisting it as needed

    State machine: no token -> valid -> expired -> (refresh) -> valid.
    Every step runs under a single lock. A caller that finds a valid token
    returns without touching the network; a caller that has to refresh holds
    the lock for the whole acquisition, so concurrent callers never acquire
    twice.
    """

    def __init__(
        self,
        acquirer: "TokenAcquirer",
        store: TokenStore,
        ttl: Optional[float] = None,
        persist_interval: Optional[float] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the token manager

        Args:
            acquirer: Source of fresh tokens
            store: Token file access
            ttl: Token lifetime in seconds, defaults to settings (55s)
            persist_interval: Minimum seconds between sliding-expiry writes, defaults to settings (5s)
            clock: Time source in epoch seconds, injectable for tests
        """
        settings = get_settings()
        self.logger = get_logger(__name__)

        self.acquirer = acquirer
        self.store = store
        self.ttl = ttl if ttl is not None else settings.musixmatch.token_ttl
        self.persist_interval = (
            persist_interval if persist_interval is not None
            else settings.musixmatch.token_persist_interval
        )
        self._clock = clock

        self._lock = threading.Lock()
        self._token: Optional[Token] = None
        self._last_persist: float = 0.0

    def get_token(self, force_refresh: bool = False) -> Token:
        """
        Return a currently valid token

        Args:
            force_refresh: Skip the in-memory and stored tokens and acquire a new one

        Returns:
            A token valid for at least the TTL from now

        Raises:
            AcquisitionError: If a new token was needed and could not be obtained
        """
        with self._lock:
            now = self._clock()

            if not force_refresh and self._token is not None and self._token.is_valid(now):
                # Sliding expiry: every use keeps the token alive for another TTL
                self._token = replace(self._token, expires_at=now + self.ttl)
                if now - self._last_persist > self.persist_interval:
                    self._persist(now)
                return self._token

            if not force_refresh and self._token is None:
                stored = self._load_stored()
                if stored is not None and stored.is_valid(now):
                    self.logger.debug("Reusing token from token file")
                    self._token = stored
                    return stored

            return self._acquire()

    def invalidate(self, value: Optional[str] = None) -> None:
        """
        Forget the current token (memory and file) so the next call acquires a new one

        Args:
            value: The token that was rejected. When given, nothing happens
                   unless it is still the current token, so a token another
                   caller has just refreshed survives a late rejection of the
                   old one.
        """
        with self._lock:
            if value is not None and (self._token is None or self._token.value != value):
                self.logger.debug("Rejected token was already replaced, keeping current token")
                return
            self._token = None
            try:
                self.store.clear()
            except PersistenceError as e:
                self.logger.warning(str(e))
            self.logger.debug("User token invalidated")

    @property
    def current_token(self) -> Optional[Token]:
        """The in-memory token, valid or not (diagnostics only)"""
        with self._lock:
            return self._token

    def _acquire(self) -> Token:
        self.logger.debug("User token is invalid or expired, refreshing token...")
        value = self.acquirer.acquire()

        # Stamp expiry after acquisition, which may have taken a while
        acquired_at = self._clock()
        self._token = Token(value=value, expires_at=acquired_at + self.ttl)
        self._persist(acquired_at)
        self.logger.console_info("Acquired a new Musixmatch user token")
        return self._token

    def _load_stored(self) -> Optional[Token]:
        try:
            record = self.store.load()
        except PersistenceError as e:
            self.logger.warning(f"Ignoring unreadable token file: {e}")
            return None
        return record.to_token() if record else None

    def _persist(self, now: float) -> None:
        self._last_persist = now
        try:
            self.store.save(TokenFileRecord.from_token(self._token))
        except PersistenceError as e:
            self.logger.warning(str(e))
