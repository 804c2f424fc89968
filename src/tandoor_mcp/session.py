"""Shared session state and the per-client session guard.

A single Session (credential store + token cache) is created at startup and
injected into every TandoorClient. Each client owns a SessionGuard that
resolves a bearer token in a fixed order before every API call:

    1. the client's own local token
    2. the shared token cache (adopted into the client)
    3. a network exchange with the configured credentials

Only step 3 touches the network and consumes one unit of Tandoor's daily
authentication limit.
"""

from __future__ import annotations

import logging
import threading

from tandoor_mcp.auth import TandoorAuthenticator
from tandoor_mcp.models.auth import (
    Credentials,
    Ready,
    SessionResolution,
    TokenStatus,
    Unavailable,
    token_preview,
)
from tandoor_mcp.utils.errors import SessionUnavailableError

logger = logging.getLogger(__name__)


class CredentialStore:
    """Read-only holder for the username/password pair, which may be absent."""

    def __init__(self, credentials: Credentials | None = None) -> None:
        self._credentials = credentials

    def get(self) -> Credentials | None:
        return self._credentials

    @property
    def has_credentials(self) -> bool:
        return self._credentials is not None


class TokenCache:
    """Zero-or-one bearer token shared by every client in the process.

    get/set are each atomic; there is no cross-call atomicity and the last
    writer wins.
    """

    def __init__(self, token: str | None = None) -> None:
        self._lock = threading.Lock()
        self._token = token or None

    def get(self) -> str | None:
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token
        logger.debug("Shared auth token updated")


class Session:
    """Process-wide authentication state, passed explicitly to every client."""

    def __init__(self, credentials: Credentials | None = None, token: str | None = None) -> None:
        self.credentials = CredentialStore(credentials)
        self.tokens = TokenCache(token)
        # Serializes network authentication across clients sharing this session
        self.auth_lock = threading.Lock()

    def inject_token(self, token: str) -> None:
        """Use a pre-issued token; no authentication request will be made while it is cached."""
        logger.info("Using pre-set auth token")
        self.tokens.set(token)


class SessionGuard:
    """Decides, before each API call, whether the client has a usable token.

    Not thread-safe on its own: TandoorClient serializes calls under its lock.
    """

    def __init__(self, session: Session, authenticator: TandoorAuthenticator) -> None:
        self._session = session
        self._authenticator = authenticator
        self._local_token: str | None = None

    @property
    def local_token(self) -> str | None:
        return self._local_token

    def resolve(self) -> SessionResolution:
        """Resolve a token: local, then shared cache, then network.

        Raises:
            AuthenticationError: if the network exchange fails. Nothing is cached
                in that case, so the next call tries again.
        """
        if self._local_token:
            return Ready(self._local_token)

        cached = self._session.tokens.get()
        if cached:
            logger.debug("Using shared authentication token")
            self._local_token = cached
            return Ready(cached)

        credentials = self._session.credentials.get()
        if credentials is None:
            return Unavailable("No authentication token cached and no credentials configured")

        with self._session.auth_lock:
            # Another client may have authenticated while we waited
            cached = self._session.tokens.get()
            if cached:
                self._local_token = cached
                return Ready(cached)

            logger.debug("Auto-authenticating with stored credentials")
            self._store(self._authenticator.authenticate(credentials))
        return Ready(self._local_token)  # type: ignore[arg-type]

    def require_token(self) -> str:
        """Return a usable token or raise SessionUnavailableError."""
        outcome = self.resolve()
        if isinstance(outcome, Unavailable):
            logger.error(f"Session unavailable: {outcome.reason}")
            raise SessionUnavailableError(outcome.reason)
        return outcome.token

    def login(self) -> str:
        """Authenticate explicitly with the stored credentials, replacing any current token."""
        credentials = self._session.credentials.get()
        if credentials is None:
            raise SessionUnavailableError("No credentials configured to authenticate with")
        with self._session.auth_lock:
            self._store(self._authenticator.authenticate(credentials))
        return self._local_token  # type: ignore[return-value]

    def status(self) -> TokenStatus:
        token = self._local_token or self._session.tokens.get()
        return TokenStatus(
            has_token=token is not None,
            has_credentials=self._session.credentials.has_credentials,
            token_preview=token_preview(token),
            auth_attempts=self._authenticator.attempts,
            auth_failures=self._authenticator.failures,
        )

    def _store(self, token: str) -> None:
        self._local_token = token
        self._session.tokens.set(token)
        logger.debug(f"Stored new auth token: {token_preview(token)}")
