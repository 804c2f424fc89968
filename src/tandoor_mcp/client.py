"""Base API client for the Tandoor REST API.

Handles the session guard, bearer header injection and mapping of HTTP
failures to RemoteCallError kinds. There are no retries: a failed call is
reported to the tool caller as-is.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import httpx

from tandoor_mcp.auth import TandoorAuthenticator
from tandoor_mcp.config import Config
from tandoor_mcp.models.auth import token_preview
from tandoor_mcp.session import Session, SessionGuard
from tandoor_mcp.utils.errors import RemoteCallError, RemoteFailure

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


class TandoorClient:
    """HTTP client for the Tandoor API.

    Each call holds the client's lock for the guard check plus the single
    HTTP exchange, so concurrent tool invocations sharing one client trigger
    at most one authentication between them.
    """

    def __init__(
        self,
        config: Config,
        session: Session,
        authenticator: TandoorAuthenticator | None = None,
    ) -> None:
        self._base_url = config.settings.base_url
        self._authenticator = authenticator or TandoorAuthenticator(
            self._base_url, timeout=config.settings.auth_timeout
        )
        self._guard = SessionGuard(session, self._authenticator)
        self._http = httpx.Client(timeout=config.settings.request_timeout)
        self._lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def guard(self) -> SessionGuard:
        return self._guard

    def ensure_authenticated(self) -> str:
        """Resolve a token without making an API call."""
        with self._lock:
            return self._guard.require_token()

    def login(self) -> str:
        """Force one authentication round-trip (startup and `auth login`)."""
        with self._lock:
            return self._guard.login()

    def request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | list | None = None,
        params: dict[str, Any] | None = None,
        not_found: str | None = None,
    ) -> Any:
        """Make an authenticated API request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE).
            path: API path below /api (e.g. "/recipe/").
            body: JSON request body.
            params: Query parameters; None values are dropped.
            not_found: Message to use if the server answers 404.

        Returns:
            The decoded JSON, or None for empty responses.

        Raises:
            SessionUnavailableError: no token and no credentials.
            AuthenticationError: the lazy authentication attempt failed.
            RemoteCallError: the API call itself failed.
        """
        url = self._base_url + API_PREFIX + path
        query = {k: v for k, v in (params or {}).items() if v is not None}

        with self._lock:
            token = self._guard.require_token()
            logger.debug(f"{method} {url} params={query or None}")
            logger.debug(f"Using authentication token: {token_preview(token)}")

            try:
                response = self._http.request(
                    method=method,
                    url=url,
                    headers=self._build_headers(token),
                    json=body,
                    params=query or None,
                )
            except httpx.HTTPError as e:
                logger.error(f"Network error on {method} {path}: {e}")
                raise RemoteCallError(
                    RemoteFailure.NETWORK, f"Failed to connect to Tandoor API: {e}"
                ) from e

        logger.debug(f"Response: {response.status_code}")

        if not 200 <= response.status_code < 300:
            raise self._status_error(method, path, response, not_found)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Failed to parse response from {method} {path}: {e}")
            raise RemoteCallError(
                RemoteFailure.MALFORMED_RESPONSE, f"Invalid response format: {e}", response.status_code
            ) from e

    def get(self, path: str, **kwargs: Any) -> Any:
        """Convenience method for GET requests."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        """Convenience method for POST requests."""
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        """Convenience method for PATCH requests."""
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        """Convenience method for DELETE requests."""
        return self.request("DELETE", path, **kwargs)

    def _build_headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _status_error(
        self,
        method: str,
        path: str,
        response: httpx.Response,
        not_found: str | None,
    ) -> RemoteCallError:
        status = response.status_code
        error_detail = response.text[:500]
        logger.error(f"{method} {path} failed with status {status}: {error_detail}")

        if status == 400:
            kind, message = RemoteFailure.VALIDATION, f"Request rejected: {error_detail}"
        elif status == 401:
            kind, message = RemoteFailure.UNAUTHORIZED, "Authentication expired or invalid. Please re-authenticate."
        elif status == 403:
            kind, message = RemoteFailure.FORBIDDEN, f"Access denied to {path}. Check user permissions."
        elif status == 404:
            kind, message = RemoteFailure.NOT_FOUND, not_found or f"Not found: {path}"
        elif status >= 500:
            kind, message = RemoteFailure.SERVER_ERROR, f"Tandoor server error ({status}): {error_detail}"
        else:
            kind, message = RemoteFailure.UNEXPECTED_STATUS, f"API error (HTTP {status}): {error_detail}"
        return RemoteCallError(kind, message, status)

    def close(self) -> None:
        """Close the underlying HTTP clients."""
        self._http.close()
        self._authenticator.close()
