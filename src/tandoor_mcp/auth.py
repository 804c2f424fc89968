"""Token authentication against the Tandoor API.

Tandoor rate-limits /api-token-auth/ to roughly 10 requests per day per IP,
so this module performs exactly one exchange per call and never retries.
Caching and sharing the resulting token is the job of tandoor_mcp.session.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from tandoor_mcp.models.auth import AuthRequest, Credentials, TokenResponse, token_preview
from tandoor_mcp.utils.errors import AuthenticationError, AuthFailure

logger = logging.getLogger(__name__)

AUTH_PATH = "/api-token-auth/"


class TandoorAuthenticator:
    """Exchanges a username/password pair for a bearer token."""

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = httpx.Client(timeout=timeout)
        self.attempts = 0
        self.failures = 0

    @property
    def auth_url(self) -> str:
        return self._base_url + AUTH_PATH

    def authenticate(self, credentials: Credentials) -> str:
        """Perform one credential exchange and return the token.

        Raises:
            AuthenticationError: with a kind identifying the failure.
        """
        if not credentials.username or not credentials.password:
            raise AuthenticationError(
                AuthFailure.MALFORMED_CREDENTIALS,
                "Username and password must both be non-empty.",
            )

        self.attempts += 1
        logger.info(f"Attempting authentication for user: {credentials.username}")
        logger.debug(f"Making authentication request to: {self.auth_url}")

        body = AuthRequest(username=credentials.username, password=credentials.password)
        try:
            response = self._http.post(self.auth_url, json=body.model_dump())
        except httpx.HTTPError as e:
            self._record_failure()
            logger.error(f"Network error during authentication: {e}")
            raise AuthenticationError(
                AuthFailure.UNREACHABLE,
                f"Failed to connect to Tandoor server at {self._base_url}: {e}",
            ) from e

        logger.debug(f"Authentication response status: {response.status_code}")
        if not 200 <= response.status_code < 300:
            self._record_failure()
            raise self._status_error(response)

        try:
            token = TokenResponse(**response.json()).token
        except (ValueError, TypeError, ValidationError) as e:
            self._record_failure()
            logger.error(f"Failed to parse authentication response: {e}")
            raise AuthenticationError(
                AuthFailure.MALFORMED_RESPONSE,
                f"Invalid response from Tandoor server: {e}",
                response.status_code,
            ) from e

        logger.info(f"Authentication successful for user: {credentials.username}")
        logger.debug(f"Received token: {token_preview(token)}")
        return token

    def _status_error(self, response: httpx.Response) -> AuthenticationError:
        """Map a non-success status from the token endpoint to a failure kind."""
        status = response.status_code
        error_body = response.text
        logger.error(f"Authentication failed with status {status}: {error_body}")

        if status == 400:
            kind, message = AuthFailure.MALFORMED_CREDENTIALS, "Invalid credentials provided. Please check username and password."
        elif status == 401:
            kind, message = AuthFailure.INVALID_CREDENTIALS, "Authentication failed: Invalid username or password"
        elif status == 403:
            kind, message = AuthFailure.ACCOUNT_DISABLED, "Access denied: User account may be disabled"
        elif status == 404:
            kind, message = AuthFailure.ENDPOINT_NOT_FOUND, f"Tandoor API endpoint not found. Check your base URL: {self._base_url}"
        elif status >= 500:
            kind, message = AuthFailure.SERVER_ERROR, f"Tandoor server error ({status}): {error_body}"
        else:
            kind, message = AuthFailure.UNEXPECTED_STATUS, f"Authentication failed with status {status}: {error_body}"

        if self.failures > 1:
            message += f" ({self.failures} failed attempts this process; likely rate-limited)"
            logger.warning(
                f"{self.failures} authentication failures so far; Tandoor is likely rate-limiting "
                "this client. Set TANDOOR_AUTH_TOKEN to avoid further attempts."
            )
        return AuthenticationError(kind, message, status)

    def _record_failure(self) -> None:
        self.failures += 1

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
