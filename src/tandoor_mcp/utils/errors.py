"""Error taxonomy and structured error payloads for agent-friendly output."""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any

from rich.console import Console

console = Console(stderr=True)


class AuthFailure(str, Enum):
    """Why a credential exchange against /api-token-auth/ failed."""
    MALFORMED_CREDENTIALS = "MALFORMED_CREDENTIALS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    ENDPOINT_NOT_FOUND = "ENDPOINT_NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    UNREACHABLE = "UNREACHABLE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    UNEXPECTED_STATUS = "UNEXPECTED_STATUS"


class RemoteFailure(str, Enum):
    """Why a downstream API call failed after a token was obtained."""
    VALIDATION = "VALIDATION"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK = "NETWORK"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    UNEXPECTED_STATUS = "UNEXPECTED_STATUS"


class TandoorError(Exception):
    """Base class for every failure reported to a tool caller."""

    code = "TANDOOR_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(TandoorError):
    """Missing or invalid startup configuration."""

    code = "CONFIGURATION_ERROR"


class InvalidArgumentError(TandoorError):
    """A tool argument was rejected before any remote call."""

    code = "INVALID_ARGUMENT"


class AuthenticationError(TandoorError):
    """The credential exchange failed. Never retried automatically."""

    def __init__(self, kind: AuthFailure, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def code(self) -> str:  # type: ignore[override]
        return f"AUTH_{self.kind.value}"


class SessionUnavailableError(TandoorError):
    """No cached token and no credentials to obtain one. No network I/O was attempted."""

    code = "SESSION_UNAVAILABLE"


class RemoteCallError(TandoorError):
    """A Tandoor API call failed after authentication succeeded."""

    def __init__(self, kind: RemoteFailure, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.kind.value


_RATE_LIMIT_HINT = (
    "Tandoor allows only ~10 authentication attempts per day. If this keeps failing you are "
    "likely rate-limited: wait, or set TANDOOR_AUTH_TOKEN to a previously issued token"
)

# Actionable hints keyed by error code
_ERROR_HINTS: dict[str, str] = {
    "CONFIGURATION_ERROR": "Check TANDOOR_BASE_URL and TANDOOR_USERNAME/TANDOOR_PASSWORD or TANDOOR_AUTH_TOKEN",
    "INVALID_ARGUMENT": "Check parameter values and formats (dates are YYYY-MM-DD)",
    "SESSION_UNAVAILABLE": "Configure TANDOOR_USERNAME/TANDOOR_PASSWORD or TANDOOR_AUTH_TOKEN and restart the server",
    "AUTH_MALFORMED_CREDENTIALS": "Username and password must both be non-empty",
    "AUTH_INVALID_CREDENTIALS": f"Fix TANDOOR_USERNAME/TANDOOR_PASSWORD. {_RATE_LIMIT_HINT}",
    "AUTH_ACCOUNT_DISABLED": "The Tandoor account may be disabled — ask an administrator",
    "AUTH_ENDPOINT_NOT_FOUND": "TANDOOR_BASE_URL probably points at the wrong host or path",
    "AUTH_SERVER_ERROR": _RATE_LIMIT_HINT,
    "AUTH_UNREACHABLE": "Connection error — check that Tandoor is running and reachable",
    "AUTH_MALFORMED_RESPONSE": "TANDOOR_BASE_URL may not point at a Tandoor server",
    "AUTH_UNEXPECTED_STATUS": _RATE_LIMIT_HINT,
    "VALIDATION": "The request was rejected — check parameter values and types",
    "UNAUTHORIZED": "Token expired or invalid — restart the server or set a fresh TANDOOR_AUTH_TOKEN",
    "FORBIDDEN": "The Tandoor user lacks permission for this space or object",
    "NOT_FOUND": "The specified object does not exist — verify the ID",
    "SERVER_ERROR": "Tandoor returned a server error — try again later",
    "NETWORK": "Request failed or timed out — check network connectivity",
    "MALFORMED_RESPONSE": "Tandoor returned an unexpected response body",
}


def get_hint(code: str) -> str | None:
    """Match an error code to an actionable hint."""
    return _ERROR_HINTS.get(code)


def error_payload(error: Exception) -> dict[str, Any]:
    """Convert an exception into the structured error object returned to agents.

    {"error": true, "code": "NOT_FOUND", "message": "...", "hint": "..."}

    Exceptions outside the Tandoor taxonomy are reported as RUNTIME_ERROR.
    """
    if isinstance(error, TandoorError):
        code = error.code
        message = error.message
    else:
        code = "RUNTIME_ERROR"
        message = str(error)

    payload: dict[str, Any] = {
        "error": True,
        "code": code,
        "message": message,
    }
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        payload["status_code"] = status_code
    hint = get_hint(code)
    if hint:
        payload["hint"] = hint
    return payload


def handle_error(error: Exception) -> None:
    """Handle an error with structured output to stdout and human-readable output to stderr."""
    payload = error_payload(error)

    json.dump(payload, sys.stdout)
    sys.stdout.write("\n")

    console.print(f"[red]Error:[/red] {payload['message']}")
    if "hint" in payload:
        console.print(f"[dim]Hint: {payload['hint']}[/dim]")
