"""Auth-related data models."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Long-lived username/password pair. The password never appears in repr."""
    username: str
    password: str = Field(repr=False)

    model_config = {"frozen": True}


class AuthRequest(BaseModel):
    """Body of POST /api-token-auth/."""
    username: str
    password: str


class TokenResponse(BaseModel):
    """Response from the Tandoor token endpoint."""
    token: str = Field(min_length=1)


class TokenStatus(BaseModel):
    """Which credential path a session currently has. Never carries the token itself."""
    has_token: bool
    has_credentials: bool
    token_preview: str | None = None
    auth_attempts: int = 0
    auth_failures: int = 0


@dataclass(frozen=True)
class Ready:
    """Session guard outcome: a usable bearer token."""
    token: str


@dataclass(frozen=True)
class Unavailable:
    """Session guard outcome: no token and no way to obtain one."""
    reason: str


SessionResolution = Ready | Unavailable


def token_preview(token: str | None) -> str | None:
    """First characters of a token, safe for logs."""
    if not token:
        return None
    return f"{token[:10]}..."
