"""Configuration management for the Tandoor MCP server.

Loads connection settings from the environment (and .env) and the
suggestion policy from an optional YAML file.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from tandoor_mcp.models.auth import Credentials
from tandoor_mcp.utils.errors import ConfigurationError

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_POLICY_PATH = "config/tandoor.yaml"


class SuggestionPolicy(BaseModel):
    """Matching thresholds for pantry-driven recipe suggestions."""
    maximum_use_threshold: float = Field(default=50.0, description="Min % of ingredients on hand in maximum-use mode")
    expiring_threshold: float = Field(default=30.0, description="Min % of ingredients on hand in expiring mode")
    expiring_max_missing: int = Field(default=3, description="Max missing ingredients in expiring mode")
    default_threshold: float = Field(default=60.0, description="Min % of ingredients on hand in any other mode")
    recipe_sample_size: int = Field(default=20, description="Recipes inspected per suggestion request")
    pantry_sample_size: int = Field(default=100, description="Foods fetched when building the pantry")
    max_results: int = Field(default=10, description="Suggestions returned")


class Settings(BaseModel):
    """Connection and credential settings, read from TANDOOR_* environment variables."""
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Tandoor server URL")
    username: str = Field(default="", description="Tandoor username")
    password: str = Field(default="", repr=False, description="Tandoor password")
    auth_token: str = Field(default="", repr=False, description="Pre-issued token; bypasses authentication")
    log_level: str = Field(default="INFO", description="Logging verbosity")
    auth_timeout: float = Field(default=10.0, description="Timeout for the token endpoint in seconds")
    request_timeout: float = Field(default=30.0, description="Timeout for API calls in seconds")

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")) or len(value.split("://", 1)[1]) == 0:
            raise ValueError(f"TANDOOR_BASE_URL must be an http(s) URL, got '{value}'")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.strip().upper() or "INFO"
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{value}'")
        return value


class Config(BaseModel):
    """Settings plus suggestion policy."""
    settings: Settings
    policy: SuggestionPolicy = Field(default_factory=SuggestionPolicy)

    @property
    def credentials(self) -> Credentials | None:
        """The configured username/password pair, or None if either part is missing."""
        if self.settings.username and self.settings.password:
            return Credentials(username=self.settings.username, password=self.settings.password)
        return None

    @property
    def auth_token(self) -> str | None:
        return self.settings.auth_token or None

    def validate_auth_path(self) -> None:
        """Require either an injected token or a full credential pair."""
        if self.auth_token is None and self.credentials is None:
            raise ConfigurationError(
                "No way to authenticate: set TANDOOR_AUTH_TOKEN, or both "
                "TANDOOR_USERNAME and TANDOOR_PASSWORD."
            )


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _load_settings() -> Settings:
    """Load settings from environment variables."""
    try:
        return Settings(
            base_url=_env("TANDOOR_BASE_URL", default=DEFAULT_BASE_URL),
            username=_env("TANDOOR_USERNAME"),
            password=_env("TANDOOR_PASSWORD"),
            auth_token=_env("TANDOOR_AUTH_TOKEN"),
            log_level=_env("TANDOOR_LOG_LEVEL", default="INFO"),
            auth_timeout=float(_env("TANDOOR_AUTH_TIMEOUT", default="10")),
            request_timeout=float(_env("TANDOOR_REQUEST_TIMEOUT", default="30")),
        )
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _load_policy(path: Path) -> SuggestionPolicy:
    """Load the suggestion policy from YAML. A missing file means defaults."""
    if not path.exists():
        return SuggestionPolicy()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    try:
        return SuggestionPolicy(**data.get("suggestions", {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid suggestion policy in {path}: {e}") from e


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load .env, environment and policy file once per process."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    settings = _load_settings()
    policy = _load_policy(Path(_env("TANDOOR_CONFIG", default=DEFAULT_POLICY_PATH)))

    return Config(settings=settings, policy=policy)
