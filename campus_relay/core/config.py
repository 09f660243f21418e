"""
Configuration management via environment variables.

This module loads configuration from a .env file using python-dotenv.
All configuration values are accessed through the Settings class, which
is built once at startup and handed to the application factory.

Provider credentials are optional individually; the relay refuses to
serve chat requests only when neither is set.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


# Load .env file from project root
# This must happen before accessing os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


DEFAULT_PRIMARY_API_URL = "https://api.x.ai/v1/chat/completions"
DEFAULT_PRIMARY_MODEL = "grok-2-latest"
DEFAULT_SECONDARY_API_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_SECONDARY_MODEL = "google/gemini-3-flash-preview"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, so one instance can be
    shared by every concurrent request.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for daily log files; empty disables file logging
        primary_api_key: Credential for the primary provider (xAI Grok)
        primary_api_url: Chat-completion endpoint of the primary provider
        primary_model: Model identifier sent to the primary provider
        primary_max_tokens: Output bound for the primary provider
        primary_temperature: Sampling temperature for the primary provider
        secondary_*: Same fields for the fallback provider
        provider_timeout_seconds: Per-request timeout for provider calls
        supabase_url: Supabase project URL used to verify access tokens
        supabase_anon_key: Supabase anon key sent as the apikey header
        auth_timeout_seconds: Timeout for identity verification calls
        enable_audit_logging: Log every request through AuditMiddleware
        host: Bind address when run directly
        port: Bind port when run directly
    """
    # Application settings
    app_name: str = "CampusRelay"
    app_env: str = "development"
    log_level: str = "INFO"
    log_dir: str = ""

    # Primary provider
    primary_api_key: Optional[str] = None
    primary_api_url: str = DEFAULT_PRIMARY_API_URL
    primary_model: str = DEFAULT_PRIMARY_MODEL
    primary_max_tokens: Optional[int] = 1024
    primary_temperature: Optional[float] = 0.7

    # Secondary provider
    secondary_api_key: Optional[str] = None
    secondary_api_url: str = DEFAULT_SECONDARY_API_URL
    secondary_model: str = DEFAULT_SECONDARY_MODEL
    secondary_max_tokens: Optional[int] = None
    secondary_temperature: Optional[float] = None

    provider_timeout_seconds: float = 60.0

    # Identity verification
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    auth_timeout_seconds: float = 10.0

    enable_audit_logging: bool = True

    host: str = "0.0.0.0"
    port: int = 8000

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"

    def configured_providers(self) -> List[str]:
        """Names of the providers that have a credential, in attempt order."""
        names = []
        if self.primary_api_key:
            names.append("primary")
        if self.secondary_api_key:
            names.append("secondary")
        return names

    def has_provider_credentials(self) -> bool:
        return bool(self.configured_providers())


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get environment variable with optional default.

    Blank values count as unset so that `GROK_API_KEY=` in a .env file
    does not masquerade as a credential.
    """
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_int(key: str, default: Optional[int]) -> Optional[int]:
    value = _get_env(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got {value!r}")


def _get_float(key: str, default: Optional[float]) -> Optional[float]:
    value = _get_env(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be a number, got {value!r}")


def _get_bool(key: str, default: bool) -> bool:
    value = _get_env(key)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """
    Build a Settings instance from the current process environment.

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "CampusRelay"),
        app_env=_get_env("APP_ENV", "development"),
        log_level=_get_env("LOG_LEVEL", "INFO"),
        log_dir=_get_env("LOG_DIR", ""),

        # Primary provider (xAI Grok)
        primary_api_key=_get_env("GROK_API_KEY"),
        primary_api_url=_get_env("PRIMARY_API_URL", DEFAULT_PRIMARY_API_URL),
        primary_model=_get_env("PRIMARY_MODEL", DEFAULT_PRIMARY_MODEL),
        primary_max_tokens=_get_int("PRIMARY_MAX_TOKENS", 1024),
        primary_temperature=_get_float("PRIMARY_TEMPERATURE", 0.7),

        # Secondary provider (campus assistant gateway)
        secondary_api_key=_get_env("CAMPUS_ASSISTANT_API_KEY"),
        secondary_api_url=_get_env("SECONDARY_API_URL", DEFAULT_SECONDARY_API_URL),
        secondary_model=_get_env("SECONDARY_MODEL", DEFAULT_SECONDARY_MODEL),
        secondary_max_tokens=_get_int("SECONDARY_MAX_TOKENS", None),
        secondary_temperature=_get_float("SECONDARY_TEMPERATURE", None),

        provider_timeout_seconds=_get_float("PROVIDER_TIMEOUT_SECONDS", 60.0),

        # Identity (Supabase Auth)
        supabase_url=_get_env("SUPABASE_URL"),
        supabase_anon_key=_get_env("SUPABASE_ANON_KEY"),
        auth_timeout_seconds=_get_float("AUTH_TIMEOUT_SECONDS", 10.0),

        enable_audit_logging=_get_bool("ENABLE_AUDIT_LOGGING", True),

        host=_get_env("HOST", "0.0.0.0"),
        port=_get_int("PORT", 8000),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    The environment is read once per process; tests build their own
    Settings directly instead of going through this cache.
    """
    return load_settings()
