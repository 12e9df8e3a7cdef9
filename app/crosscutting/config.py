"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults for sessions, JWT, login throttling and notifications

Collaborators:
  - api/main.py: reads settings for CORS, pool sizing and admin seeding
  - container.py: reads settings to wire token store, JWT and notifications
  - identity/*: cookie flags, token lifetimes

Constraints:
  - Lives in API/infrastructure layer, NOT in domain/application
  - No business logic, pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache for performance
  - Production guard rejects default secrets
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_SECRETS = {"dev-secret", "changeme", "change-me", "password", "secret"}
_DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/production/test)
        allowed_origins: Comma-separated CORS origins
        log_level / log_json: logger configuration
        session_cookie_name: Cookie holding the server-side session id
        session_ttl_hours: Session lifetime (default: 24h)
        jwt_secret: Secret for signing mobile JWTs
        jwt_expires_in_minutes: Mobile JWT lifetime (default: 7 days)
        redis_url: Redis connection string for the shared token store (optional)
        token_store_backend: auto|memory|redis
        login_rate_limit_attempts / login_rate_limit_window_seconds: login throttling
        rate_limit_rps / rate_limit_burst: global token bucket
        max_body_bytes: Max request body size (default: 1MB)
        verification_token_ttl_hours: Email verification token lifetime
        verification_resend_max_per_hour: Resend quota per rolling hour
        novu_api_key / novu_api_url: notification provider credentials
        app_url / app_login_url: links embedded in emails
        admin_email / admin_password / admin_name: bootstrap admin
    """

    # Required (no defaults)
    database_url: str

    # Environment
    app_env: str = "development"

    # CORS configuration
    allowed_origins: str = "http://localhost:5000"
    cors_allow_credentials: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Sessions (cookie)
    session_cookie_name: str = "sid"
    session_ttl_hours: int = 24

    # Security - JWT (mobile)
    jwt_secret: str = "dev-secret"
    jwt_expires_in_minutes: int = 7 * 24 * 60

    # Shared token store (blacklist + login counters)
    redis_url: str = ""
    token_store_backend: str = "auto"
    token_store_max_entries: int = 100_000

    # Security - Login throttling
    login_rate_limit_attempts: int = 10
    login_rate_limit_window_seconds: int = 15 * 60

    # Security - Rate Limiting
    rate_limit_rps: float = 20.0
    rate_limit_burst: int = 40

    # Security - Hardening
    max_body_bytes: int = 1 * 1024 * 1024  # 1MB

    # Email verification
    verification_token_ttl_hours: int = 24
    verification_resend_max_per_hour: int = 3

    # Notifications (Novu)
    novu_api_key: str = ""
    novu_api_url: str = "https://api.novu.co"
    notification_timeout_seconds: float = 10.0

    # Links embedded in emails
    app_url: str = "http://localhost:5000"
    app_login_url: str = "http://localhost:5000/login"

    # Retry/Resilience
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.5
    retry_max_delay_seconds: float = 5.0

    # Bootstrap admin
    seed_admin_on_startup: bool = True
    admin_email: str = "admin@logistics.com"
    admin_password: str = _DEFAULT_ADMIN_PASSWORD
    admin_name: str = "System Admin"

    # Database - Connection Pool
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    @field_validator("token_store_backend")
    @classmethod
    def token_store_backend_valid(cls, v: str) -> str:
        backend = (v or "auto").strip().lower()
        if backend not in {"auto", "memory", "redis"}:
            raise ValueError("token_store_backend must be auto, memory, or redis")
        return backend

    @field_validator("session_ttl_hours", "jwt_expires_in_minutes")
    @classmethod
    def lifetime_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("token and session lifetimes must be greater than 0")
        return v

    @field_validator("admin_email")
    @classmethod
    def normalizar_email(cls, v: str) -> str:
        return v.strip().lower()

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    @property
    def session_cookie_secure(self) -> bool:
        return self.is_production()

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in _INSECURE_SECRETS:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if self.admin_password == _DEFAULT_ADMIN_PASSWORD:
            raise ValueError("ADMIN_PASSWORD must be changed in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
