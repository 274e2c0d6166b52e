"""
Application configuration.
All settings are loaded from environment variables.
Use env.example as a reference for required variables.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    IMPORTANT: Connection strings have no defaults - they MUST be set in .env file.
    """

    # ===========================================
    # APPLICATION
    # ===========================================
    app_env: str = "local"
    # Comma-separated list, e.g. http://localhost:3000,http://localhost:5137. Empty = built-in defaults.
    cors_origins: str = ""
    # Header set by the auth gateway with the authenticated principal id.
    principal_header: str = "X-User-Id"

    # ===========================================
    # DATABASE (PostgreSQL, SQLite for local runs)
    # ===========================================
    database_url: str  # Required, no default
    # Create tables on startup (local/dev). Production schema is managed separately.
    auto_create_schema: bool = False

    # ===========================================
    # REDIS
    # ===========================================
    redis_url: str  # Required, no default

    # ===========================================
    # MARKETPLACE
    # ===========================================
    content_preview_length: int = 200
    purchase_rate_limit: int = 5  # max purchases per window per buyer, 0 = disabled
    purchase_rate_window_seconds: int = 60

    # ===========================================
    # LOGGING
    # ===========================================
    log_level: str = "INFO"
    request_id_header: str = "X-Request-Id"
    log_file: str | None = None
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("content_preview_length")
    @classmethod
    def validate_preview_length(cls, v: int) -> int:
        """Preview must show at least one character."""
        if v < 1:
            raise ValueError("content_preview_length must be positive")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
