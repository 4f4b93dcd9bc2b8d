"""
Application settings with validation using pydantic-settings.
Every value has a default so the service starts with a bare environment;
production mode refuses the insecure defaults.
"""
from urllib.parse import quote_plus
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "your_jwt_secret"


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database configuration
    DB_HOST: str = Field(default="localhost", description="PostgreSQL host")
    DB_PORT: str = Field(default="5432", description="PostgreSQL port")
    DB_USER: str = Field(default="postgres", description="PostgreSQL username")
    DB_PASSWORD: str = Field(default="password", description="PostgreSQL password")
    DB_NAME: str = Field(default="referral_db", description="PostgreSQL database name")

    # Token configuration
    JWT_SECRET: str = Field(default=DEFAULT_JWT_SECRET, description="Secret used to sign access tokens")
    JWT_EXPIRY_HOURS: int = Field(default=72, description="Lifetime of issued access tokens (hours)")

    # CORS configuration
    ALLOWED_ORIGINS: str = Field(default="", description="Comma-separated list of allowed CORS origins")

    # Environment
    ENVIRONMENT: str = Field(default="development", description="Environment: development or production")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable per-IP rate limits on auth endpoints")

    # Database pool configuration
    DB_POOL_SIZE: int = Field(default=10, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database max overflow connections")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database connection recycle time (seconds)")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        v = v.lower()
        if v not in ("development", "production"):
            raise ValueError("ENVIRONMENT must be 'development' or 'production'")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("JWT_EXPIRY_HOURS")
    @classmethod
    def validate_jwt_expiry(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("JWT_EXPIRY_HOURS must be positive")
        return v

    def validate_production_settings(self) -> list[str]:
        """
        Validate that insecure defaults are not used in production.
        Returns list of problems.
        """
        errors = []

        if self.ENVIRONMENT == "production":
            if self.JWT_SECRET == DEFAULT_JWT_SECRET:
                errors.append("JWT_SECRET must be changed from the default in production")
            if not self.ALLOWED_ORIGINS:
                errors.append("ALLOWED_ORIGINS is required in production")

        return errors

    @property
    def db_url(self) -> str:
        """Async database URL (asyncpg)."""
        password = quote_plus(self.DB_PASSWORD)
        return f"postgresql+asyncpg://{self.DB_USER}:{password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def sync_db_url(self) -> str:
        """Sync database URL (psycopg2), used by Alembic."""
        password = quote_plus(self.DB_PASSWORD)
        return f"postgresql+psycopg2://{self.DB_USER}:{password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get list of allowed CORS origins."""
        if not self.ALLOWED_ORIGINS:
            return []
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


def load_settings() -> Settings:
    """
    Build and validate settings from the environment.

    Called once at process start; the result is passed explicitly to
    whatever needs it.

    Raises:
        ValueError: If production settings are insecure
    """
    settings = Settings()
    errors = settings.validate_production_settings()
    if errors:
        error_msg = "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
    return settings
