"""Application configuration using Pydantic Settings (ENV ONLY)."""
from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings (MUST come from environment variables)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = Field("Poetry Camera Gateway", env="APP_NAME")
    ENVIRONMENT: str = Field(..., env="ENVIRONMENT")
    DEBUG: bool = Field(False, env="DEBUG")
    LOG_LEVEL: str = Field("INFO", env="LOG_LEVEL")

    # Database
    DB_DRIVER: str = Field("postgresql", env="DB_DRIVER")
    DB_USER: str = Field(..., env="DB_USER")
    DB_PASSWORD: str = Field(..., env="DB_PASSWORD")
    DB_HOST: str = Field(..., env="DB_HOST")
    DB_PORT: int = Field(5432, env="DB_PORT")
    DB_NAME: str = Field(..., env="DB_NAME")
    DB_POOL_SIZE: int = Field(5, env="DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(10, env="DB_MAX_OVERFLOW")

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        return (
            f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # Redis (allowlist notifications + rate limiting)
    REDIS_URL: str = Field(..., env="REDIS_URL")
    ALLOWLIST_CHANNEL: str = Field("allowlist:changed", env="ALLOWLIST_CHANNEL")
    ALLOWLIST_RESYNC_SECONDS: float = Field(300.0, env="ALLOWLIST_RESYNC_SECONDS")
    ALLOWLIST_MAX_BACKOFF_SECONDS: float = Field(60.0, env="ALLOWLIST_MAX_BACKOFF_SECONDS")
    # "open": an empty allowlist lets every subject through; "closed": nobody.
    ALLOWLIST_EMPTY_POLICY: str = Field("open", env="ALLOWLIST_EMPTY_POLICY")

    # Identity provider (ID tokens)
    IDENTITY_JWT_KEY: Optional[str] = Field(None, env="IDENTITY_JWT_KEY")
    IDENTITY_JWKS_URL: Optional[str] = Field(None, env="IDENTITY_JWKS_URL")
    IDENTITY_JWT_ALGORITHMS: str = Field("RS256", env="IDENTITY_JWT_ALGORITHMS")
    IDENTITY_AUDIENCE: Optional[str] = Field(None, env="IDENTITY_AUDIENCE")
    IDENTITY_ISSUER: Optional[str] = Field(None, env="IDENTITY_ISSUER")
    IDENTITY_KEYS_TTL_SECONDS: int = Field(3600, env="IDENTITY_KEYS_TTL_SECONDS")
    IDENTITY_TIMEOUT_SECONDS: float = Field(10.0, env="IDENTITY_TIMEOUT_SECONDS")

    # Roles
    ADMIN_SUBJECT_ID: Optional[str] = Field(None, env="ADMIN_SUBJECT_ID")
    WEB_DISPLAY_SUBJECT_ID: Optional[str] = Field(None, env="WEB_DISPLAY_SUBJECT_ID")

    # Generative content provider
    GEMINI_BASE_URL: str = Field(
        "https://generativelanguage.googleapis.com/v1beta", env="GEMINI_BASE_URL"
    )
    GEMINI_TEXT_MODEL: str = Field("gemini-flash-latest", env="GEMINI_TEXT_MODEL")
    GEMINI_IMAGE_MODEL: str = Field("gemini-2.5-flash-image", env="GEMINI_IMAGE_MODEL")
    GENERATION_TIMEOUT_SECONDS: float = Field(60.0, env="GENERATION_TIMEOUT_SECONDS")
    MAX_IMAGE_BYTES: int = Field(10 * 1024 * 1024, env="MAX_IMAGE_BYTES")

    # AWS / S3
    AWS_ACCESS_KEY_ID: Optional[str] = Field(None, env="AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY: Optional[str] = Field(None, env="AWS_SECRET_ACCESS_KEY")
    S3_BUCKET_NAME: str = Field(..., env="S3_BUCKET_NAME")
    S3_REGION: str = Field("us-east-1", env="S3_REGION")
    S3_PUBLIC_BASE_URL: Optional[str] = Field(None, env="S3_PUBLIC_BASE_URL")

    # HTTP
    CORS_ORIGINS: str = Field("*", env="CORS_ORIGINS")

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = Field(True, env="RATE_LIMIT_ENABLED")
    RATE_LIMIT_PER_MINUTE: int = Field(100, env="RATE_LIMIT_PER_MINUTE")

    # Owned mutations
    MUTATION_MAX_ATTEMPTS: int = Field(3, env="MUTATION_MAX_ATTEMPTS")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def identity_algorithms(self) -> list[str]:
        return [alg.strip() for alg in self.IDENTITY_JWT_ALGORITHMS.split(",") if alg.strip()]


settings = Settings()
