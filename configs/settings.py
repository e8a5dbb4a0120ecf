from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration settings."""

    APP_NAME: str = "SkillMatrix"
    ENVIRONMENT: str = "development"
    VERSION: str = "0.1.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "skillmatrix"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_POOL_SIZE: int = 5
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    REDIS_URL: str = ""
    RATE_LIMITER_DEFAULT_LIMITS: list[str] = ["30/minute"]
    TRUSTED_PROXIES: list[str] = []

    # Notification feed
    NOTIFICATION_LIMIT: int = 50
    NOTIFICATION_TTL_SECONDS: int = 60 * 60 * 24 * 90
    NOTIFICATION_KEY_PREFIX: str = "skillmatrix"
    NOTIFICATION_LOCK_TTL_SECONDS: int = 10
    NOTIFICATION_LOCK_WAIT_SECONDS: float = 5.0
    NOTIFICATION_LOCK_RETRY_SECONDS: float = 0.05

    # Derivation windows (days)
    CERT_EXPIRY_WINDOW_DAYS: int = 30
    TRAINING_DUE_WINDOW_DAYS: int = 7
    ASSESSMENT_STALE_DAYS: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
