from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Permission document
    PERMISSIONS_CONFIG_PATH: str | None = None  # Bundled document when unset
    PERMISSIONS_CACHE_TTL_SECONDS: int = 300  # 5 minutes

    # Token verification for principal resolution
    JWT_SECRET: str | None = None
    JWT_ALGORITHM: str = "HS256"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
