"""Server configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database connection
    database_url: str = "postgresql://localhost/chatattribution"
    pool_min_size: int = 1
    pool_max_size: int = 10

    # Server
    debug: bool = False
    log_level: str = "INFO"


settings = Settings()
