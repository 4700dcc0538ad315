"""Library configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # MinIO / S3
    S3_ENDPOINT: str = "http://localhost:9000"
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_REGION: str | None = None

    # Deadlines (seconds, measured from call entry)
    UPLOAD_TIMEOUT_SECONDS: float = 50
    FETCH_TIMEOUT_SECONDS: float = 50
    LIST_TIMEOUT_SECONDS: float = 10

    # Listing
    LIST_PAGE_SIZE: int = 1000

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


def get_settings() -> Settings:
    """Read settings fresh from the environment."""
    return Settings()
