"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./printdesk.db"

    # Real-time synchronizer
    sync_max_concurrency: int = 8
    sync_fetch_timeout_seconds: float = 5.0

    # Attachments
    attachments_dir: str = "./attachments"
    attachments_base_url: str = "/attachments"
    max_attachment_bytes: int = 10 * 1024 * 1024

    # Product catalog (YAML); empty means the bundled catalog
    catalog_file: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
