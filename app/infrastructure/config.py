"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Storage
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"
    storage_backend: str = "sql"  # "sql" or "memory"

    # Hierarchy traversal
    hierarchy_max_depth: int = 5

    # Search
    default_page_limit: int = 20
    max_page_limit: int = 100

    # Multilingual content
    supported_languages: list[str] = ["TW", "EN"]
    site_name_tw: str = "遠岫科技"
    site_name_en: str = "Yenshow"
    faq_label_tw: str = "常見問題"
    faq_label_en: str = "FAQ"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
