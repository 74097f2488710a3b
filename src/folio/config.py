"""Application configuration."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    content_dir: Path = Path("content")
    site_url: str = "https://prabin194.com.np"
    debug: bool = False
    app_title: str = "Folio"
    github_username: str = "prabin194"
    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FOLIO_GITHUB_TOKEN", "GITHUB_TOKEN"),
    )
    github_cache_ttl: int = 3600
    latest_posts_count: int = 6

    model_config = SettingsConfigDict(
        env_prefix="FOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def projects_dir(self) -> Path:
        return self.content_dir / "projects"


settings = Settings()
