from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./data/app.db")
    auto_create_tables: bool = Field(default=True)

    # Application
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    public_dir: str = Field(default="./public")
    # IANA name of the zone "today" is computed in; empty means the host zone
    timezone: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    log_file: str = Field(default="")
    log_rotation: str = Field(default="10 MB")
    log_retention: str = Field(default="7 days")

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "https://mogamiyuki010.github.io",
            "http://localhost:3000",
            "https://localhost:3000",
        ]
    )

    # Session cookie
    session_cookie_name: str = Field(default="session_id")
    session_max_age_days: int = Field(default=10)
    session_cookie_secure: bool = Field(default=False)
    session_cookie_samesite: str = Field(default="lax")

    # Paging
    default_page_size: int = Field(default=100)
    max_page_size: int = Field(default=500)

    # Supabase mirror (optional)
    supabase_url: str = Field(default="")
    supabase_anon_key: str = Field(default="")
    mirror_queue_size: int = Field(default=1000)

    @property
    def mirror_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
