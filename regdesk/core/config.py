"""Settings for the registration service.

Values come from the environment or a `.env` file; nested sections use `__`,
for example `SECURITY__SECRET_KEY` or `STATS__TIMEZONE`.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    cors_origins: list[str] = ["*"]


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./regdesk.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)


class StatsSettings(BaseModel):
    # IANA zone used to decide where "today" starts for the statistics snapshot.
    timezone: str = "UTC"


class AdminSettings(BaseModel):
    default_page_size: int = 20
    max_page_size: int = 100
    default_export_format: Literal["xlsx", "csv", "json"] = "xlsx"


class ModuleSettings(BaseModel):
    missing_descriptor: Literal["ignore", "warn", "error"] = "warn"


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Event Registration Service"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    stats: StatsSettings = StatsSettings()
    admin: AdminSettings = AdminSettings()
    modules: ModuleSettings = ModuleSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def uses_sqlite(self) -> bool:
        return self.database.url.startswith("sqlite")

    @property
    def test_payments_enabled(self) -> bool:
        return self.environment != "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
