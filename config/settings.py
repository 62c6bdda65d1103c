"""Pydantic Settings for the anime profile store."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # PostgreSQL
    database_url: str = ""
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "anime"
    db_password: str = "anime"
    db_name: str = "anime"

    # Pool
    db_pool_min_size: int = Field(default=1, ge=0)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_command_timeout: float | None = Field(
        default=None, description="Per-statement timeout in seconds"
    )

    # Operational
    log_level: str = "INFO"

    @property
    def dsn(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
