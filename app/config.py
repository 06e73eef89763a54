"""Application settings loaded from environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Middleware
    cors_origins: list[str] = ["*"]
    json_limit: int = 100 * 1024  # bytes

    # Logging
    log_level: str = "INFO"

    # Storage
    sqlite_path: str = "./data/movements.db"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        # PORT= (empty) falls back to the default like an unset variable
        env_ignore_empty = True

    def ensure_dirs(self):
        """Create data directories if they don't exist."""
        Path(self.sqlite_path).parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
settings.ensure_dirs()
