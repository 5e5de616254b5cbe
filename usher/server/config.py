import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


def find_env_file() -> Optional[str]:
    """
    Locate the .env file

    Search order:
    1. the path named by the USHER_ENV_FILE environment variable
    2. the current working directory
    3. parents of the working directory (up to 3 levels)
    4. .usher/.env under the user's home directory
    """
    env_path = os.getenv('USHER_ENV_FILE')
    if env_path and Path(env_path).exists():
        return env_path

    current = Path.cwd()
    for _ in range(4):
        env_file = current / '.env'
        if env_file.exists():
            return str(env_file)
        if current.parent == current:
            break
        current = current.parent

    home_env = Path.home() / '.usher' / '.env'
    if home_env.exists():
        return str(home_env)

    return '.env'


STORE_BACKENDS = ("sqlite", "memory")


class Settings(BaseSettings):
    """Application settings"""

    # storage
    sqlite_path: str = Field(default="usher.db")
    store_backend: str = Field(default="sqlite")

    # server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # sessions
    token_attempts: int = Field(default=3)

    debug: bool = Field(default=False)

    class Config:
        env_prefix = "USHER_"
        env_file = find_env_file()
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validate_settings()

    def _validate_settings(self):
        """Reject settings the server cannot start with"""
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(f"USHER_STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}")

        if self.store_backend == "sqlite" and not self.sqlite_path:
            raise ValueError("USHER_SQLITE_PATH must be specified")

        if self.port < 1 or self.port > 65535:
            raise ValueError("USHER_PORT must be between 1 and 65535")

        if self.token_attempts < 1:
            raise ValueError("USHER_TOKEN_ATTEMPTS must be at least 1")


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings"""
    return settings
