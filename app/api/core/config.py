import os
from pathlib import Path

from decouple import Config, RepositoryEnv
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = next(p for p in Path(__file__).resolve().parents if (p / "main.py").exists())
BASE_DIR = PROJECT_ROOT

# Determine which env file to load
env_file = os.getenv("ENV_FILE", ".env")
env_path = PROJECT_ROOT / env_file

# Only use RepositoryEnv if the env file exists
if env_path.exists():
    config = Config(RepositoryEnv(env_path))
else:
    # fallback: read directly from os.environ using decouple's AutoConfig
    from decouple import AutoConfig

    config = AutoConfig(search_path=None)


class Settings(BaseSettings):
    # App general
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    APP_NAME: str = config("APP_NAME", default="NEWSLETTER")
    APP_VERSION: str = config("APP_VERSION", default="0.1.0")
    APP_HOST: str = config("APP_HOST", default="127.0.0.1")
    APP_PORT: int = config("APP_PORT", default=8000, cast=int)
    GREETING: str = config("GREETING", default="Hi, I'm here")

    # Database
    DB_TYPE: str = config("DB_TYPE", default="postgresql")
    DB_HOST: str = config("DB_HOST", default="localhost")
    DB_PORT: int = config("DB_PORT", default=5432, cast=int)
    DB_USER: str = config("DB_USER", default="postgres")
    DB_PASS: SecretStr = SecretStr(config("DB_PASS", default="password"))
    DB_NAME: str = config("DB_NAME", default="newsletter")
    DB_SQLITE_PATH: str = config("DB_SQLITE_PATH", default="db.sqlite3")
    DB_ECHO: bool = config("DB_ECHO", default=False, cast=bool)
    DB_POOL_SIZE: int = config("DB_POOL_SIZE", default=10, cast=int)
    DB_AUTO_CREATE: bool = config("DB_AUTO_CREATE", default=True, cast=bool)

    # Logging
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")
    TEST_LOG: bool = config("TEST_LOG", default=False, cast=bool)

    model_config = SettingsConfigDict(extra="allow")

    def connection_string(self, database_name: str | None = None) -> str:
        """Return the asyncpg URL for ``database_name`` (defaults to ``DB_NAME``).

        The password is only exposed here, never in ``repr`` or logs.
        """
        name = database_name or self.DB_NAME
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASS.get_secret_value()}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{name}"
        )

    def connection_string_without_db(self) -> str:
        """URL of the server's maintenance database, used to create new databases."""
        return self.connection_string("postgres")


settings = Settings()
