# pocketledger/core/config.py
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives at the repository root, next to alembic.ini
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Pocket Ledger API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # postgresql+asyncpg://... in production, sqlite+aiosqlite://... locally
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5

    # Token signing
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    FRONTEND_URL: str = "http://localhost:3000"

    # Currency assigned to wallets created without one
    DEFAULT_CURRENCY: str = "VND"

    @property
    def is_sqlite(self) -> bool:
        """SQLite engines do not take queue-pool sizing arguments"""
        return self.DATABASE_URL.startswith("sqlite")

settings = Settings()
