from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Cinema Booking'
    VERSION: str = '0.1.0'
    DEBUG: bool = False
    LOG_LEVEL: str = 'INFO'
    LOG_TO_FILE: bool = False
    LOG_DIR: str = str(_PROJECT_ROOT / 'logs')

    # Database
    DATABASE_URL: str = 'sqlite+aiosqlite:///./cinema_booking.db'
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a pooled connection
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True
    SQLITE_BUSY_TIMEOUT: int = 30  # seconds a SQLite writer waits on the database lock

    # Reservation
    HOLD_DURATION_MINUTES: int = 10
    MAX_SEATS_PER_BOOKING: int = 10
    BOOKING_CODE_LENGTH: int = 8
    CANCELLATION_CUTOFF_HOURS: int | None = 2

    # Expiry reaper
    REAPER_ENABLED: bool = True
    REAPER_INTERVAL_SECONDS: float = 120.0
    REAPER_BATCH_SIZE: int = 500

    @field_validator('HOLD_DURATION_MINUTES', 'MAX_SEATS_PER_BOOKING', 'BOOKING_CODE_LENGTH')
    @classmethod
    def ensure_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError('must be a positive integer')
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith('sqlite')


settings = Settings()  # type: ignore
