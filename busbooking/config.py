from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "BusBooking"
    DEBUG: bool = False
    DATABASE_URL: str = "sqlite+aiosqlite:///./busbooking.db"
    SECRET_KEY: str = "replace-me"
    # JWT / auth settings
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    # Startup behaviour
    CREATE_SCHEMA_ON_STARTUP: bool = True
    SEED_BUSES: bool = True
    # Clears the bus catalog before seeding
    FORCE_SEED: bool = False
    # Seats changed more recently than this are left alone by reconciliation
    RECONCILE_GRACE_SECONDS: int = 120
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")
