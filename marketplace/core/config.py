# marketplace/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values are read from the process environment (Docker Compose passes
    # the root .env through).
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Database URLs ---
    DATABASE_URL_PROD: str = ""
    DATABASE_URL_LOCAL: str = "sqlite:///./marketplace.db"

    # --- Auth ---
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    # --- HTTP ---
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    RATE_LIMIT_ENABLED: bool = True
    MESSAGE_RATE_LIMIT: str = "30/minute"
    APPLICATION_RATE_LIMIT: str = "20/minute"

    # --- Marketplace rules ---
    RATING_MIN: int = 0
    RATING_MAX: int = 10
    PROBLEM_NOTE_MIN_LENGTH: int = 5
    REQUEST_TEXT_MIN_LENGTH: int = 20
    ORDER_WITHDRAWAL_DAYS: int = 14
    MESSAGE_PAGE_SIZE: int = 50
    READ_RETRY_ATTEMPTS: int = 3

    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )


# Create a single instance of the settings
settings = Settings()
