from decimal import Decimal
from typing import List
from urllib.parse import quote_plus
import os

from pydantic import model_validator
from pydantic_settings import BaseSettings

STORE_BACKENDS = ("sql", "memory")


class Settings(BaseSettings):
    APP_ENV: str = "local"

    # "sql" for a real database, "memory" for an in-process store (tests, demos)
    STORE_BACKEND: str = "sql"

    # Database URL - can be provided directly or constructed from components
    DATABASE_URL: str | None = None

    # Individual database components (for constructing DATABASE_URL)
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = ""
    DB_ECHO: bool = False

    # Business rules
    LOW_STOCK_THRESHOLD: int = 5
    DEFAULT_MARKUP: Decimal = Decimal("1.30")

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env" if os.getenv("APP_ENV", "local") == "local" else ".env.prod"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @model_validator(mode='after')
    def construct_database_url(self):
        """Construct DATABASE_URL from components if not provided directly."""
        if self.STORE_BACKEND not in STORE_BACKENDS:
            raise ValueError(f"STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}")

        if self.LOW_STOCK_THRESHOLD < 0:
            raise ValueError("LOW_STOCK_THRESHOLD cannot be negative")

        if not self.DATABASE_URL:
            if self.DB_NAME:
                # URL encode password to handle special characters
                password_part = f":{quote_plus(self.DB_PASSWORD)}" if self.DB_PASSWORD else ""
                self.DATABASE_URL = f"postgresql://{self.DB_USER}{password_part}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            else:
                self.DATABASE_URL = "sqlite:///./inventory.db"

        return self

    @property
    def database_url(self) -> str:
        """Get DATABASE_URL as a guaranteed string."""
        assert self.DATABASE_URL is not None, "DATABASE_URL must be set"
        return self.DATABASE_URL


settings = Settings()
