import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")

    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT", "5432")
    DB_NAME: str | None = os.getenv("DB_NAME", "rental")

    # Business defaults, overridable at runtime through the settings table
    PAYMENT_DUE_DAYS: int = int(os.getenv("PAYMENT_DUE_DAYS", 7))
    LATE_FEE_DAILY_RATE: float = float(os.getenv("LATE_FEE_DAILY_RATE", 0.05))
    SUPPLY_PAYMENT_DUE_DAYS: int = int(os.getenv("SUPPLY_PAYMENT_DUE_DAYS", 5))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "standard")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def build_database_url(cfg: Settings) -> str:
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL
    if not cfg.DB_HOST:
        return f"sqlite:///{os.path.join(BASE_DIR, 'rental.db')}"
    return (
        f"postgresql+psycopg2://{cfg.DB_USER}:{cfg.DB_PASS}@{cfg.DB_HOST}:{cfg.DB_PORT}/{cfg.DB_NAME}"
    )


RENTAL_DATABASE_URL = build_database_url(settings)
