import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _database_url() -> str:
    url = os.getenv("DATABASE_URL", "sqlite:///./school.db")
    # Render/Heroku style URLs
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass(frozen=True)
class Settings:
    database_url: str = field(default_factory=_database_url)
    cron_secret: str | None = field(default_factory=lambda: os.getenv("CRON_SECRET") or None)
    cron_require_secret: bool = field(default_factory=lambda: _env_bool("CRON_REQUIRE_SECRET"))
    fine_per_day: int = int(os.getenv("FINE_PER_DAY", "20"))
    voucher_due_day: int = int(os.getenv("VOUCHER_DUE_DAY", "12"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: tuple[str, ...] = tuple(
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    )


settings = Settings()
