# backend/slotbook/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/slotbook.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 2.0

    # Staff tokens (HS256). Token issuance is refused below 32 chars.
    jwt_secret: str = ""
    jwt_expire_hours: int = 6

    # Comma-separated, "*" = any origin
    allowed_origins: str = "*"

    # Outbound confirmation mail; empty url = notifications disabled
    email_api_url: str = ""
    email_api_secret: str = ""
    email_timeout_seconds: float = 10.0

    # Wall-clock zone for generation input and notification formatting.
    # Slots are always stored as naive UTC.
    schedule_timezone: str = "UTC"
    slot_batch_size: int = 50
    admission_max_attempts: int = 50

    # Requests per window per client IP, 0 = disabled
    booking_rate_limit: int = 10
    login_rate_limit: int = 5
    rate_limit_window_seconds: int = 60

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite path -> absolute, anchored at the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()
