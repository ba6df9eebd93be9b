from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives next to pyproject.toml; the cwd fallbacks cover `alembic` run from migrations/
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str  # postgresql://... (rewritten to asyncpg) or sqlite+aiosqlite:///...

    # Access tokens carry `sub` (account id) and `role`
    secret_key: str
    access_token_expire_minutes: int = 60
    algorithm: str = "HS256"

    cors_origins: str = "http://localhost:5173"  # comma separated

    # Slots, booking window and the completion sweep; times are UTC wall clock
    slot_duration_minutes: int = 30
    bookable_days_horizon: int = 7
    bookable_days_lookahead: int = 14  # days scanned for working days, never less than the horizon
    default_start_time: str = "09:00"
    default_end_time: str = "17:00"
    completion_sweep_interval_seconds: int = 60 * 60

    env: str = "development"  # "production" switches logging to JSON lines

    # Appointment notifications; all four of host, user, password and sender must be set
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "MindCare"
    site_name: str = "MindCare"
    contact_email: str = "support@mindcare.example"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.from_email)


settings = Settings()
