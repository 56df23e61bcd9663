from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for the reminder batch (bypasses RLS)

    # Reminders
    reminder_window_hours: int = 24
    reminder_max_workers: int = 8
    reminder_timeout_sec: Optional[float] = 120.0
    reminder_channel: str = "log"  # log | inbox
    reminder_scheduler_enabled: bool = False
    reminder_interval_sec: int = 3600
    reminder_cron_secret: Optional[str] = None

    # Visibility
    viewer_sees_all_team_tasks: bool = True

    # App
    app_name: str = "taskflow-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
