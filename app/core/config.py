import os
from dataclasses import dataclass

import pytz


@dataclass(frozen=True)
class AppConfig:
    """
    Bootstrap configuration for the standalone scheduler process.

    Read straight from the environment so a misconfigured worker fails
    before it opens a database connection.
    """
    environment: str
    database_url: str
    timezone: str
    run_time: str
    log_level: str
    scheduler_enabled: bool

    @staticmethod
    def load() -> "AppConfig":
        db_url = os.getenv("DATABASE_URL", "")
        if not db_url:
            raise RuntimeError("DATABASE_URL environment variable is required")

        tz_name = os.getenv("TIMEZONE", "Asia/Seoul")
        if tz_name not in pytz.all_timezones_set:
            raise RuntimeError(f"Unknown TIMEZONE: {tz_name}")

        return AppConfig(
            environment=os.getenv("APP_ENV", "production"),
            database_url=db_url,
            timezone=tz_name,
            run_time=os.getenv("SCHEDULER_RUN_TIME", "08:00"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            scheduler_enabled=os.getenv("SCHEDULER_ENABLED", "false").lower() in ("1", "true", "yes", "on"),
        )
