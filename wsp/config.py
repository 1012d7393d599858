from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Data backend: hosted Postgres (Supabase) or the JSON-file mock for offline work
    DATA_BACKEND: Literal["postgres", "local"] = "local"
    LOCAL_STORE_PATH: str = str(Path(__file__).resolve().parent.parent / ".wsp_local_store.json")
    DEV_USER_ID: str | None = "superadmin-001"

    # Supabase settings
    SUPABASE_URL: str | None = None
    SUPABASE_JWKS_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_DB_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    # Redis settings (view-state persistence)
    REDIS_URL: str | None = None
    VIEW_STATE_TTL_S: int = 60 * 60 * 24 * 30

    # Planner settings
    DEFAULT_CALENDAR_START_MONTH: Literal["January", "April"] = "April"
    TIME_TRACKING_ENABLED: bool = False

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def dev_mode(self) -> bool:
        return self.DATA_BACKEND == "local"

    # derive sensible defaults if not provided
    def jwks_url(self) -> str:
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        if not self.SUPABASE_URL:
            raise RuntimeError("SUPABASE_URL is not configured")
        base = self.SUPABASE_URL.rstrip("/")
        return f"{base}/auth/v1/.well-known/jwks.json"

    def auth_admin_url(self) -> str:
        """Base URL of the Supabase Auth admin API."""
        if not self.SUPABASE_URL:
            raise RuntimeError("SUPABASE_URL is not configured")
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1/admin/users"

    def project_ref(self) -> str | None:
        """
        Extract the Supabase project ref from SUPABASE_URL host, e.g.
        https://xmyhyolc...supabase.co -> xmyhyolc...
        """
        if not self.SUPABASE_URL:
            return None
        host = urlparse(self.SUPABASE_URL).hostname or ""
        return host.split(".")[0] or None

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update(
                {
                    "min_size": 1,
                    "max_size": 4,
                    "timeout": 15.0,
                }
            )

        return config


settings = Settings()
