from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # public anon key
    supabase_service_role_key: Optional[str] = None  # Required for admin routes and storage

    # Storage buckets
    logos_bucket: str = "logos"
    logo_max_bytes: int = 5 * 1024 * 1024
    service_attachments_bucket: str = "service_attachments"

    # Auth
    password_reset_redirect_url: str = "http://localhost:3000/reset-password"

    # App
    app_name: str = "portal-cliente"
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
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
