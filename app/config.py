from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Supabase
    supabase_url: str
    supabase_service_key: str
    supabase_anon_key: str

    # JWT (Supabase project JWT secret)
    jwt_secret: str
    jwt_algorithm: str = "HS256"

    # Email
    resend_api_key: str = ""
    resend_from_email: str = "hello@applybureau.com"
    resend_from_name: str = "Apply Bureau"
    admin_notification_email: str = "admin@applybureau.com"

    # Redis (rate limiting)
    redis_url: str = "redis://localhost:6379/0"

    # App
    app_base_url: str = "http://localhost:5173"
    log_level: str = "INFO"
    db_timeout_seconds: float = 10.0
    email_timeout_seconds: float = 10.0

    # Strategy calls
    scheduling_timezone: str = "UTC"
    strategy_call_duration: str = "30 minutes"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache()
def get_settings() -> Settings:
    return Settings()
