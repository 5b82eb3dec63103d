"""
Service configuration, read from BODYSCAN_* environment variables
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Top-level application configuration."""

    model_config = SettingsConfigDict(env_prefix="BODYSCAN_")

    app_name: str = "Body Scan Sizing API"
    version: str = "1.0.0"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Capture
    default_timer_seconds: int = 3
    countdown_interval_seconds: float = 1.0

    # Persistence collaborator (Supabase REST)
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    persistence_timeout_seconds: float = 10.0

    # Pose detection
    load_pose_model_on_startup: bool = True


settings = Settings()
