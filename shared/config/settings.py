from pydantic_settings import BaseSettings
from typing import Optional
import os


class Settings(BaseSettings):
    database_url: str
    redis_url: str = "redis://localhost:6379/0"
    admin_secret: str
    
    # Server settings
    host: Optional[str] = None
    port: Optional[str] = None
    log_level: str = "INFO"
    environment: Optional[str] = None
    
    # Expiry sweep
    sweep_interval_seconds: int = 1800
    sweep_retry_seconds: int = 300
    sweep_lock_ttl_seconds: int = 600
    grace_days: int = 2
    days_after_warning: int = 3
    
    # Notifications
    notification_timezone: str = "Asia/Jerusalem"
    
    class Config:
        # Look for .env file in project root
        env_file = os.path.join(os.path.dirname(__file__), "../..", ".env")


settings = Settings()
