from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: Optional[str] = None

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    STORE_TIMEOUT: float = 10.0  # seconds per store call
    PRICING_CACHE_TTL: int = 60   # 60 seconds

    CACHE_REFRESH_URL: Optional[str] = None
    CACHE_REFRESH_TIMEOUT: float = 5.0
    CACHE_REFRESH_RETRIES: int = 2

    # Placeholders until a routing/geo integration is wired in
    DISTANCE_MIN_KM: int = 10
    DISTANCE_MAX_KM: int = 60
    DEFAULT_ZONE_MULTIPLIER: float = 1.2

    CORS_ALLOW_ORIGIN: str = "*"

    API_TITLE: str = "Booking Admin Pricing Service"
    API_DESCRIPTION: str = "Admin API for ride pricing configuration, quotes and activity logs"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
