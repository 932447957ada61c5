from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./stockmaster.db"

    # Calendar-day boundaries for date filters are computed in this zone
    TIMEZONE: str = "Asia/Kolkata"

    # Stock defaults
    DEFAULT_MIN_THRESHOLD: int = 5
    CURRENCY_SYMBOL: str = "₹"

    # Assistant
    AI_CONTEXT_LIMIT: int = 50

    # Logging
    LOG_FILE: str = "app.log"
    LOG_LEVEL: str = "DEBUG"

    class Config:
        env_file = ".env"

settings = Settings()
