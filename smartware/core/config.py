# smartware/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./smartware.db"

    # Ledger storage
    STORE_KEY: str = "swp_products"
    SYNC_INDICATOR_SECONDS: float = 0.5

    # Stock policy
    EXPIRY_HORIZON_DAYS: int = 60
    DEFAULT_MIN_STOCK: int = 5
    DEFAULT_MAX_STOCK: int = 100

    # Gemini
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-3-flash-preview"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: int = 60
    GEMINI_THINKING_BUDGET: int = 5000

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
