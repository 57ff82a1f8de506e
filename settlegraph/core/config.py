from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "SettleGraph API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Shared money transfers, debt netting and who-owes-whom network views"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "settlegraph"

    # JWT
    JWT_SECRET: str = "change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60

    # Display
    CURRENCY_SYMBOL: str = "₹"

    # Network view (pixels)
    VIEWPORT_WIDTH: int = 640
    VIEWPORT_HEIGHT: int = 320
    MIN_VIEWPORT_WIDTH: int = 300
    MIN_VIEWPORT_HEIGHT: int = 200
    FRAME_INTERVAL_SECONDS: float = 0.016

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
