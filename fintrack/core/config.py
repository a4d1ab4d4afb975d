from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "FinTrack API"
    API_PREFIX: str = "/api"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Personal finance tracker: lending, expenses, interest, earnings and balances"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Persistence
    PERSISTENCE_BACKEND: str = "mongo"  # mongo | memory
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "fintrack"
    SAVE_RETRY_ATTEMPTS: int = 2
    SAVE_RETRY_BACKOFF: float = 0.5  # seconds, doubled per attempt

    # Identity provider
    FIREBASE_PROJECT_ID: str = ""

    # JWT
    JWT_SECRET: str = "change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
