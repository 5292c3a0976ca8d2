"""
Application Configuration
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env file"""
    
    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "BadgeForge"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    
    # Database
    DATABASE_URL: str = "sqlite:///./badgeforge.db"
    
    # JWT
    JWT_SECRET_KEY: str = "temp-jwt-secret-change-later"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24
    
    # Column classifier (OpenRouter chat completions)
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    OPENROUTER_MODEL: str = "google/gemma-3n-e4b-it:free"
    OPENROUTER_REFERER: str = "http://localhost:8000"
    INFERENCE_TIMEOUT_SECONDS: float = 60.0
    
    # Photos
    MAX_UPLOAD_SIZE: int = 10485760  # 10MB per file
    MAX_PHOTO_BYTES: int = 204800  # 200KB after compression
    MAX_PHOTO_DIMENSION: int = 800
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Create global settings instance
settings = Settings()
