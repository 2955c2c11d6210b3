# vgosti/config.py
from typing import List

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    APP_NAME: str = "V gosti"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./database.sqlite"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 5
    DATABASE_POOL_TIMEOUT: int = 30  # seconds to wait for a free connection
    DATABASE_POOL_RECYCLE: int = 1800  # idle connections older than this are replaced

    HOST: str = "0.0.0.0"
    PORT: int = 3001
    CORS_ORIGINS: List[str] = ["*"]

    JWT_SECRET_KEY: str = "change-me-in-dotenv"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: float = 60 * 12
    CAPTCHA_EXPIRE_MINUTES: float = 30

    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    FRONTEND_DIR: str = "dist"

    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_ADMIN_PATH: str = "admin"

    WHATSAPP_PHONE: str = "79654111555"

    LOGIN_RATE_LIMIT: str = "10/minute"
    REVIEW_RATE_LIMIT: str = "5/minute"
    RATE_LIMIT_ENABLED: bool = True

    class Config:
        env_file = ".env"

settings = Settings()
