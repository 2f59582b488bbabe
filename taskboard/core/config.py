from functools import lru_cache
from typing import List, Optional
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    # Project settings
    PROJECT_NAME: str = "Taskboard API"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Database settings
    DATABASE_URL: str = "sqlite:///./taskboard.db"
    SQL_ECHO: bool = False

    # JWT settings
    SECRET_KEY: str = "your-super-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    RESET_TOKEN_EXPIRE_MINUTES: int = 15

    # Frontend / CORS
    FRONTEND_URL: str = "http://localhost:5173"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]
    ALLOWED_ORIGIN_REGEX: Optional[str] = None

    # Mail settings ("log" just writes the message to the log)
    MAIL_PROVIDER: str = "log"
    MAIL_FROM: str = "no-reply@taskboard.local"
    MAIL_FROM_NAME: str = "Taskboard"
    SENDGRID_API_KEY: Optional[str] = None
    MAIL_TIMEOUT_SECONDS: float = 10.0

    class Config:
        env_file = ".env"
        # Allow unrelated variables in .env without failing validation.
        extra = "ignore"

    @property
    def cors_origins(self) -> List[str]:
        origins = list(self.ALLOWED_ORIGINS)
        if self.FRONTEND_URL and self.FRONTEND_URL not in origins:
            origins.insert(0, self.FRONTEND_URL)
        return origins


@lru_cache
def get_settings() -> Settings:
    return Settings()
