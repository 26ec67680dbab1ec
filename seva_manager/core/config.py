from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PostgresDsn, SecretStr
from typing import List, Optional


class Settings(BaseSettings):
    PROJECT_NAME: str = "Seva Manager"
    DATABASE_URL: PostgresDsn
    SECRET_KEY: SecretStr
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day
    # Tokens minted by a hosted auth provider usually carry aud="authenticated"
    JWT_AUDIENCE: Optional[str] = None
    API_V1_STR: str = "/api/v1"

    FRONTEND_URL: str = Field(default="http://localhost:3000", description="Base URL for the frontend application")
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    REFERRAL_CODE_LENGTH: int = 8
    CODE_GENERATION_ATTEMPTS: int = 5

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

settings = Settings()
