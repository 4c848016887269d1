from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Supabase Auth
    SUPABASE_URL: str
    SUPABASE_JWT_SECRET: str

    # Browser front-ends (admin console + tenant/owner portal)
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5173",
    ]

    # Tickets
    SLA_AT_RISK_HOURS: float = 4
    ROLE_CACHE_TTL_SECONDS: int = 300
    NOTIFICATION_LIST_LIMIT: int = 20

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
