"""
StoreKeep Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "StoreKeep API"
    PROJECT_DESCRIPTION: str = "Storage facility management: buildings, units, customers, rentals and payments"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///storekeep_local.db"

    # ==================== Storage Backend ====================
    # "sql" talks to DATABASE_URL through SQLAlchemy, "supabase" goes through PostgREST
    STORAGE_BACKEND: str = "sql"
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # ==================== Security & Authentication ====================
    SECRET_KEY: str = "change-this-secret-key-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720
    OPERATOR_EMAIL: str = "admin@storekeep.io"
    OPERATOR_PASSWORD_HASH: str = ""

    # ==================== Rental Expiry ====================
    EXPIRY_CHECK_ENABLED: bool = False
    EXPIRY_CHECK_INTERVAL_SECONDS: int = 3600

    # ==================== CORS & Frontend ====================
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ==================== Features ====================
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
    )

    # ==================== Properties ====================
    @property
    def supabase_enabled(self) -> bool:
        """Supabase is used only when selected and fully configured"""
        return self.STORAGE_BACKEND == "supabase" and bool(self.SUPABASE_URL and self.SUPABASE_KEY)


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
