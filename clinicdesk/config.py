# clinicdesk/config.py - Environment-driven configuration
from dotenv import load_dotenv

load_dotenv()
import os
from typing import Union
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings with validation and environment variable support (Pydantic V2 Syntax)"""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow",
        case_sensitive=False
    )

    # Application
    app_name: str = "ClinicDesk Clinic Management System"
    app_version: str = "1.0.0"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Persistence
    database_url: str = Field(default="sqlite:///./clinicdesk.db", alias="DATABASE_URL")
    seed_on_startup: bool = Field(default=True, alias="SEED_ON_STARTUP")

    # Simulated backend latency (milliseconds)
    simulated_delay_ms: int = Field(default=500, ge=0, alias="SIMULATED_DELAY_MS")
    payment_delay_ms: int = Field(default=1000, ge=0, alias="PAYMENT_DELAY_MS")
    insurance_verification_delay_ms: int = Field(default=2000, ge=0, alias="INSURANCE_VERIFICATION_DELAY_MS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # CORS
    cors_origins: Union[str, list[str]] = Field(default=["http://localhost:5173", "http://localhost:3000"], alias="CORS_ORIGINS")

    @field_validator("cors_origins", mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            if not v.strip():
                return ["http://localhost:5173", "http://localhost:3000"]
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL is required")
        if not v.startswith(("postgresql://", "postgresql+psycopg2://", "sqlite:///")):
            raise ValueError("DATABASE_URL must be a valid PostgreSQL or SQLite URL")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = (v or "INFO").upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL '{v}'")
        return level

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


# Environment-specific configurations
class DevelopmentConfig(Settings):
    """Development environment configuration"""
    debug: bool = True
    environment: str = "development"

class ProductionConfig(Settings):
    """Production environment configuration"""
    debug: bool = False
    environment: str = "production"
    log_json: bool = True

class TestingConfig(Settings):
    """Testing environment configuration"""
    debug: bool = True
    environment: str = "testing"
    database_url: str = "sqlite:///./test.db"
    seed_on_startup: bool = False
    simulated_delay_ms: int = 0
    payment_delay_ms: int = 0
    insurance_verification_delay_ms: int = 0

def get_config_by_env(env: str) -> Settings:
    """Get configuration by environment name"""
    configs = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig
    }

    config_class = configs.get(env.lower(), Settings)
    return config_class()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance for the ENVIRONMENT in effect"""
    return get_config_by_env(os.getenv("ENVIRONMENT", "development"))
