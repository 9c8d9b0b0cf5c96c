"""
Configuration management system using Pydantic Settings.
Supports environment-based configuration for the trip planning core.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import Optional
from enum import Enum
from pathlib import Path


class Environment(str, Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageBackend(str, Enum):
    """Key/value persistence backends"""
    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"


class GenerationSettings(BaseSettings):
    """Generative text endpoint configuration"""

    toolkit_url: str = Field(default="http://localhost:8787", description="Base URL of the AI toolkit")
    chat_path: str = Field(default="/ai/chat")
    timeout_seconds: float = Field(default=120.0, ge=5, le=600)
    cache_max_entries: Optional[int] = Field(default=100, ge=1, description="LRU cap for generated trips")

    model_config = {"env_prefix": "GENERATION_"}


class PhotoSettings(BaseSettings):
    """Place photo lookup configuration"""

    endpoint_url: Optional[str] = Field(
        default=None,
        description="Photo lookup worker URL; photo lookups are disabled when unset"
    )
    timeout_seconds: float = Field(default=20.0, gt=0, le=120)
    max_retries: int = Field(default=2, ge=0, le=10)
    backoff_base_seconds: float = Field(default=0.5, ge=0)
    backoff_max_seconds: float = Field(default=3.0, ge=0)
    fresh_seconds: int = Field(default=3600, ge=0)  # 1 hour
    retention_seconds: int = Field(default=86400, ge=0)  # 1 day

    model_config = {"env_prefix": "PHOTO_"}


class RateLimitSettings(BaseSettings):
    """Daily generation quota configuration"""

    max_generations_per_day: int = Field(default=10, ge=1, le=1000)
    storage_key: str = Field(default="@rate_limit")

    model_config = {"env_prefix": "RATE_LIMIT_"}


class RedisSettings(BaseSettings):
    """Redis key/value store configuration"""

    host: str = Field(default="localhost")
    port: int = Field(default=6379, ge=1, le=65535)
    password: Optional[str] = Field(default=None)
    db: int = Field(default=0, ge=0, le=15)
    socket_timeout: int = Field(default=5, ge=1, le=30)

    @property
    def url(self) -> str:
        """Generate Redis URL from configuration"""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"

    model_config = {"env_prefix": "REDIS_"}


class StorageSettings(BaseSettings):
    """Persisted state configuration"""

    backend: StorageBackend = Field(default=StorageBackend.FILE)
    file_path: str = Field(default="~/.tebitrip/state.json")
    saved_trips_key: str = Field(default="@saved_trips")

    @field_validator('backend', mode='before')
    @classmethod
    def normalize_backend(cls, v):
        """Accept backend names in any case"""
        if isinstance(v, str):
            return StorageBackend(v.lower())
        return v

    def get_file_path(self) -> Path:
        """Get absolute path of the JSON state file"""
        return Path(self.file_path).expanduser().resolve()

    model_config = {"env_prefix": "STORAGE_"}


class Settings(BaseSettings):
    """Main application settings"""

    # Application Configuration
    app_name: str = Field(default="TebiTrip")
    app_version: str = Field(default="1.0.0")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)

    # Logging Configuration
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="json", description="'json' or 'text'")

    # Nested Settings
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    photos: PhotoSettings = Field(default_factory=PhotoSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment setting"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and files"""
    global settings
    settings = Settings()
    return settings
