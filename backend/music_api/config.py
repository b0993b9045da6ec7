"""Application configuration"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./music_api.db"

    # API Configuration
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Identity is resolved upstream; the player only reads the opaque user id
    user_id_header: str = "X-User-Id"

    # Player defaults for newly created sessions
    default_volume_percent: int = 80
    default_device_name: str = "Web Player"

    # Max seconds a command waits for another command of the same user
    player_lock_timeout_seconds: float = 5.0

    # Listing limits
    queue_default_limit: int = 20
    queue_max_limit: int = 100
    history_default_limit: int = 20

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Global settings instance
settings = Settings()
