"""Application configuration"""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_prefix="PORTAL__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: str = "development"
    port: int = 8070

    # Database
    db_url: str = "sqlite:///data/portal.db"

    # Deployment environments, in display order
    active_envs: list[str] = ["DEV", "FAT", "UAT", "PRO"]
    admin_service_urls: dict[str, str] = {
        "DEV": "http://localhost:8090",
        "FAT": "http://localhost:8091",
        "UAT": "http://localhost:8092",
        "PRO": "http://localhost:8093",
    }
    internal_api_key: str = "change-me-internal-key"

    # Remote admin services
    remote_call_timeout: float = 10.0  # seconds, per environment
    env_health_check_enabled: bool = False
    env_health_check_interval: int = 10  # seconds
    env_down_threshold: int = 2  # consecutive failed probes

    # Logging
    log_level: str = "INFO"

    # Version
    version: str = "0.1.0"

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment.lower() == "development"


# Create settings instance
settings = Settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("portal")
