"""
Configuration Manager

Centralized configuration for each club microservice.

Resolution order for every setting:
    1. Process environment variables
    2. deployment/environments/{env}.env (loaded with python-dotenv, never overrides)
    3. Built-in defaults

Usage:
    from core.config_manager import ConfigManager

    config_manager = ConfigManager("credit_service")
    config = config_manager.get_service_config()
    host, port = config_manager.discover_service(
        service_name="postgres_service",
        default_host="localhost",
        default_port=5432,
        env_host_key="POSTGRES_HOST",
        env_port_key="POSTGRES_PORT",
    )
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple

from dotenv import load_dotenv

from .config import InfraConfig, LoggingConfig, ServiceConfig

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Deployment environment"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


ENV_FILES = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class ConfigManager:
    """Per-service configuration access"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.environment = self._load_environment()
        self._service_config: Optional[ServiceConfig] = None
        self._infra_config: Optional[InfraConfig] = None
        self._logging_config: Optional[LoggingConfig] = None

    def _load_environment(self) -> str:
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        env_file = PROJECT_ROOT / ENV_FILES.get(env, ENV_FILES["development"])
        if env_file.exists():
            load_dotenv(env_file, override=False)
            logger.debug(f"Loaded environment file {env_file}")
        return env

    def get_service_config(self) -> ServiceConfig:
        """Get (cached) runtime settings for this service"""
        if self._service_config is None:
            self._service_config = ServiceConfig.from_env(self.service_name)
        return self._service_config

    def get_infra_config(self) -> InfraConfig:
        """Get (cached) infrastructure endpoints"""
        if self._infra_config is None:
            self._infra_config = InfraConfig.from_env()
        return self._infra_config

    def get_logging_config(self) -> LoggingConfig:
        """Get (cached) logging settings"""
        if self._logging_config is None:
            self._logging_config = LoggingConfig.from_env()
        return self._logging_config

    def get(self, key: str, default: Any = None) -> Any:
        """Read a raw setting from the environment"""
        return os.getenv(key, default)

    def get_int(self, key: str, default: int) -> int:
        """Read an integer setting, falling back to default on bad values"""
        value = os.getenv(key)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer for {key}: {value!r}, using {default}")
            return default

    def discover_service(
        self,
        service_name: str,
        default_host: str,
        default_port: int,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Resolve host and port for a dependency.

        Environment keys win; otherwise the defaults are used.
        """
        host = os.getenv(env_host_key) if env_host_key else None
        port_value = os.getenv(env_port_key) if env_port_key else None

        try:
            port = int(port_value) if port_value else default_port
        except ValueError:
            logger.warning(f"Invalid port for {service_name}: {port_value!r}, using {default_port}")
            port = default_port

        resolved_host = host or default_host
        logger.debug(f"Resolved {service_name} at {resolved_host}:{port}")
        return resolved_host, port

    def print_config_summary(self, show_secrets: bool = False):
        """Log the effective configuration (development aid)"""
        service = self.get_service_config()
        infra = self.get_infra_config()
        password = infra.postgres_password if show_secrets else "***"

        logger.info(f"Configuration for {self.service_name} ({self.environment})")
        logger.info(f"  port={service.service_port} debug={service.debug} log_level={service.log_level}")
        logger.info(
            f"  postgres={infra.postgres_user}:{password}@{infra.postgres_host}:"
            f"{infra.postgres_port}/{infra.postgres_db}"
        )
        logger.info(f"  nats_enabled={infra.nats_enabled} nats_url={infra.resolved_nats_url}")
        logger.info(f"  scheduler_enabled={service.scheduler_enabled}")


def create_config(service_name: str) -> ConfigManager:
    """Create a ConfigManager for a service"""
    return ConfigManager(service_name)


__all__ = ["ConfigManager", "Environment", "create_config"]
