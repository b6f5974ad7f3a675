#!/usr/bin/env python3
"""Per-service runtime configuration

Port, debug flag and job settings for one club microservice.
"""
import os
from dataclasses import dataclass

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


# Default ports per service
SERVICE_PORTS = {
    "credit_service": 8260,
    "membership_service": 8261,
    "freeze_service": 8262,
    "waitlist_service": 8263,
}


@dataclass
class ServiceConfig:
    """Runtime settings for a single service"""

    service_name: str
    service_port: int = 8260
    debug: bool = False
    log_level: str = "INFO"

    # ===========================================
    # Background jobs
    # ===========================================
    scheduler_enabled: bool = True

    @classmethod
    def from_env(cls, service_name: str) -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        prefix = service_name.upper()
        default_port = SERVICE_PORTS.get(service_name, 8260)
        return cls(
            service_name=service_name,
            service_port=_int(os.getenv(f"{prefix}_PORT") or os.getenv("SERVICE_PORT", ""), default_port),
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO"),
            scheduler_enabled=_bool(os.getenv("SCHEDULER_ENABLED", "true")),
        )
