#!/usr/bin/env python3
"""Modular configuration system for the club services

Configuration hierarchy:
- infra_config: Infrastructure endpoints (PostgreSQL, NATS)
- service_config: Per-service port, debug flag and job settings
- logging_config: Logging configuration
"""
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .service_config import SERVICE_PORTS, ServiceConfig

__all__ = [
    'LoggingConfig',
    'InfraConfig',
    'ServiceConfig',
    'SERVICE_PORTS',
]
