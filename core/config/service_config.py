#!/usr/bin/env python3
"""Service runtime configuration

Identity and runtime switches of the delay detection microservice.
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


@dataclass
class ServiceConfig:
    """Delay detection service runtime settings"""

    service_name: str = "delay_detection_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8262
    environment: str = "development"

    # ===========================================
    # Optional integrations
    # ===========================================
    consul_enabled: bool = False
    nats_enabled: bool = True

    @classmethod
    def from_env(cls) -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        return cls(
            service_name=os.getenv("SERVICE_NAME", "delay_detection_service"),
            service_host=os.getenv("SERVICE_HOST", "0.0.0.0"),
            service_port=_int(os.getenv("PORT") or os.getenv("SERVICE_PORT", "8262"), 8262),
            environment=os.getenv("ENV") or os.getenv("ENVIRONMENT", "development"),
            consul_enabled=_bool(os.getenv("CONSUL_ENABLED", "false")),
            nats_enabled=_bool(os.getenv("NATS_ENABLED", "true")),
        )
