#!/usr/bin/env python3
"""Modular configuration system for the delay detection service

Configuration hierarchy:
- infra_config: Backing services (PostgreSQL, NATS, Consul)
- service_config: Service identity and integration switches
- delay_config: Delay engine heuristics, windows and scan limits
- logging_config: Logging configuration
- main_config: Combined settings
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .service_config import ServiceConfig
from .delay_config import DelayEngineConfig
from .main_config import DelayServiceSettings

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = DelayServiceSettings.from_env()

def get_settings() -> DelayServiceSettings:
    """Get global settings instance"""
    return settings

def reload_settings() -> DelayServiceSettings:
    """Reload settings from environment"""
    global settings
    settings = DelayServiceSettings.from_env()
    return settings

__all__ = [
    # Main config
    'DelayServiceSettings',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'InfraConfig',
    'ServiceConfig',
    'DelayEngineConfig',
]
