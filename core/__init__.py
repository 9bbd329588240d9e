#!/usr/bin/env python3
"""
Core Module for the Delay Detection Microservice

Shared infrastructure components.

COMPONENTS:
    - config/: Dataclass configuration loaded from environment (python-dotenv)
    - logger.py: Service logger setup
    - nats_client.py: NATS JetStream event bus
    - consul_registry.py: Consul KV configuration and service discovery

USAGE:
    from core.config import settings
    from core.logger import setup_service_logger

    logger = setup_service_logger("delay_detection_service")
"""

__version__ = "2.0.0"
