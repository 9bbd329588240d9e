#!/usr/bin/env python3
"""Logging configuration"""
import os
from dataclasses import dataclass

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class LoggingConfig:
    """
    Logging for the service logger and the engine modules.

    Engine modules log through ``logging.getLogger(__name__)``, so they live
    under the ``microservices.<service_name>`` package logger, which gets its
    own level (scan summaries are INFO, per-order misses are DEBUG).
    """
    log_level: str = "INFO"
    engine_log_level: str = ""
    log_format: str = DEFAULT_LOG_FORMAT
    log_file: str = ""
    enable_console: bool = True

    service_name: str = "delay_detection_service"
    environment: str = "development"

    @property
    def resolved_engine_log_level(self) -> str:
        return (self.engine_log_level or self.log_level).upper()

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO"),
            engine_log_level=os.getenv("DELAY_ENGINE_LOG_LEVEL", ""),
            log_format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
            log_file=os.getenv("LOG_FILE", ""),
            enable_console=_bool(os.getenv("LOG_CONSOLE", "true")),
            service_name=os.getenv("SERVICE_NAME", "delay_detection_service"),
            environment=env,
        )
