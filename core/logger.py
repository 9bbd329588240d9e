"""
Service Logger Setup

Configures a named logger per microservice from LoggingConfig, plus the
package logger its modules log through.

Usage:
    from core.logger import setup_service_logger
    logger = setup_service_logger("delay_detection_service")
"""

import logging
import sys
from typing import List, Optional

from core.config import LoggingConfig


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    formatter = logging.Formatter(config.log_format)
    handlers: List[logging.Handler] = []

    if config.enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        handlers.append(console)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def _configure(logger: logging.Logger, level: str, handlers: List[logging.Handler]) -> None:
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.propagate = False


def setup_service_logger(
    service_name: str, config: Optional[LoggingConfig] = None
) -> logging.Logger:
    """
    Create (or reconfigure) the logger for a service.

    Handlers are replaced on every call so repeated setup does not
    duplicate output. The ``microservices.<service_name>`` package logger is
    configured with the same handlers and the engine log level.

    Args:
        service_name: Logger name, usually the service package name
        config: Logging configuration (defaults to environment)

    Returns:
        Configured service logger
    """
    config = config or LoggingConfig.from_env()

    handlers = _build_handlers(config)

    logger = logging.getLogger(service_name)
    _configure(logger, config.log_level.upper(), handlers)

    package_logger = logging.getLogger(f"microservices.{service_name}")
    _configure(package_logger, config.resolved_engine_log_level, handlers)

    return logger
