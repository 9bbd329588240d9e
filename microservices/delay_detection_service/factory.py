"""
Delay Detection Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that imports I/O-dependent modules.

Usage:
    from .factory import create_delay_detection_service
    service = create_delay_detection_service(settings, event_bus)
"""
import logging
from typing import List, Optional

from core.config import DelayServiceSettings, get_settings

from .delay_detection_service import DelayDetectionService
from .models import CarrierSLA
from .sla_registry import SLARegistry, load_sla_file, load_sla_table

logger = logging.getLogger(__name__)


def _consul_sla_overrides(settings: DelayServiceSettings) -> List[CarrierSLA]:
    from core.consul_registry import ConsulRegistry

    registry = ConsulRegistry(
        service_name=settings.service.service_name,
        consul_host=settings.infrastructure.consul_host,
        consul_port=settings.infrastructure.consul_port,
    )
    records = registry.get_config(settings.engine.consul_sla_key)
    if not records:
        return []
    if not isinstance(records, list):
        logger.warning(f"Ignoring Consul key {settings.engine.consul_sla_key}: expected a JSON list")
        return []
    return load_sla_table(records)


def build_sla_registry(settings: DelayServiceSettings) -> SLARegistry:
    """
    Bundled SLA defaults, then the SLA table file, then Consul KV overrides.
    """
    registry = SLARegistry()

    if settings.engine.sla_table_file:
        registry = registry.with_overrides(load_sla_file(settings.engine.sla_table_file))

    if settings.service.consul_enabled:
        try:
            overrides = _consul_sla_overrides(settings)
        except ValueError as e:
            logger.error(f"Invalid SLA table in Consul, keeping local table: {e}")
            overrides = []
        if overrides:
            logger.info(f"Applying {len(overrides)} SLA overrides from Consul")
            registry = registry.with_overrides(overrides)

    return registry


def create_delay_detection_service(
    settings: Optional[DelayServiceSettings] = None,
    event_bus=None,
) -> DelayDetectionService:
    """
    Create DelayDetectionService with real dependencies.

    This function imports the real repository (which has I/O dependencies).
    Use this in production, NOT in tests.

    Args:
        settings: Service settings (global settings if None)
        event_bus: Event bus for publishing events

    Returns:
        DelayDetectionService instance with real dependencies
    """
    # Import real repository here (not at module level)
    from .delay_repository import DelayRepository

    settings = settings or get_settings()
    repository = DelayRepository(config=settings.infrastructure)

    return DelayDetectionService(
        order_store=repository,
        tracking_cache_store=repository,
        alert_store=repository,
        event_bus=event_bus,
        sla_registry=build_sla_registry(settings),
        config=settings.engine,
    )
