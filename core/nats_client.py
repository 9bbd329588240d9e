"""
NATS JetStream Client for Python Microservices

Event publishing for the delay detection service over nats-py.
"""

import json
import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

import nats
from nats.aio.client import Client as NATS
from nats.js import JetStreamContext

from core.config import InfraConfig

logger = logging.getLogger(__name__)


class EventJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


class EventType(Enum):
    """Event types published by the delay detection service"""

    DELAY_ALERT_CREATED = "delay.alert.created"
    DELAY_SCAN_COMPLETED = "delay.scan.completed"


class ServiceSource(Enum):
    """Service sources"""

    DELAY_DETECTION_SERVICE = "delay_detection_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }


class NATSEventBus:
    """
    NATS JetStream event bus.

    Events are published to a stream named after the first segment of the
    event type (delay.* -> delay-stream).
    """

    def __init__(self, service_name: str, config: Optional[InfraConfig] = None):
        self.service_name = service_name
        self.config = config or InfraConfig.from_env()
        self.url = self.config.resolved_nats_url

        self._nc: Optional[NATS] = None
        self._js: Optional[JetStreamContext] = None
        self._streams_ready: Dict[str, bool] = {}

        logger.info(f"NATS EventBus initialized: {self.url}")

    async def connect(self):
        """Connect to NATS and open a JetStream context"""
        try:
            self._nc = await nats.connect(self.url, name=self.service_name)
            self._js = self._nc.jetstream()
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS at {self.url}: {e}")
            raise

    async def _ensure_stream(self, event_type: str) -> str:
        prefix = event_type.split('.')[0]
        stream_name = f"{prefix}-stream"
        if not self._streams_ready.get(stream_name):
            try:
                await self._js.add_stream(name=stream_name, subjects=[f"{prefix}.>"])
            except Exception as e:
                logger.debug(f"Stream creation note: {e}")
            self._streams_ready[stream_name] = True
        return stream_name

    async def publish_event(self, event: Event) -> bool:
        """Publish an event to JetStream using the event type as subject"""
        if not self.is_connected:
            logger.error("Not connected to NATS")
            return False

        try:
            stream_name = await self._ensure_stream(event.type)
            data = json.dumps(event.to_dict(), cls=EventJSONEncoder).encode()
            ack = await self._js.publish(event.type, data, stream=stream_name)
            logger.info(f"Published event {event.type} [{event.id}] to stream {stream_name}, seq={ack.seq}")
            return True
        except Exception as e:
            logger.error(f"Error publishing event {event.id}: {e}")
            return False

    async def close(self):
        """Drain and close the NATS connection"""
        if self._nc:
            try:
                await self._nc.drain()
            except Exception as e:
                logger.warning(f"Error draining NATS connection: {e}")
            self._nc = None
            self._js = None
        logger.info("Disconnected from NATS")

    @property
    def is_connected(self) -> bool:
        """Check if connected to NATS"""
        return self._nc is not None and self._nc.is_connected


async def get_event_bus(
    service_name: str, config: Optional[InfraConfig] = None
) -> NATSEventBus:
    """
    Create and connect an event bus for a service.

    Args:
        service_name: Name of the service using the event bus
        config: Optional infrastructure config (defaults to environment)

    Returns:
        Connected NATSEventBus instance
    """
    event_bus = NATSEventBus(service_name=service_name, config=config)
    await event_bus.connect()
    return event_bus
