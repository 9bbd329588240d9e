"""
Delay Detection Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from datetime import datetime
from typing import Any, List, Optional, Protocol, runtime_checkable

# Import only models (no I/O dependencies)
from .models import DelayAlert, ShipmentOrder, TrackingCacheEntry


# ============================================================================
# Custom Exceptions - defined here to avoid importing repository
# ============================================================================

class DelayDetectionError(Exception):
    """Base exception for delay detection errors"""
    pass


class UpstreamStoreError(DelayDetectionError):
    """An external store call failed or timed out"""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Upstream call {operation} failed{detail}")


# ============================================================================
# Store Protocols
# ============================================================================

@runtime_checkable
class OrderStoreProtocol(Protocol):
    """
    Interface for the order store.

    Implementations must provide these methods.
    Used for dependency injection to enable testing.
    """

    async def get_order(self, order_id: str) -> Optional[ShipmentOrder]:
        """Get order by ID"""
        ...

    async def list_active_orders(self) -> List[ShipmentOrder]:
        """Orders not delivered/cancelled that carry a tracking code"""
        ...

    async def list_delivered_since(
        self, carrier: str, since: datetime
    ) -> List[ShipmentOrder]:
        """Delivered orders of a carrier with delivered_at >= since"""
        ...


@runtime_checkable
class TrackingCacheStoreProtocol(Protocol):
    """Interface for the tracking event cache"""

    async def get_cache(self, tracking_code: str) -> Optional[TrackingCacheEntry]:
        """Get cached tracking state for a tracking code"""
        ...


@runtime_checkable
class AlertStoreProtocol(Protocol):
    """Interface for the proactive alert store"""

    async def insert_alert(self, alert: DelayAlert) -> None:
        """Persist an alert"""
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Interface for Event Bus - no I/O imports"""

    async def publish_event(self, event: Any) -> None:
        """Publish an event"""
        ...

    async def close(self) -> None:
        """Close the event bus connection"""
        ...
