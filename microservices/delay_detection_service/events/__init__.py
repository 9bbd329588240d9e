"""
Delay Detection Service Events Module

Exports all event-related functionality for delay detection service
"""

from .models import (
    DelayEventType,
    DelayAlertCreatedEvent,
    DelayScanCompletedEvent,
)

from .publishers import (
    publish_delay_alert_created,
    publish_delay_scan_completed,
)

__all__ = [
    # Event Types
    "DelayEventType",
    # Event Models
    "DelayAlertCreatedEvent",
    "DelayScanCompletedEvent",
    # Publishers
    "publish_delay_alert_created",
    "publish_delay_scan_completed",
]
