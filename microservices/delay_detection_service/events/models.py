from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Event Type Definitions (Service-Specific)
# =============================================================================

class DelayEventType(str, Enum):
    """
    Events published by delay_detection_service.

    Stream: delay-stream
    Subjects: delay.>
    """
    ALERT_CREATED = "delay.alert.created"
    SCAN_COMPLETED = "delay.scan.completed"


# =============================================================================
# Event Data Models
# =============================================================================

class DelayAlertCreatedEvent(BaseModel):
    """Event published after a delay alert was stored"""
    order_id: str
    tracking_code: str
    carrier: str
    priority: str
    delay_days: int
    delay_severity: str
    expected_delivery: date
    predicted_delivery: date
    factors: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_now)


class DelayScanCompletedEvent(BaseModel):
    """Event published when a batch scan finishes"""
    scanned: int
    delayed: int
    failed: int
    not_found: int
    alerts_emitted: int
    cancelled: bool = False
    source_unavailable: bool = False
    delayed_order_ids: List[str] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_now)
