"""
Delay Detection Service Models

Shipment, tracking, SLA and delay analysis data models.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class ShipmentStatus(str, Enum):
    """Shipment order status"""
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    DELAYED = "delayed"
    EXCEPTION = "exception"
    CANCELLED = "cancelled"
    RETURNED = "returned"


# Orders in these states are never scanned
INACTIVE_STATUSES = frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.CANCELLED})

# Orders in these states can no longer become late
TERMINAL_STATUSES = frozenset({
    ShipmentStatus.DELIVERED,
    ShipmentStatus.CANCELLED,
    ShipmentStatus.RETURNED,
})

TROUBLE_STATUSES = frozenset({ShipmentStatus.DELAYED, ShipmentStatus.EXCEPTION})


class DelaySeverity(str, Enum):
    """How far a shipment is past its expected delivery date"""
    NONE = "none"
    WARNING = "warning"
    CRITICAL = "critical"
    URGENT = "urgent"


class AlertPriority(str, Enum):
    """Priority of a proactive alert"""
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


# =============================================================================
# Collaborator records (read from external stores)
# =============================================================================

class ShipmentOrder(BaseModel):
    """Order as exposed by the order store"""
    order_id: str
    carrier: str
    created_at: datetime
    status: ShipmentStatus = ShipmentStatus.PENDING
    delivered_at: Optional[datetime] = None
    tracking_code: Optional[str] = None
    service_type: Optional[str] = None


class TrackingEvent(BaseModel):
    """Single carrier tracking event"""
    timestamp: datetime
    location: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class TrackingCacheEntry(BaseModel):
    """Cached tracking state for a tracking code"""
    tracking_code: str
    carrier: Optional[str] = None
    current_status: Optional[ShipmentStatus] = None
    events: List[TrackingEvent] = Field(default_factory=list)
    estimated_delivery: Optional[datetime] = None
    last_update: Optional[datetime] = None

    @property
    def newest_event(self) -> Optional[TrackingEvent]:
        return max(self.events, key=lambda e: e.timestamp) if self.events else None

    @property
    def oldest_event(self) -> Optional[TrackingEvent]:
        return min(self.events, key=lambda e: e.timestamp) if self.events else None


class CarrierSLA(BaseModel):
    """Expected transit window of a carrier service, in business days"""
    model_config = ConfigDict(frozen=True)

    carrier: str
    service_type: Optional[str] = None
    min_days: int = Field(..., ge=0)
    max_days: int = Field(..., ge=0)
    regions: List[str] = Field(default_factory=lambda: ["all"])

    @model_validator(mode="after")
    def _check_window(self) -> "CarrierSLA":
        if self.min_days > self.max_days:
            raise ValueError("min_days cannot exceed max_days")
        return self


# =============================================================================
# Computed results
# =============================================================================

class DelayAnalysis(BaseModel):
    """SLA compliance verdict for one shipment"""
    model_config = ConfigDict(frozen=True)

    tracking_code: str
    order_id: str
    carrier: str
    current_status: ShipmentStatus
    days_in_transit: int = Field(..., ge=0)
    expected_delivery: date
    estimated_delivery: date
    is_delayed: bool
    delay_severity: DelaySeverity
    delay_days: int = Field(..., ge=0)
    predicted_delivery: date
    confidence: int = Field(..., ge=0, le=100)
    factors: List[str] = Field(default_factory=list)
    analyzed_at: datetime


class HistoricalPerformanceSnapshot(BaseModel):
    """Carrier delivery performance over a trailing window"""
    carrier: str
    average_delay: float = Field(..., ge=0)
    on_time_rate: float = Field(..., ge=0, le=100)
    sample_size: int = Field(..., ge=1)
    window_days: int


class DeliveryPrediction(BaseModel):
    """Predicted delivery date with the predictor's own confidence"""
    predicted_delivery: date
    confidence: int = Field(..., ge=0, le=100)
    basis: str


class DelayPredictionFactor(BaseModel):
    """Weighted risk factor"""
    factor: str
    impact: int = Field(..., ge=0, le=100)
    description: str


class DelayPrediction(BaseModel):
    """Likelihood that an in-progress shipment ends up late"""
    will_be_delayed: bool
    probability: int = Field(..., ge=0, le=100)
    estimated_delay_days: int = Field(..., ge=0)
    factors: List[DelayPredictionFactor] = Field(default_factory=list)


class DelayAlert(BaseModel):
    """Proactive alert record handed to the alert store"""
    order_id: str
    alert_type: str = "delay_warning"
    priority: AlertPriority
    title: str
    message: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    created_at: datetime


class DelayScanReport(BaseModel):
    """Outcome of a batch scan"""
    scanned: int = 0
    delayed: List[DelayAnalysis] = Field(default_factory=list)
    failed: int = 0
    not_found: int = 0
    alerts_emitted: int = 0
    cancelled: bool = False
    source_unavailable: bool = False
    started_at: datetime
    finished_at: Optional[datetime] = None


# =============================================================================
# Request Models
# =============================================================================

class AnalyzeDelayRequest(BaseModel):
    """Analyze one order"""
    order_id: str = Field(..., validation_alias=AliasChoices("order_id", "orderId"))
    tracking_code: str = Field(..., validation_alias=AliasChoices("tracking_code", "trackingCode"))
    carrier: Optional[str] = None


class PredictDelayRequest(BaseModel):
    """Predict delay / delivery for one order"""
    order_id: str = Field(..., validation_alias=AliasChoices("order_id", "orderId"))
    tracking_code: str = Field(..., validation_alias=AliasChoices("tracking_code", "trackingCode"))


class ScanRequest(BaseModel):
    """Batch scan options"""
    emit_alerts: bool = Field(False, validation_alias=AliasChoices("emit_alerts", "emitAlerts"))
    max_concurrency: Optional[int] = Field(
        None, ge=1, le=100, validation_alias=AliasChoices("max_concurrency", "maxConcurrency")
    )


__all__ = [
    "ShipmentStatus",
    "INACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "TROUBLE_STATUSES",
    "DelaySeverity",
    "AlertPriority",
    "ShipmentOrder",
    "TrackingEvent",
    "TrackingCacheEntry",
    "CarrierSLA",
    "DelayAnalysis",
    "HistoricalPerformanceSnapshot",
    "DeliveryPrediction",
    "DelayPredictionFactor",
    "DelayPrediction",
    "DelayAlert",
    "DelayScanReport",
    "AnalyzeDelayRequest",
    "PredictDelayRequest",
    "ScanRequest",
]
