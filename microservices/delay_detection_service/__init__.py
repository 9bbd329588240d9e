"""
Delay Detection Service Microservice

SLA compliance verdicts, delivery prediction, delay probability and proactive
delay alerts for tracked shipments
"""

from .client import DelayDetectionServiceClient
from .delay_detection_service import DelayDetectionService
from .models import (
    AlertPriority,
    CarrierSLA,
    DelayAnalysis,
    DelayPrediction,
    DelayScanReport,
    DelaySeverity,
    DeliveryPrediction,
    HistoricalPerformanceSnapshot,
    ShipmentOrder,
    ShipmentStatus,
    TrackingCacheEntry,
    TrackingEvent,
)

__version__ = "1.0.0"
__all__ = [
    "DelayDetectionServiceClient",
    "DelayDetectionService",
    "AlertPriority",
    "CarrierSLA",
    "DelayAnalysis",
    "DelayPrediction",
    "DelayScanReport",
    "DelaySeverity",
    "DeliveryPrediction",
    "HistoricalPerformanceSnapshot",
    "ShipmentOrder",
    "ShipmentStatus",
    "TrackingCacheEntry",
    "TrackingEvent",
]
