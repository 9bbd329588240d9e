"""
Alert Emitter

Turns a delayed DelayAnalysis into a proactive alert. Best effort: store
failures are logged and reported through the return value, never raised.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from core.config import DelayEngineConfig

from .business_calendar import utc_now
from .events.publishers import publish_delay_alert_created
from .models import AlertPriority, DelayAlert, DelayAnalysis, DelaySeverity
from .protocols import AlertStoreProtocol, EventBusProtocol
from .upstream import call_store

logger = logging.getLogger(__name__)


def priority_for(severity: DelaySeverity) -> AlertPriority:
    if severity == DelaySeverity.URGENT:
        return AlertPriority.URGENT
    if severity == DelaySeverity.CRITICAL:
        return AlertPriority.HIGH
    return AlertPriority.NORMAL


def alert_metadata(analysis: DelayAnalysis) -> Dict[str, Any]:
    return {
        "tracking_code": analysis.tracking_code,
        "carrier": analysis.carrier,
        "current_status": analysis.current_status.value,
        "days_in_transit": analysis.days_in_transit,
        "delay_days": analysis.delay_days,
        "delay_severity": analysis.delay_severity.value,
        "factors": list(analysis.factors),
        "expected_delivery": analysis.expected_delivery.isoformat(),
        "estimated_delivery": analysis.estimated_delivery.isoformat(),
        "predicted_delivery": analysis.predicted_delivery.isoformat(),
        "confidence": analysis.confidence,
        "analyzed_at": analysis.analyzed_at.isoformat(),
    }


class AlertEmitter:
    """Writes delay alerts to the alert store"""

    def __init__(
        self,
        alert_store: AlertStoreProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        config: Optional[DelayEngineConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.alert_store = alert_store
        self.event_bus = event_bus
        self.config = config or DelayEngineConfig()
        self.clock = clock

    def build_alert(self, analysis: DelayAnalysis) -> DelayAlert:
        message = f"Order with tracking code {analysis.tracking_code} is {analysis.delay_days} days late."
        if analysis.factors:
            message = f"{message} {'. '.join(analysis.factors)}"

        return DelayAlert(
            order_id=analysis.order_id,
            priority=priority_for(analysis.delay_severity),
            title=f"Order delayed - {analysis.delay_days} days",
            message=message,
            metadata=alert_metadata(analysis),
            created_at=self.clock(),
        )

    async def emit(self, analysis: DelayAnalysis) -> bool:
        """
        Store an alert for the analysis.

        Returns:
            True if the alert was stored, False otherwise
        """
        try:
            alert = self.build_alert(analysis)
            await call_store(
                "insert_alert",
                self.alert_store.insert_alert(alert),
                self.config.store_timeout_seconds,
            )
        except Exception as e:
            logger.error(f"Failed to store delay alert for order {analysis.order_id}: {e}")
            return False

        logger.info(
            f"Delay alert ({alert.priority.value}) stored for order {analysis.order_id}"
        )

        if self.event_bus is not None:
            await publish_delay_alert_created(self.event_bus, analysis, alert.priority)

        return True
