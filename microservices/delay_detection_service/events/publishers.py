"""
Delay Detection Service Event Publishers

Functions to publish events from delay detection service
"""

import logging

from core.nats_client import Event, EventType, ServiceSource

from ..models import AlertPriority, DelayAnalysis, DelayScanReport
from .models import DelayAlertCreatedEvent, DelayScanCompletedEvent

logger = logging.getLogger(__name__)


async def publish_delay_alert_created(
    event_bus,
    analysis: DelayAnalysis,
    priority: AlertPriority,
) -> bool:
    """Publish delay.alert.created event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping delay.alert.created event")
        return False

    try:
        event_data = DelayAlertCreatedEvent(
            order_id=analysis.order_id,
            tracking_code=analysis.tracking_code,
            carrier=analysis.carrier,
            priority=priority.value,
            delay_days=analysis.delay_days,
            delay_severity=analysis.delay_severity.value,
            expected_delivery=analysis.expected_delivery,
            predicted_delivery=analysis.predicted_delivery,
            factors=list(analysis.factors),
        )

        event = Event(
            event_type=EventType.DELAY_ALERT_CREATED,
            source=ServiceSource.DELAY_DETECTION_SERVICE,
            data=event_data.model_dump(mode='json'),
            subject=analysis.order_id,
        )

        await event_bus.publish_event(event)
        logger.info(f"Published delay.alert.created event for order {analysis.order_id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish delay.alert.created event: {e}")
        return False


async def publish_delay_scan_completed(event_bus, report: DelayScanReport) -> bool:
    """Publish delay.scan.completed event"""
    if not event_bus:
        logger.warning("Event bus not available, skipping delay.scan.completed event")
        return False

    try:
        event_data = DelayScanCompletedEvent(
            scanned=report.scanned,
            delayed=len(report.delayed),
            failed=report.failed,
            not_found=report.not_found,
            alerts_emitted=report.alerts_emitted,
            cancelled=report.cancelled,
            source_unavailable=report.source_unavailable,
            delayed_order_ids=[a.order_id for a in report.delayed],
        )

        event = Event(
            event_type=EventType.DELAY_SCAN_COMPLETED,
            source=ServiceSource.DELAY_DETECTION_SERVICE,
            data=event_data.model_dump(mode='json'),
        )

        await event_bus.publish_event(event)
        logger.info(f"Published delay.scan.completed event ({report.scanned} orders scanned)")
        return True

    except Exception as e:
        logger.error(f"Failed to publish delay.scan.completed event: {e}")
        return False
