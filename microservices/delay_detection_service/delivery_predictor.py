"""
Delivery Predictor

Estimates a delivery date and a confidence score from the current status and
the pace of tracking events.
"""

import logging
import math
from datetime import date, timezone, tzinfo
from typing import Optional

from core.config import DelayEngineConfig

from .business_calendar import add_business_days, business_days_between, to_business_date
from .models import (
    CarrierSLA,
    DeliveryPrediction,
    ShipmentOrder,
    ShipmentStatus,
    TrackingCacheEntry,
    TROUBLE_STATUSES,
)

logger = logging.getLogger(__name__)


class DeliveryPredictor:
    """Rule-based delivery date prediction"""

    def __init__(self, config: Optional[DelayEngineConfig] = None, tz: tzinfo = timezone.utc):
        self.config = config or DelayEngineConfig()
        self.tz = tz

    def predict(
        self,
        order: ShipmentOrder,
        cache: Optional[TrackingCacheEntry],
        sla: CarrierSLA,
        today: date,
    ) -> DeliveryPrediction:
        """
        Predict when the order will be delivered.

        Never raises: an internal failure yields the SLA deadline with the
        fallback confidence.
        """
        try:
            return self._predict(order, cache, sla, today)
        except Exception as e:
            logger.error(f"Delivery prediction failed for order {order.order_id}: {e}")
            return DeliveryPrediction(
                predicted_delivery=add_business_days(
                    to_business_date(order.created_at, self.tz), sla.max_days
                ),
                confidence=self.config.fallback_confidence,
                basis="fallback",
            )

    def _predict(
        self,
        order: ShipmentOrder,
        cache: Optional[TrackingCacheEntry],
        sla: CarrierSLA,
        today: date,
    ) -> DeliveryPrediction:
        created = to_business_date(order.created_at, self.tz)
        status = (cache.current_status if cache else None) or order.status

        if status == ShipmentStatus.OUT_FOR_DELIVERY:
            return DeliveryPrediction(
                predicted_delivery=today,
                confidence=self.config.out_for_delivery_confidence,
                basis="out_for_delivery",
            )

        if status == ShipmentStatus.IN_TRANSIT and cache and len(cache.events) >= 2:
            event_count = len(cache.events)
            elapsed = business_days_between(
                to_business_date(cache.oldest_event.timestamp, self.tz),
                to_business_date(cache.newest_event.timestamp, self.tz),
            )
            events_per_day = event_count / max(elapsed, 1)
            remaining_events = max(0, self.config.expected_events_per_shipment - event_count)
            days_remaining = math.ceil(remaining_events / events_per_day)
            return DeliveryPrediction(
                predicted_delivery=add_business_days(today, days_remaining),
                confidence=self.config.velocity_confidence,
                basis="event_velocity",
            )

        if status in TROUBLE_STATUSES:
            return DeliveryPrediction(
                predicted_delivery=add_business_days(
                    created, sla.max_days + self.config.exception_extra_days
                ),
                confidence=self.config.exception_confidence,
                basis="exception",
            )

        return DeliveryPrediction(
            predicted_delivery=add_business_days(created, sla.max_days),
            confidence=self.config.base_confidence,
            basis="sla_baseline",
        )
