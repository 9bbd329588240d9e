"""
Delay Analyzer

Compares a shipment against its carrier SLA and produces a DelayAnalysis.
Reads from the order and tracking cache stores, never writes.
"""

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, List, Optional, Union

from core.config import DelayEngineConfig

from .business_calendar import (
    add_business_days,
    business_days_between,
    to_business_date,
    utc_now,
)
from .delivery_predictor import DeliveryPredictor
from .historical_performance import HistoricalPerformanceTracker
from .models import (
    CarrierSLA,
    DelayAnalysis,
    DelaySeverity,
    HistoricalPerformanceSnapshot,
    ShipmentOrder,
    TrackingCacheEntry,
    TROUBLE_STATUSES,
)
from .protocols import (
    OrderStoreProtocol,
    TrackingCacheStoreProtocol,
    UpstreamStoreError,
)
from .sla_registry import SLARegistry
from .upstream import call_store

logger = logging.getLogger(__name__)


CARRIER_EXCEPTION_FACTOR = "Exception or delay reported by carrier"
NO_MOVEMENT_FACTOR = "No movement for"

_NOT_LOADED = object()


def classify_severity(delay_days: int) -> DelaySeverity:
    """0 none, 1-2 warning, 3-5 critical, above 5 urgent"""
    if delay_days <= 0:
        return DelaySeverity.NONE
    if delay_days <= 2:
        return DelaySeverity.WARNING
    if delay_days <= 5:
        return DelaySeverity.CRITICAL
    return DelaySeverity.URGENT


class DelayAnalyzer:
    """SLA compliance check for a single shipment"""

    def __init__(
        self,
        order_store: OrderStoreProtocol,
        tracking_cache_store: TrackingCacheStoreProtocol,
        sla_registry: SLARegistry,
        performance_tracker: HistoricalPerformanceTracker,
        delivery_predictor: DeliveryPredictor,
        config: Optional[DelayEngineConfig] = None,
        clock: Callable[[], datetime] = utc_now,
        tz: tzinfo = timezone.utc,
    ):
        self.order_store = order_store
        self.tracking_cache_store = tracking_cache_store
        self.sla_registry = sla_registry
        self.performance_tracker = performance_tracker
        self.delivery_predictor = delivery_predictor
        self.config = config or DelayEngineConfig()
        self.clock = clock
        self.tz = tz

    def today(self) -> date:
        return to_business_date(self.clock(), self.tz)

    async def analyze(
        self, order_id: str, tracking_code: str, carrier: Optional[str] = None
    ) -> Optional[DelayAnalysis]:
        """
        Analyze an order by id.

        Returns None when the order does not exist or its carrier has no SLA.

        Raises:
            UpstreamStoreError: the order or tracking cache store failed
        """
        order = await call_store(
            "get_order",
            self.order_store.get_order(order_id),
            self.config.store_timeout_seconds,
        )
        if order is None:
            logger.debug(f"Order {order_id} not found")
            return None
        return await self.analyze_order(order, tracking_code, carrier)

    async def analyze_order(
        self,
        order: ShipmentOrder,
        tracking_code: str,
        carrier: Optional[str] = None,
        performance: Union[HistoricalPerformanceSnapshot, None, object] = _NOT_LOADED,
    ) -> Optional[DelayAnalysis]:
        """
        Analyze an already loaded order.

        Pass ``performance`` (None included) when the carrier history was
        already loaded; otherwise the analyzer loads it.
        """
        cache = await call_store(
            "get_cache",
            self.tracking_cache_store.get_cache(tracking_code),
            self.config.store_timeout_seconds,
        )

        now = self.clock()
        today = to_business_date(now, self.tz)
        created = to_business_date(order.created_at, self.tz)
        days_in_transit = business_days_between(created, today)

        carrier = carrier or order.carrier
        sla = self.sla_registry.lookup(carrier, order.service_type)
        if sla is None:
            logger.warning(
                f"No SLA configured for carrier {carrier}, cannot analyze order {order.order_id}"
            )
            return None

        expected = add_business_days(created, sla.max_days)
        estimated = (
            to_business_date(cache.estimated_delivery, self.tz)
            if cache and cache.estimated_delivery
            else expected
        )

        # Weekends after the deadline do not count as late days
        delay_days = business_days_between(expected, today)
        is_delayed = delay_days > 0

        status = order.status or (cache.current_status if cache else None)
        if performance is _NOT_LOADED:
            performance = await self.load_performance(carrier, sla)
        factors = self._collect_factors(order, cache, performance, today)

        prediction = self.delivery_predictor.predict(order, cache, sla, today)

        return DelayAnalysis(
            tracking_code=tracking_code,
            order_id=order.order_id,
            carrier=carrier,
            current_status=status,
            days_in_transit=days_in_transit,
            expected_delivery=expected,
            estimated_delivery=estimated,
            is_delayed=is_delayed,
            delay_severity=classify_severity(delay_days),
            delay_days=delay_days,
            predicted_delivery=prediction.predicted_delivery,
            confidence=prediction.confidence,
            factors=factors,
            analyzed_at=now,
        )

    async def load_performance(
        self, carrier: str, sla: CarrierSLA
    ) -> Optional[HistoricalPerformanceSnapshot]:
        """Carrier history for the factor list; None when the store is down"""
        try:
            return await self.performance_tracker.get_performance(
                carrier, service_type=sla.service_type
            )
        except UpstreamStoreError as e:
            logger.warning(f"Skipping carrier history for {carrier}: {e}")
            return None

    def _collect_factors(
        self,
        order: ShipmentOrder,
        cache: Optional[TrackingCacheEntry],
        performance: Optional[HistoricalPerformanceSnapshot],
        today: date,
    ) -> List[str]:
        factors: List[str] = []

        status = order.status or (cache.current_status if cache else None)
        if status in TROUBLE_STATUSES:
            factors.append(CARRIER_EXCEPTION_FACTOR)

        newest = cache.newest_event if cache else None
        if newest is not None:
            idle_days = business_days_between(to_business_date(newest.timestamp, self.tz), today)
            if idle_days > self.config.stale_tracking_days:
                factors.append(f"{NO_MOVEMENT_FACTOR} {idle_days} days")

        if performance is not None and performance.average_delay > 0:
            factors.append(
                f"Carrier's historical average delay is {performance.average_delay:.1f} days"
            )

        return factors
