"""
Historical Performance Tracker

Average overage and on-time rate of a carrier over recently delivered orders.
Recomputed on every request; caching belongs to the caller.
"""

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional

from core.config import DelayEngineConfig

from .business_calendar import (
    business_days_between,
    ensure_aware,
    to_business_date,
    utc_now,
)
from .models import HistoricalPerformanceSnapshot
from .protocols import OrderStoreProtocol
from .sla_registry import SLARegistry
from .upstream import call_store

logger = logging.getLogger(__name__)


class HistoricalPerformanceTracker:
    """Computes HistoricalPerformanceSnapshot from the order store"""

    def __init__(
        self,
        order_store: OrderStoreProtocol,
        sla_registry: SLARegistry,
        config: Optional[DelayEngineConfig] = None,
        clock: Callable[[], datetime] = utc_now,
        tz: tzinfo = timezone.utc,
    ):
        self.order_store = order_store
        self.sla_registry = sla_registry
        self.config = config or DelayEngineConfig()
        self.clock = clock
        self.tz = tz

    async def get_performance(
        self,
        carrier: str,
        window_days: Optional[int] = None,
        service_type: Optional[str] = None,
    ) -> Optional[HistoricalPerformanceSnapshot]:
        """
        Carrier performance over the trailing window.

        Returns None when the carrier has no SLA or no order was delivered
        inside the window.

        Raises:
            UpstreamStoreError: the order store call failed
        """
        window_days = window_days or self.config.history_window_days
        sla = self.sla_registry.lookup(carrier, service_type)
        if sla is None:
            logger.debug(f"No SLA for carrier {carrier}, skipping history")
            return None

        now = ensure_aware(self.clock())
        since = now - timedelta(days=window_days)
        orders = await call_store(
            "list_delivered_since",
            self.order_store.list_delivered_since(carrier, since),
            self.config.store_timeout_seconds,
        )

        total_delay = 0
        on_time = 0
        sample_size = 0
        for order in orders:
            if order.delivered_at is None:
                continue
            if not since <= ensure_aware(order.delivered_at) <= now:
                continue
            actual_days = business_days_between(
                to_business_date(order.created_at, self.tz),
                to_business_date(order.delivered_at, self.tz),
            )
            overage = actual_days - sla.max_days
            total_delay += max(0, overage)
            if overage <= 0:
                on_time += 1
            sample_size += 1

        if sample_size == 0:
            return None

        return HistoricalPerformanceSnapshot(
            carrier=carrier,
            average_delay=total_delay / sample_size,
            on_time_rate=on_time / sample_size * 100,
            sample_size=sample_size,
            window_days=window_days,
        )
