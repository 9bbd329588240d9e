"""
Delay Detection Service - Business Logic

Delay detection and predictive delivery for shipment tracking.

Uses dependency injection for testability.
- Stores are injected, not created at import time
- The clock is injected so every computation is reproducible
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional

from core.config import DelayEngineConfig

from .alert_emitter import AlertEmitter
from .batch_scanner import BatchScanner
from .business_calendar import resolve_timezone, to_business_date, utc_now
from .delay_analyzer import DelayAnalyzer
from .delay_probability import DelayProbabilityEstimator
from .delivery_predictor import DeliveryPredictor
from .events.publishers import publish_delay_scan_completed
from .historical_performance import HistoricalPerformanceTracker
from .models import (
    CarrierSLA,
    DelayAnalysis,
    DelayPrediction,
    DelayScanReport,
    DeliveryPrediction,
    HistoricalPerformanceSnapshot,
    ShipmentOrder,
)
# Import protocols (no I/O dependencies) - NOT the concrete repository!
from .protocols import (
    AlertStoreProtocol,
    EventBusProtocol,
    OrderStoreProtocol,
    TrackingCacheStoreProtocol,
    UpstreamStoreError,
)
from .sla_registry import SLARegistry
from .upstream import call_store

logger = logging.getLogger(__name__)


class DelayDetectionService:
    """
    Delay detection service business logic

    Wires the engine components together and exposes the operations used by
    the HTTP layer and the scheduled scan.
    """

    def __init__(
        self,
        order_store: OrderStoreProtocol,
        tracking_cache_store: TrackingCacheStoreProtocol,
        alert_store: AlertStoreProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        sla_registry: Optional[SLARegistry] = None,
        config: Optional[DelayEngineConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize service with injected dependencies.

        Args:
            order_store: Order store (inject mock for testing)
            tracking_cache_store: Tracking cache store
            alert_store: Proactive alert store
            event_bus: Event bus for publishing events
            sla_registry: Carrier SLA table (bundled defaults if None)
            config: Engine heuristics and limits
            clock: Returns the current time (UTC now if None)
        """
        self.order_store = order_store
        self.tracking_cache_store = tracking_cache_store
        self.event_bus = event_bus
        self.config = config or DelayEngineConfig()
        self.sla_registry = sla_registry or SLARegistry()
        self.clock = clock or utc_now
        self.tz = resolve_timezone(self.config.business_timezone)

        self.performance_tracker = HistoricalPerformanceTracker(
            order_store, self.sla_registry, self.config, self.clock, self.tz
        )
        self.delivery_predictor = DeliveryPredictor(self.config, self.tz)
        self.probability_estimator = DelayProbabilityEstimator(self.config)
        self.analyzer = DelayAnalyzer(
            order_store,
            tracking_cache_store,
            self.sla_registry,
            self.performance_tracker,
            self.delivery_predictor,
            self.config,
            self.clock,
            self.tz,
        )
        self.scanner = BatchScanner(order_store, self.analyzer, self.config, self.clock)
        self.alert_emitter = AlertEmitter(alert_store, event_bus, self.config, self.clock)

    async def _get_order(self, order_id: str) -> Optional[ShipmentOrder]:
        return await call_store(
            "get_order",
            self.order_store.get_order(order_id),
            self.config.store_timeout_seconds,
        )

    # =========================================================================
    # Analysis
    # =========================================================================

    async def analyze_delay(
        self, order_id: str, tracking_code: str, carrier: Optional[str] = None
    ) -> Optional[DelayAnalysis]:
        """
        Analyze one order against its carrier SLA.

        Returns None when the order or the SLA is missing.

        Raises:
            UpstreamStoreError: a store was unreachable
        """
        try:
            return await self.analyzer.analyze(order_id, tracking_code, carrier)
        except UpstreamStoreError as e:
            logger.error(f"Delay analysis for order {order_id} hit an unavailable store: {e}")
            raise
        except Exception as e:
            logger.error(f"Error analyzing delay for order {order_id}: {e}", exc_info=True)
            return None

    async def predict_delivery(
        self, order_id: str, tracking_code: str
    ) -> Optional[DeliveryPrediction]:
        """
        Predicted delivery date and confidence for one order.

        Returns None when the order or the SLA is missing.

        Raises:
            UpstreamStoreError: a store was unreachable
        """
        try:
            return await self._predict_delivery(order_id, tracking_code)
        except UpstreamStoreError as e:
            logger.error(f"Delivery prediction for order {order_id} hit an unavailable store: {e}")
            raise
        except Exception as e:
            logger.error(f"Error predicting delivery for order {order_id}: {e}", exc_info=True)
            return None

    async def _predict_delivery(
        self, order_id: str, tracking_code: str
    ) -> Optional[DeliveryPrediction]:
        order = await self._get_order(order_id)
        if order is None:
            return None

        sla = self.sla_registry.lookup(order.carrier, order.service_type)
        if sla is None:
            logger.warning(f"No SLA configured for carrier {order.carrier}")
            return None

        cache = await call_store(
            "get_cache",
            self.tracking_cache_store.get_cache(tracking_code),
            self.config.store_timeout_seconds,
        )
        today = to_business_date(self.clock(), self.tz)
        return self.delivery_predictor.predict(order, cache, sla, today)

    async def predict_delay(
        self, order_id: str, tracking_code: str
    ) -> Optional[DelayPrediction]:
        """
        Probability that an in-progress order ends up late.

        Returns None when the order or the SLA is missing.

        Raises:
            UpstreamStoreError: the order or tracking cache store was unreachable
        """
        try:
            return await self._predict_delay(order_id, tracking_code)
        except UpstreamStoreError as e:
            logger.error(f"Delay prediction for order {order_id} hit an unavailable store: {e}")
            raise
        except Exception as e:
            logger.error(f"Error predicting delay for order {order_id}: {e}", exc_info=True)
            return None

    async def _predict_delay(
        self, order_id: str, tracking_code: str
    ) -> Optional[DelayPrediction]:
        order = await self._get_order(order_id)
        if order is None:
            return None

        sla = self.sla_registry.lookup(order.carrier, order.service_type)
        if sla is None:
            logger.warning(f"No SLA configured for carrier {order.carrier}")
            return None

        # Loaded once for both the analysis factors and the estimator
        performance = await self.analyzer.load_performance(order.carrier, sla)

        analysis = await self.analyzer.analyze_order(order, tracking_code, performance=performance)
        if analysis is None:
            return None

        return self.probability_estimator.estimate(analysis, sla, performance)

    # =========================================================================
    # Carrier data
    # =========================================================================

    async def get_carrier_performance(
        self,
        carrier: str,
        window_days: Optional[int] = None,
        service_type: Optional[str] = None,
    ) -> Optional[HistoricalPerformanceSnapshot]:
        """Historical delivery performance of a carrier"""
        return await self.performance_tracker.get_performance(carrier, window_days, service_type)

    def get_carrier_sla(
        self, carrier: str, service_type: Optional[str] = None
    ) -> Optional[CarrierSLA]:
        return self.sla_registry.lookup(carrier, service_type)

    # =========================================================================
    # Batch scan and alerts
    # =========================================================================

    async def scan_all_orders(
        self,
        cancel_event: Optional[asyncio.Event] = None,
        max_concurrency: Optional[int] = None,
    ) -> List[DelayAnalysis]:
        """Delayed analyses of all active orders"""
        return await self.scanner.scan_all_orders(cancel_event, max_concurrency)

    async def run_delay_scan(
        self,
        emit_alerts: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
        max_concurrency: Optional[int] = None,
    ) -> DelayScanReport:
        """
        Scan all active orders and optionally alert on each delayed one.

        Args:
            emit_alerts: Store an alert for every delayed order
            cancel_event: Set it to stop the scan between orders
            max_concurrency: Worker count override

        Returns:
            DelayScanReport
        """
        report = await self.scanner.scan(cancel_event, max_concurrency)

        if emit_alerts:
            for analysis in report.delayed:
                if await self.alert_emitter.emit(analysis):
                    report.alerts_emitted += 1

        if self.event_bus is not None:
            await publish_delay_scan_completed(self.event_bus, report)

        return report

    async def generate_delay_alert(self, analysis: DelayAnalysis) -> bool:
        """Store a delay alert; False if the store rejected it"""
        return await self.alert_emitter.emit(analysis)
