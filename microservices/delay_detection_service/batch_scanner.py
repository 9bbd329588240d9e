"""
Batch Scanner

Runs the delay analyzer over every active order with a bounded pool of
asyncio workers. One failing order never fails the scan.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional

from core.config import DelayEngineConfig

from .business_calendar import utc_now
from .delay_analyzer import DelayAnalyzer
from .models import DelayAnalysis, DelayScanReport, INACTIVE_STATUSES, ShipmentOrder
from .protocols import OrderStoreProtocol, UpstreamStoreError
from .upstream import call_store

logger = logging.getLogger(__name__)


class BatchScanner:
    """Scans active orders for SLA breaches"""

    def __init__(
        self,
        order_store: OrderStoreProtocol,
        analyzer: DelayAnalyzer,
        config: Optional[DelayEngineConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.order_store = order_store
        self.analyzer = analyzer
        self.config = config or DelayEngineConfig()
        self.clock = clock

    async def scan(
        self,
        cancel_event: Optional[asyncio.Event] = None,
        max_concurrency: Optional[int] = None,
    ) -> DelayScanReport:
        """
        Analyze all active orders.

        Args:
            cancel_event: When set, workers stop before taking another order
            max_concurrency: Worker count (defaults to scan_concurrency)

        Returns:
            DelayScanReport; delayed analyses keep the store's listing order
        """
        report = DelayScanReport(started_at=self.clock())

        try:
            orders = await call_store(
                "list_active_orders",
                self.order_store.list_active_orders(),
                self.config.store_timeout_seconds,
            )
        except UpstreamStoreError as e:
            logger.error(f"Delay scan aborted, order listing unavailable: {e}")
            report.source_unavailable = True
            report.finished_at = self.clock()
            return report

        orders = [
            order for order in orders
            if order.status not in INACTIVE_STATUSES and order.tracking_code
        ]

        results: List[Optional[DelayAnalysis]] = [None] * len(orders)
        queue: asyncio.Queue = asyncio.Queue()
        for index, order in enumerate(orders):
            queue.put_nowait((index, order))

        workers = max(1, min(max_concurrency or self.config.scan_concurrency, len(orders) or 1))
        await asyncio.gather(*(
            self._worker(queue, results, report, cancel_event) for _ in range(workers)
        ))

        report.delayed = [a for a in results if a is not None and a.is_delayed]
        report.cancelled = bool(cancel_event and cancel_event.is_set() and not queue.empty())
        report.finished_at = self.clock()

        logger.info(
            f"Delay scan finished: scanned={report.scanned} delayed={len(report.delayed)} "
            f"failed={report.failed} not_found={report.not_found} cancelled={report.cancelled}"
        )
        return report

    async def scan_all_orders(
        self,
        cancel_event: Optional[asyncio.Event] = None,
        max_concurrency: Optional[int] = None,
    ) -> List[DelayAnalysis]:
        """Delayed analyses only"""
        report = await self.scan(cancel_event, max_concurrency)
        return report.delayed

    async def _worker(
        self,
        queue: asyncio.Queue,
        results: List[Optional[DelayAnalysis]],
        report: DelayScanReport,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return
            try:
                index, order = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            results[index] = await self._analyze(order, report)

            if self.config.scan_pacing_seconds > 0:
                await asyncio.sleep(self.config.scan_pacing_seconds)

    async def _analyze(
        self, order: ShipmentOrder, report: DelayScanReport
    ) -> Optional[DelayAnalysis]:
        report.scanned += 1
        try:
            analysis = await self.analyzer.analyze_order(order, order.tracking_code)
        except Exception as e:
            logger.error(f"Error analyzing order {order.order_id}: {e}")
            report.failed += 1
            return None

        if analysis is None:
            report.not_found += 1
        return analysis
