"""
Batch Scanner Component Tests

Worker pool over in-memory stores: isolation of failures, listing order,
cancellation and concurrency bound.

Usage:
    pytest tests/component/delay_detection/test_batch_scanner_component.py -v
"""
import asyncio

import pytest

from microservices.delay_detection_service.models import DelaySeverity, ShipmentStatus
from tests.component.mocks import MockTrackingCacheStore

pytestmark = [pytest.mark.component, pytest.mark.asyncio]


@pytest.fixture
def scanner(service):
    return service.scanner


def _add_orders(order_store, factory, ages):
    return [
        order_store.add_order(factory.make_order(created_at=factory.business_days_ago(age)))
        for age in ages
    ]


class CancellingCacheStore(MockTrackingCacheStore):
    """Sets the cancel event on the first lookup"""

    def __init__(self, cancel_event: asyncio.Event):
        super().__init__()
        self.cancel_event = cancel_event
        self.lookups = 0

    async def get_cache(self, tracking_code):
        self.lookups += 1
        self.cancel_event.set()
        return await super().get_cache(tracking_code)


class SlowCacheStore(MockTrackingCacheStore):
    """Tracks how many lookups are in flight"""

    def __init__(self):
        super().__init__()
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_cache(self, tracking_code):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return await super().get_cache(tracking_code)


class TestScanResults:

    async def test_collects_delayed_in_listing_order(self, scanner, order_store, factory):
        late, on_time, very_late = _add_orders(order_store, factory, [20, 5, 25])

        report = await scanner.scan()

        assert report.scanned == 3
        assert [a.order_id for a in report.delayed] == [late.order_id, very_late.order_id]
        assert report.delayed[0].delay_severity == DelaySeverity.CRITICAL
        assert report.delayed[1].delay_severity == DelaySeverity.URGENT
        assert report.failed == 0
        assert report.cancelled is False
        assert report.finished_at == factory.now

    async def test_scan_all_orders_returns_delayed_only(self, scanner, order_store, factory):
        _add_orders(order_store, factory, [1, 2, 17])

        delayed = await scanner.scan_all_orders()

        assert [a.delay_days for a in delayed] == [2]

    async def test_failing_order_does_not_abort(self, scanner, order_store, cache_store, factory):
        first, broken, last = _add_orders(order_store, factory, [20, 20, 20])
        cache_store.fail_for(broken.tracking_code)

        report = await scanner.scan()

        assert report.scanned == 3
        assert report.failed == 1
        assert [a.order_id for a in report.delayed] == [first.order_id, last.order_id]

    async def test_unknown_carrier_counted_as_not_found(self, scanner, order_store, factory):
        _add_orders(order_store, factory, [20])
        order_store.add_order(factory.make_order(carrier="fedex", service_type=None))

        report = await scanner.scan()

        assert report.not_found == 1
        assert len(report.delayed) == 1

    async def test_refilters_store_listing(self, scanner, order_store, factory):
        active = factory.make_order(created_at=factory.business_days_ago(20))
        order_store.set_listing([
            active,
            factory.make_order(status=ShipmentStatus.DELIVERED),
            factory.make_order(status=ShipmentStatus.CANCELLED),
            factory.make_order(tracking_code=None),
        ])

        report = await scanner.scan()

        assert report.scanned == 1
        assert [a.order_id for a in report.delayed] == [active.order_id]

    async def test_listing_failure_marks_source_unavailable(self, scanner, order_store):
        order_store.set_failure("list_active_orders")

        report = await scanner.scan()

        assert report.source_unavailable is True
        assert report.scanned == 0
        assert report.delayed == []

    async def test_empty_store(self, scanner):
        report = await scanner.scan()

        assert report.scanned == 0
        assert report.delayed == []


class TestCancellationAndConcurrency:

    async def test_preset_cancel_scans_nothing(self, scanner, order_store, factory):
        _add_orders(order_store, factory, [20, 20])
        cancel_event = asyncio.Event()
        cancel_event.set()

        report = await scanner.scan(cancel_event=cancel_event)

        assert report.scanned == 0
        assert report.cancelled is True

    async def test_cancel_between_orders(self, service, order_store, factory):
        _add_orders(order_store, factory, [20, 20, 20, 20])
        cancel_event = asyncio.Event()
        cache_store = CancellingCacheStore(cancel_event)
        service.analyzer.tracking_cache_store = cache_store

        report = await service.scanner.scan(cancel_event=cancel_event, max_concurrency=1)

        assert report.scanned == 1
        assert cache_store.lookups == 1
        assert report.cancelled is True
        assert len(report.delayed) == 1

    async def test_worker_count_is_bounded(self, service, order_store, factory):
        _add_orders(order_store, factory, [20] * 6)
        cache_store = SlowCacheStore()
        service.analyzer.tracking_cache_store = cache_store

        report = await service.scanner.scan(max_concurrency=2)

        assert report.scanned == 6
        assert cache_store.max_in_flight <= 2
