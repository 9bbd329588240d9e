"""
Delay Detection Client Tests

DelayDetectionServiceClient against the in-process app over an ASGI
transport.

Usage:
    pytest tests/api/delay_detection/test_delay_client_api.py -v
"""
import asyncio

import httpx
import pytest
import pytest_asyncio

from microservices.delay_detection_service import main as delay_main
from microservices.delay_detection_service.client import DelayDetectionServiceClient

pytestmark = [pytest.mark.api, pytest.mark.asyncio]


@pytest_asyncio.fixture
async def delay_client(client):
    # `client` swaps the app's service for one built on mocks
    async with DelayDetectionServiceClient(
        base_url="http://delay-detection",
        transport=httpx.ASGITransport(app=delay_main.app),
    ) as delay_client:
        yield delay_client


class TestDelayClient:

    async def test_health_check(self, delay_client):
        assert await delay_client.health_check() is True

    async def test_analyze_delay(self, delay_client, api_stores, factory):
        order = api_stores["orders"].add_order(
            factory.make_order(created_at=factory.business_days_ago(18))
        )

        analysis = await delay_client.analyze_delay(order.order_id, order.tracking_code)

        assert analysis["delay_days"] == 3
        assert analysis["delay_severity"] == "critical"

    async def test_not_found_returns_none(self, delay_client, factory):
        assert await delay_client.analyze_delay("ord_missing", factory.make_tracking_code()) is None
        assert await delay_client.get_carrier_sla("fedex") is None

    async def test_upstream_failure_returns_none(self, delay_client, api_stores, factory):
        api_stores["orders"].set_failure("get_order")

        assert await delay_client.predict_delay("ord_1", factory.make_tracking_code()) is None

    async def test_scan_and_carrier_data(self, delay_client, api_stores, factory):
        api_stores["orders"].add_order(factory.make_order(created_at=factory.business_days_ago(20)))
        api_stores["orders"].add_order(factory.make_delivered_order(17))

        report = await delay_client.scan(emit_alerts=True, max_concurrency=2)
        sla = await delay_client.get_carrier_sla("correios", "PAC")
        performance = await delay_client.get_carrier_performance("correios", window_days=30)

        assert report["alerts_emitted"] == 1
        assert sla["max_days"] == 15
        assert performance["average_delay"] == 2.0

    async def test_predict_delivery(self, delay_client, api_stores, factory):
        order = api_stores["orders"].add_order(factory.make_order())

        prediction = await delay_client.predict_delivery(order.order_id, order.tracking_code)

        assert prediction["basis"] == "sla_baseline"
        assert prediction["confidence"] == 70

    async def test_concurrent_scans_are_serialized(self, delay_client, api_stores, factory):
        api_stores["orders"].add_order(factory.make_order(created_at=factory.business_days_ago(20)))
        api_stores["orders"].set_delay(0.01)

        first, second = await asyncio.gather(delay_client.scan(), delay_client.scan())

        assert first["scanned"] == 1
        assert second["scanned"] == 1
        assert delay_main.microservice.scan_lock is not None
        assert not delay_main.microservice.scan_lock.locked()
