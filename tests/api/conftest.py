"""
API Test Layer Configuration

HTTP contract tests against the FastAPI app. The app's service is swapped
for one built on in-memory stores, so no database or NATS is needed.

Usage:
    pytest tests/api -v
"""
import os
import sys

import pytest
from fastapi.testclient import TestClient

os.environ["ENV"] = "testing"
os.environ["NATS_ENABLED"] = "false"
os.environ["CONSUL_ENABLED"] = "false"

# Add project root
sys.path.insert(
    0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
)

from microservices.delay_detection_service import main as delay_main
from microservices.delay_detection_service.delay_detection_service import DelayDetectionService
from tests.component.mocks import (
    MockAlertStore,
    MockEventBus,
    MockOrderStore,
    MockTrackingCacheStore,
)


@pytest.fixture
def api_stores():
    return {
        "orders": MockOrderStore(),
        "cache": MockTrackingCacheStore(),
        "alerts": MockAlertStore(),
        "event_bus": MockEventBus(),
    }


@pytest.fixture
def client(api_stores, factory):
    """
    TestClient without lifespan startup; the global microservice gets a
    service built on mocks.
    """
    previous = delay_main.microservice.service
    delay_main.microservice.scan_lock = None
    delay_main.microservice.service = DelayDetectionService(
        order_store=api_stores["orders"],
        tracking_cache_store=api_stores["cache"],
        alert_store=api_stores["alerts"],
        event_bus=api_stores["event_bus"],
        clock=factory.clock(),
    )
    yield TestClient(delay_main.app)
    delay_main.microservice.service = previous
    delay_main.microservice.scan_lock = None
