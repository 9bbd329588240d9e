"""
Component Test Layer Configuration

Engine components and the service facade wired to in-memory stores.

Usage:
    pytest tests/component -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["NATS_ENABLED"] = "false"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config import DelayEngineConfig
from microservices.delay_detection_service.delay_detection_service import DelayDetectionService
from tests.component.mocks import (
    MockAlertStore,
    MockEventBus,
    MockOrderStore,
    MockTrackingCacheStore,
)


@pytest.fixture
def order_store() -> MockOrderStore:
    return MockOrderStore()


@pytest.fixture
def cache_store() -> MockTrackingCacheStore:
    return MockTrackingCacheStore()


@pytest.fixture
def alert_store() -> MockAlertStore:
    return MockAlertStore()


@pytest.fixture
def mock_event_bus() -> MockEventBus:
    """Mock NATS event bus"""
    return MockEventBus()


@pytest.fixture
def engine_config() -> DelayEngineConfig:
    """Defaults with a short store timeout"""
    return DelayEngineConfig(store_timeout_seconds=0.5)


@pytest.fixture
def service(order_store, cache_store, alert_store, mock_event_bus, engine_config, factory):
    """Service with mocked stores and a frozen clock"""
    return DelayDetectionService(
        order_store=order_store,
        tracking_cache_store=cache_store,
        alert_store=alert_store,
        event_bus=mock_event_bus,
        config=engine_config,
        clock=factory.clock(),
    )
