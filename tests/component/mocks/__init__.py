"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (database, NATS).
"""

from .delay_store_mock import MockAlertStore, MockOrderStore, MockTrackingCacheStore
from .nats_mock import MockEventBus

__all__ = [
    'MockAlertStore',
    'MockEventBus',
    'MockOrderStore',
    'MockTrackingCacheStore',
]
