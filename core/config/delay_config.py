#!/usr/bin/env python3
"""Delay engine configuration

Tunable heuristics of the delay detection engine. The defaults reproduce the
values the dashboard has always shipped with; none of them were calibrated
against delivery data, so every one can be overridden per deployment.
"""
import os
from dataclasses import dataclass

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class DelayEngineConfig:
    """Heuristic constants, windows and scan limits"""

    # ===========================================
    # Delivery predictor
    # ===========================================
    expected_events_per_shipment: int = 8
    base_confidence: int = 70
    out_for_delivery_confidence: int = 95
    velocity_confidence: int = 75
    exception_confidence: int = 50
    fallback_confidence: int = 50
    exception_extra_days: int = 5

    # ===========================================
    # Delay analyzer / probability estimator
    # ===========================================
    stale_tracking_days: int = 3
    transit_sla_ratio: float = 0.8
    low_on_time_rate: float = 70.0
    status_impact: int = 80
    transit_time_impact: int = 50
    carrier_history_impact: int = 30
    stale_tracking_impact: int = 60

    # ===========================================
    # Historical performance
    # ===========================================
    history_window_days: int = 90

    # ===========================================
    # Batch scan and collaborator calls
    # ===========================================
    scan_concurrency: int = 5
    scan_pacing_seconds: float = 0.0
    store_timeout_seconds: float = 10.0

    # ===========================================
    # Calendar and SLA sources
    # ===========================================
    business_timezone: str = "UTC"
    sla_table_file: str = ""
    consul_sla_key: str = "carrier_slas"

    def __post_init__(self):
        for name in (
            "base_confidence",
            "out_for_delivery_confidence",
            "velocity_confidence",
            "exception_confidence",
            "fallback_confidence",
            "status_impact",
            "transit_time_impact",
            "carrier_history_impact",
            "stale_tracking_impact",
        ):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be within [0, 100], got {value}")
        if self.expected_events_per_shipment < 1:
            raise ValueError("expected_events_per_shipment must be at least 1")
        if self.scan_concurrency < 1:
            raise ValueError("scan_concurrency must be at least 1")
        if self.history_window_days < 1:
            raise ValueError("history_window_days must be at least 1")
        if self.stale_tracking_days < 0 or self.exception_extra_days < 0:
            raise ValueError("day thresholds cannot be negative")
        if self.scan_pacing_seconds < 0 or self.store_timeout_seconds <= 0:
            raise ValueError("scan pacing must be >= 0 and store timeout > 0")

    @classmethod
    def from_env(cls) -> 'DelayEngineConfig':
        """Load engine configuration from DELAY_* environment variables"""
        return cls(
            expected_events_per_shipment=_int(os.getenv("DELAY_EXPECTED_EVENTS", "8"), 8),
            base_confidence=_int(os.getenv("DELAY_BASE_CONFIDENCE", "70"), 70),
            out_for_delivery_confidence=_int(os.getenv("DELAY_OUT_FOR_DELIVERY_CONFIDENCE", "95"), 95),
            velocity_confidence=_int(os.getenv("DELAY_VELOCITY_CONFIDENCE", "75"), 75),
            exception_confidence=_int(os.getenv("DELAY_EXCEPTION_CONFIDENCE", "50"), 50),
            fallback_confidence=_int(os.getenv("DELAY_FALLBACK_CONFIDENCE", "50"), 50),
            exception_extra_days=_int(os.getenv("DELAY_EXCEPTION_EXTRA_DAYS", "5"), 5),
            stale_tracking_days=_int(os.getenv("DELAY_STALE_TRACKING_DAYS", "3"), 3),
            transit_sla_ratio=_float(os.getenv("DELAY_TRANSIT_SLA_RATIO", "0.8"), 0.8),
            low_on_time_rate=_float(os.getenv("DELAY_LOW_ON_TIME_RATE", "70"), 70.0),
            status_impact=_int(os.getenv("DELAY_STATUS_IMPACT", "80"), 80),
            transit_time_impact=_int(os.getenv("DELAY_TRANSIT_TIME_IMPACT", "50"), 50),
            carrier_history_impact=_int(os.getenv("DELAY_CARRIER_HISTORY_IMPACT", "30"), 30),
            stale_tracking_impact=_int(os.getenv("DELAY_STALE_TRACKING_IMPACT", "60"), 60),
            history_window_days=_int(os.getenv("DELAY_HISTORY_WINDOW_DAYS", "90"), 90),
            scan_concurrency=_int(os.getenv("DELAY_SCAN_CONCURRENCY", "5"), 5),
            scan_pacing_seconds=_float(os.getenv("DELAY_SCAN_PACING_SECONDS", "0"), 0.0),
            store_timeout_seconds=_float(os.getenv("DELAY_STORE_TIMEOUT_SECONDS", "10"), 10.0),
            business_timezone=os.getenv("DELAY_BUSINESS_TIMEZONE", "UTC"),
            sla_table_file=os.getenv("DELAY_SLA_TABLE_FILE", ""),
            consul_sla_key=os.getenv("DELAY_CONSUL_SLA_KEY", "carrier_slas"),
        )
