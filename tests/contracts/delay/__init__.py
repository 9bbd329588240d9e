"""
Delay Detection Service Contracts

Test data factory for delay_detection_service.
"""

from .data_contract import FROZEN_NOW, FROZEN_TODAY, DelayTestDataFactory

__all__ = ["FROZEN_NOW", "FROZEN_TODAY", "DelayTestDataFactory"]
