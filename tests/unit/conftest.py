"""
Unit Test Layer Configuration

Pure business logic: business calendar, SLA registry, severity bands,
delivery predictor, probability estimator, configuration.

Usage:
    pytest tests/unit -v
    pytest tests/unit -m unit -v
"""
import os
import sys

import pytest

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config import DelayEngineConfig


@pytest.fixture
def engine_config() -> DelayEngineConfig:
    """Engine configuration with the shipped defaults"""
    return DelayEngineConfig()
