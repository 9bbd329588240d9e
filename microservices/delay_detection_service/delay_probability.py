"""
Delay Probability Estimator

Heuristic likelihood that an in-progress shipment ends up late. Each
triggered risk factor carries a fixed impact; the probability is the mean of
the triggered impacts.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from core.config import DelayEngineConfig

from .delay_analyzer import NO_MOVEMENT_FACTOR
from .models import (
    CarrierSLA,
    DelayAnalysis,
    DelayPrediction,
    DelayPredictionFactor,
    HistoricalPerformanceSnapshot,
    TERMINAL_STATUSES,
    TROUBLE_STATUSES,
)


class DelayProbabilityEstimator:
    """Multi-factor delay probability"""

    def __init__(self, config: Optional[DelayEngineConfig] = None):
        self.config = config or DelayEngineConfig()

    def collect_factors(
        self,
        analysis: DelayAnalysis,
        sla: CarrierSLA,
        performance: Optional[HistoricalPerformanceSnapshot],
    ) -> List[DelayPredictionFactor]:
        factors: List[DelayPredictionFactor] = []

        if analysis.current_status in TROUBLE_STATUSES:
            factors.append(DelayPredictionFactor(
                factor="Current status",
                impact=self.config.status_impact,
                description=f"Carrier reported status {analysis.current_status.value}",
            ))

        if analysis.days_in_transit > self.config.transit_sla_ratio * sla.max_days:
            factors.append(DelayPredictionFactor(
                factor="Time in transit",
                impact=self.config.transit_time_impact,
                description=(
                    f"{analysis.days_in_transit} business days in transit, "
                    f"approaching or exceeding the {sla.max_days} day SLA"
                ),
            ))

        if performance is not None and performance.on_time_rate < self.config.low_on_time_rate:
            factors.append(DelayPredictionFactor(
                factor="Carrier history",
                impact=self.config.carrier_history_impact,
                description=(
                    f"Carrier delivered {performance.on_time_rate:.0f}% on time "
                    f"over the last {performance.window_days} days"
                ),
            ))

        if any(f.startswith(NO_MOVEMENT_FACTOR) for f in analysis.factors):
            factors.append(DelayPredictionFactor(
                factor="Missing updates",
                impact=self.config.stale_tracking_impact,
                description="Tracking data is stale",
            ))

        return factors

    def estimate(
        self,
        analysis: DelayAnalysis,
        sla: CarrierSLA,
        performance: Optional[HistoricalPerformanceSnapshot] = None,
    ) -> DelayPrediction:
        """
        Estimate the delay probability for an analyzed shipment.

        Orders in a terminal status score 0 with no factors.
        """
        if analysis.current_status in TERMINAL_STATUSES:
            return DelayPrediction(will_be_delayed=False, probability=0, estimated_delay_days=0)

        factors = self.collect_factors(analysis, sla, performance)
        if not factors:
            return DelayPrediction(will_be_delayed=False, probability=0, estimated_delay_days=0)

        probability = min(100.0, sum(f.impact for f in factors) / len(factors))
        will_be_delayed = probability > 50
        estimated_delay_days = math.ceil((probability - 50) / 10) if will_be_delayed else 0

        return DelayPrediction(
            will_be_delayed=will_be_delayed,
            probability=int(Decimal(str(probability)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
            estimated_delay_days=estimated_delay_days,
            factors=factors,
        )
