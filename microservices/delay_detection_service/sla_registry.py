"""
SLA Registry

Lookup table of carrier transit windows. The table is injected at
construction time; the bundled defaults are only a starting point that
deployments extend or replace through a JSON file or Consul KV.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .models import CarrierSLA

logger = logging.getLogger(__name__)


DEFAULT_CARRIER_SLAS: Tuple[CarrierSLA, ...] = (
    CarrierSLA(carrier="correios", service_type="PAC", min_days=7, max_days=15),
    CarrierSLA(carrier="correios", service_type="SEDEX", min_days=1, max_days=3),
    CarrierSLA(carrier="jadlog", service_type="Package", min_days=2, max_days=7),
    CarrierSLA(carrier="jadlog", service_type="Express", min_days=1, max_days=2),
    CarrierSLA(carrier="melhorenvio", service_type="Standard", min_days=3, max_days=10),
)


def _norm(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


class SLARegistry:
    """Resolves the SLA window for a carrier and optional service type"""

    def __init__(self, table: Iterable[CarrierSLA] = DEFAULT_CARRIER_SLAS):
        self._table: List[CarrierSLA] = list(table)

    @property
    def entries(self) -> List[CarrierSLA]:
        return list(self._table)

    def lookup(
        self, carrier: str, service_type: Optional[str] = None
    ) -> Optional[CarrierSLA]:
        """
        Find the SLA for a carrier.

        Exact carrier + service type match first, then the first entry for
        the carrier. Returns None when the carrier is not configured.
        """
        carrier_key = _norm(carrier)
        if carrier_key is None:
            return None

        candidates = [sla for sla in self._table if _norm(sla.carrier) == carrier_key]
        if not candidates:
            return None

        service_key = _norm(service_type)
        if service_key is not None:
            for sla in candidates:
                if _norm(sla.service_type) == service_key:
                    return sla
        return candidates[0]

    def with_overrides(self, overrides: Iterable[CarrierSLA]) -> "SLARegistry":
        """
        Return a new registry with overrides applied.

        An override replaces the entry with the same carrier and service type
        in place; unknown pairs are appended.
        """
        table = list(self._table)
        for override in overrides:
            key = (_norm(override.carrier), _norm(override.service_type))
            for index, existing in enumerate(table):
                if (_norm(existing.carrier), _norm(existing.service_type)) == key:
                    table[index] = override
                    break
            else:
                table.append(override)
        return SLARegistry(table)


def load_sla_table(records: Iterable[Dict[str, Any]]) -> List[CarrierSLA]:
    """Parse SLA records (dicts shaped like CarrierSLA)"""
    return [CarrierSLA.model_validate(record) for record in records]


def load_sla_file(path: Union[str, Path]) -> List[CarrierSLA]:
    """Read a JSON list of SLA records from disk"""
    with open(path, "r", encoding="utf-8") as fh:
        records = json.load(fh)
    if not isinstance(records, list):
        raise ValueError(f"SLA table in {path} must be a JSON list")
    table = load_sla_table(records)
    logger.info(f"Loaded {len(table)} SLA entries from {path}")
    return table


__all__ = [
    "DEFAULT_CARRIER_SLAS",
    "SLARegistry",
    "load_sla_table",
    "load_sla_file",
]
