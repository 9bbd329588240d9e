"""
Delay Repository

Order store, tracking cache store and alert store over PostgreSQL (asyncpg).
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import asyncpg

from core.config import InfraConfig

from .models import (
    DelayAlert,
    ShipmentOrder,
    ShipmentStatus,
    TrackingCacheEntry,
    TrackingEvent,
)

logger = logging.getLogger(__name__)


def _parse_status(value: Optional[str]) -> Optional[ShipmentStatus]:
    if not value:
        return None
    try:
        return ShipmentStatus(value.strip().lower())
    except ValueError:
        logger.debug(f"Unknown shipment status {value!r}")
        return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_json(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def _row_to_event(raw: Dict[str, Any]) -> Optional[TrackingEvent]:
    # Tracking pipeline writes either "date" or "timestamp"
    timestamp = _parse_timestamp(raw.get("timestamp") or raw.get("date"))
    if timestamp is None:
        return None
    return TrackingEvent(
        timestamp=timestamp,
        location=raw.get("location"),
        description=raw.get("description"),
        status=raw.get("status"),
    )


class DelayRepository:
    """PostgreSQL adapter for orders, tracking_cache and proactive_alerts"""

    def __init__(self, config: Optional[InfraConfig] = None, pool: Optional[asyncpg.Pool] = None):
        self.config = config or InfraConfig.from_env()
        self.schema = self.config.postgres_schema
        self.orders_table = "orders"
        self.cache_table = "tracking_cache"
        self.alerts_table = "proactive_alerts"
        self._pool = pool

    async def _get_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            logger.info(
                f"Connecting to PostgreSQL at {self.config.postgres_host}:{self.config.postgres_port}"
            )
            self._pool = await asyncpg.create_pool(
                host=self.config.postgres_host,
                port=self.config.postgres_port,
                user=self.config.postgres_user,
                password=self.config.postgres_password,
                database=self.config.postgres_db,
                min_size=self.config.postgres_pool_min,
                max_size=self.config.postgres_pool_max,
            )
        return self._pool

    async def close(self):
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    def _row_to_order(self, row: asyncpg.Record) -> ShipmentOrder:
        data = dict(row)
        return ShipmentOrder(
            order_id=str(data["id"]),
            carrier=data.get("carrier") or "",
            created_at=_parse_timestamp(data["created_at"]),
            status=_parse_status(data.get("status")) or ShipmentStatus.PENDING,
            delivered_at=_parse_timestamp(data.get("delivered_at")),
            tracking_code=data.get("tracking_code"),
            service_type=data.get("service_type"),
        )

    # =========================================================================
    # Order store
    # =========================================================================

    async def get_order(self, order_id: str) -> Optional[ShipmentOrder]:
        pool = await self._get_pool()
        query = f"SELECT * FROM {self.schema}.{self.orders_table} WHERE id::text = $1"
        async with pool.acquire() as conn:
            row = await conn.fetchrow(query, order_id)
        return self._row_to_order(row) if row else None

    async def list_active_orders(self) -> List[ShipmentOrder]:
        pool = await self._get_pool()
        query = f"""
            SELECT * FROM {self.schema}.{self.orders_table}
            WHERE tracking_code IS NOT NULL
              AND status NOT IN ('delivered', 'cancelled')
            ORDER BY created_at ASC
        """
        async with pool.acquire() as conn:
            rows = await conn.fetch(query)
        return [self._row_to_order(row) for row in rows]

    async def list_delivered_since(self, carrier: str, since: datetime) -> List[ShipmentOrder]:
        pool = await self._get_pool()
        query = f"""
            SELECT * FROM {self.schema}.{self.orders_table}
            WHERE lower(carrier) = lower($1)
              AND status = 'delivered'
              AND delivered_at >= $2
        """
        async with pool.acquire() as conn:
            rows = await conn.fetch(query, carrier, since)
        return [self._row_to_order(row) for row in rows]

    # =========================================================================
    # Tracking cache store
    # =========================================================================

    async def get_cache(self, tracking_code: str) -> Optional[TrackingCacheEntry]:
        pool = await self._get_pool()
        query = f"SELECT * FROM {self.schema}.{self.cache_table} WHERE tracking_code = $1"
        async with pool.acquire() as conn:
            row = await conn.fetchrow(query, tracking_code)
        if row is None:
            return None

        data = dict(row)
        events = [
            event for event in (
                _row_to_event(raw) for raw in _parse_json(data.get("events"), [])
                if isinstance(raw, dict)
            )
            if event is not None
        ]
        return TrackingCacheEntry(
            tracking_code=data["tracking_code"],
            carrier=data.get("carrier"),
            current_status=_parse_status(data.get("status")),
            events=events,
            estimated_delivery=_parse_timestamp(data.get("estimated_delivery")),
            last_update=_parse_timestamp(data.get("last_update")),
        )

    # =========================================================================
    # Alert store
    # =========================================================================

    async def insert_alert(self, alert: DelayAlert) -> None:
        pool = await self._get_pool()
        query = f"""
            INSERT INTO {self.schema}.{self.alerts_table} (
                order_id, alert_type, priority, title, message, metadata, is_read, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7, $8)
        """
        async with pool.acquire() as conn:
            await conn.execute(
                query,
                alert.order_id,
                alert.alert_type,
                alert.priority.value,
                alert.title,
                alert.message,
                json.dumps(alert.metadata),
                alert.is_read,
                alert.created_at,
            )
