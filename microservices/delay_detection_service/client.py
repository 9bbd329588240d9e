"""
Delay Detection Service Client

Client library for other microservices to call the delay detection service
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.config import get_settings
from core.consul_registry import ConsulRegistry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8262"


def _discover_base_url() -> str:
    settings = get_settings()
    if not settings.service.consul_enabled:
        return DEFAULT_BASE_URL
    registry = ConsulRegistry(
        service_name="delay_detection_client",
        consul_host=settings.infrastructure.consul_host,
        consul_port=settings.infrastructure.consul_port,
    )
    return registry.get_service_endpoint("delay_detection_service") or DEFAULT_BASE_URL


class DelayDetectionServiceClient:
    """Delay Detection Service HTTP client"""

    def __init__(self, base_url: str = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client

        Args:
            base_url: Base URL of the service, Consul discovery when omitted
            transport: Optional httpx transport (ASGI transport in tests)
        """
        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            try:
                self.base_url = _discover_base_url()
            except Exception as e:
                logger.warning(f"Service discovery failed, using default: {e}")
                self.base_url = DEFAULT_BASE_URL

        self.client = httpx.AsyncClient(timeout=30.0, transport=transport)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            response = await self.client.post(f"{self.base_url}{path}", json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"POST {path} failed: {e.response.status_code} - {e.response.text}")
            return None
        except Exception as e:
            logger.error(f"Error calling POST {path}: {e}")
            return None

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        try:
            response = await self.client.get(f"{self.base_url}{path}", params=params or {})
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"GET {path} failed: {e.response.status_code}")
            return None
        except Exception as e:
            logger.error(f"Error calling GET {path}: {e}")
            return None

    # =============================================================================
    # Per-order
    # =============================================================================

    async def analyze_delay(
        self, order_id: str, tracking_code: str, carrier: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Analyze an order against its carrier SLA

        Returns:
            DelayAnalysis as a dict, None when not found or on error

        Example:
            >>> async with DelayDetectionServiceClient() as client:
            ...     analysis = await client.analyze_delay("ord_1", "BR123456789")
        """
        payload = {"order_id": order_id, "tracking_code": tracking_code}
        if carrier:
            payload["carrier"] = carrier
        return await self._post("/api/v1/delay/analyze", payload)

    async def predict_delay(self, order_id: str, tracking_code: str) -> Optional[Dict[str, Any]]:
        return await self._post(
            "/api/v1/delay/predict",
            {"order_id": order_id, "tracking_code": tracking_code},
        )

    async def predict_delivery(self, order_id: str, tracking_code: str) -> Optional[Dict[str, Any]]:
        return await self._post(
            "/api/v1/delay/predict-delivery",
            {"order_id": order_id, "tracking_code": tracking_code},
        )

    # =============================================================================
    # Batch
    # =============================================================================

    async def scan(
        self, emit_alerts: bool = False, max_concurrency: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """Run a batch scan and return the scan report"""
        payload: Dict[str, Any] = {"emit_alerts": emit_alerts}
        if max_concurrency:
            payload["max_concurrency"] = max_concurrency
        return await self._post("/api/v1/delay/scan", payload)

    # =============================================================================
    # Carriers
    # =============================================================================

    async def get_carrier_performance(
        self,
        carrier: str,
        window_days: Optional[int] = None,
        service_type: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if window_days:
            params["window_days"] = window_days
        if service_type:
            params["service_type"] = service_type
        return await self._get(f"/api/v1/delay/carriers/{carrier}/performance", params)

    async def get_carrier_sla(
        self, carrier: str, service_type: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        params = {"service_type": service_type} if service_type else None
        return await self._get(f"/api/v1/delay/carriers/{carrier}/sla", params)

    async def health_check(self) -> bool:
        result = await self._get("/health")
        return bool(result and result.get("status") == "healthy")
