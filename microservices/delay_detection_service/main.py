"""
Delay Detection Service - Main Application

Delay detection and predictive delivery microservice
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Body, FastAPI, Path, Query, status
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.consul_registry import ConsulRegistry
from core.logger import setup_service_logger
from core.nats_client import get_event_bus

from .delay_detection_service import DelayDetectionService
from .factory import create_delay_detection_service
from .models import (
    AnalyzeDelayRequest,
    CarrierSLA,
    DelayAnalysis,
    DelayPrediction,
    DelayScanReport,
    DeliveryPrediction,
    HistoricalPerformanceSnapshot,
    PredictDelayRequest,
    ScanRequest,
)
from .protocols import UpstreamStoreError
from .routes_registry import SERVICE_METADATA, get_routes_for_consul

# Initialize config
settings = get_settings()
config = settings.service

# Setup logger
app_logger = setup_service_logger("delay_detection_service", settings.logging)
logger = app_logger


# Service instance
class DelayDetectionMicroservice:
    def __init__(self):
        self.service: Optional[DelayDetectionService] = None
        self.event_bus = None
        self.scan_lock: Optional[asyncio.Lock] = None

    def get_scan_lock(self) -> asyncio.Lock:
        """Scan lock, created inside the running event loop"""
        if self.scan_lock is None:
            self.scan_lock = asyncio.Lock()
        return self.scan_lock

    async def initialize(self):
        self.get_scan_lock()

        # Initialize event bus
        if config.nats_enabled:
            try:
                self.event_bus = await get_event_bus(
                    "delay_detection_service", settings.infrastructure
                )
                logger.info("Event bus initialized successfully")
            except Exception as e:
                logger.warning(
                    f"Failed to initialize event bus: {e}. Continuing without event publishing."
                )
                self.event_bus = None

        # Create service with real dependencies using factory
        self.service = create_delay_detection_service(settings, event_bus=self.event_bus)
        logger.info("Delay detection service initialized")

    async def shutdown(self):
        if self.event_bus:
            try:
                await self.event_bus.close()
                logger.info("Delay detection event bus closed")
            except Exception as e:
                logger.error(f"Error closing event bus: {e}")

        close = getattr(self.service.order_store, "close", None) if self.service else None
        if close is not None:
            try:
                await close()
            except Exception as e:
                logger.error(f"Error closing database pool: {e}")
        logger.info("Delay detection service shutting down")


# Global instance
microservice = DelayDetectionMicroservice()
consul_registry: Optional[ConsulRegistry] = None


# Lifespan management
@asynccontextmanager
async def lifespan(app: FastAPI):
    global consul_registry

    # Startup
    await microservice.initialize()

    if config.consul_enabled:
        route_meta = get_routes_for_consul()
        consul_meta = {
            "version": SERVICE_METADATA["version"],
            "capabilities": ",".join(SERVICE_METADATA["capabilities"]),
            **route_meta,
        }
        consul_registry = ConsulRegistry(
            service_name=SERVICE_METADATA["service_name"],
            consul_host=settings.infrastructure.consul_host,
            consul_port=settings.infrastructure.consul_port,
            service_port=config.service_port,
            service_host=config.service_host,
            tags=SERVICE_METADATA["tags"],
            meta=consul_meta,
        )
        if consul_registry.register():
            logger.info(f"Service registered with Consul: {route_meta.get('route_count')} routes")
        else:
            consul_registry = None

    yield

    # Shutdown
    if consul_registry:
        consul_registry.deregister()

    await microservice.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Delay Detection Service",
    description="Delay detection and predictive delivery for shipment tracking",
    version="1.0.0",
    lifespan=lifespan,
)


def _not_found(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "detail": detail},
    )


# Error handlers
@app.exception_handler(UpstreamStoreError)
async def upstream_error_handler(request, exc: UpstreamStoreError):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "upstream_unavailable",
            "detail": str(exc),
            "operation": exc.operation,
        },
    )


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/v1/delay/health")
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "delay_detection_service",
        "version": "1.0.0",
        "event_bus": microservice.event_bus is not None,
    }


# =============================================================================
# Per-order Endpoints
# =============================================================================


@app.post("/api/v1/delay/analyze", response_model=DelayAnalysis)
async def analyze_delay(request: AnalyzeDelayRequest = Body(...)):
    """
    Analyze an order against its carrier SLA

    404 when the order does not exist or the carrier has no SLA.
    """
    analysis = await microservice.service.analyze_delay(
        request.order_id, request.tracking_code, request.carrier
    )
    if analysis is None:
        return _not_found(f"No delay analysis available for order {request.order_id}")
    return analysis


@app.post("/api/v1/delay/predict", response_model=DelayPrediction)
async def predict_delay(request: PredictDelayRequest = Body(...)):
    """Delay probability with contributing factors"""
    prediction = await microservice.service.predict_delay(request.order_id, request.tracking_code)
    if prediction is None:
        return _not_found(f"No delay prediction available for order {request.order_id}")
    return prediction


@app.post("/api/v1/delay/predict-delivery", response_model=DeliveryPrediction)
async def predict_delivery(request: PredictDelayRequest = Body(...)):
    """Predicted delivery date and confidence"""
    prediction = await microservice.service.predict_delivery(
        request.order_id, request.tracking_code
    )
    if prediction is None:
        return _not_found(f"No delivery prediction available for order {request.order_id}")
    return prediction


# =============================================================================
# Batch Scan
# =============================================================================


@app.post("/api/v1/delay/scan", response_model=DelayScanReport)
async def scan_orders(request: Optional[ScanRequest] = Body(None)):
    """
    Scan all active orders

    Only one scan runs at a time; a second request waits for the first.
    """
    request = request or ScanRequest()
    async with microservice.get_scan_lock():
        report = await microservice.service.run_delay_scan(
            emit_alerts=request.emit_alerts,
            max_concurrency=request.max_concurrency,
        )
    if report.source_unavailable:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "upstream_unavailable",
                "detail": "Active orders could not be listed",
                "report": report.model_dump(mode="json"),
            },
        )
    return report


# =============================================================================
# Carrier Endpoints
# =============================================================================


@app.get(
    "/api/v1/delay/carriers/{carrier}/performance",
    response_model=HistoricalPerformanceSnapshot,
)
async def get_carrier_performance(
    carrier: str = Path(..., description="Carrier name"),
    window_days: Optional[int] = Query(None, ge=1, le=365, description="Trailing window in days"),
    service_type: Optional[str] = Query(None, description="Carrier service level"),
):
    snapshot = await microservice.service.get_carrier_performance(
        carrier, window_days, service_type
    )
    if snapshot is None:
        return _not_found(f"No delivery history for carrier {carrier}")
    return snapshot


@app.get("/api/v1/delay/carriers/{carrier}/sla", response_model=CarrierSLA)
async def get_carrier_sla(
    carrier: str = Path(..., description="Carrier name"),
    service_type: Optional[str] = Query(None, description="Carrier service level"),
):
    sla = microservice.service.get_carrier_sla(carrier, service_type)
    if sla is None:
        return _not_found(f"No SLA configured for carrier {carrier}")
    return sla


if __name__ == "__main__":
    uvicorn.run(
        "microservices.delay_detection_service.main:app",
        host=config.service_host,
        port=config.service_port,
        reload=settings.debug,
        log_level=settings.logging.log_level.lower(),
    )
