"""
Delay Detection Service Routes Registry
Defines all API routes for Consul service registration
"""

from typing import Any, Dict

SERVICE_ROUTES = [
    {
        "path": "/health",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service health check"
    },
    {
        "path": "/api/v1/delay/health",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service health check (API prefix)"
    },
    # Per-order analysis
    {
        "path": "/api/v1/delay/analyze",
        "methods": ["POST"],
        "auth_required": True,
        "description": "Analyze an order against its carrier SLA"
    },
    {
        "path": "/api/v1/delay/predict",
        "methods": ["POST"],
        "auth_required": True,
        "description": "Delay probability for an order"
    },
    {
        "path": "/api/v1/delay/predict-delivery",
        "methods": ["POST"],
        "auth_required": True,
        "description": "Predicted delivery date for an order"
    },
    # Batch
    {
        "path": "/api/v1/delay/scan",
        "methods": ["POST"],
        "auth_required": True,
        "description": "Scan all active orders"
    },
    # Carriers
    {
        "path": "/api/v1/delay/carriers/{carrier}/performance",
        "methods": ["GET"],
        "auth_required": True,
        "description": "Carrier historical performance"
    },
    {
        "path": "/api/v1/delay/carriers/{carrier}/sla",
        "methods": ["GET"],
        "auth_required": True,
        "description": "Carrier SLA window"
    },
]


def get_routes_for_consul() -> Dict[str, Any]:
    """
    Compact route metadata for Consul
    Consul meta values are limited to 512 characters
    """
    health_routes = []
    order_routes = []
    scan_routes = []
    carrier_routes = []

    for route in SERVICE_ROUTES:
        path = route["path"]
        if "health" in path:
            health_routes.append("h")
        elif "/carriers" in path:
            carrier_routes.append("c")
        elif "/scan" in path:
            scan_routes.append("s")
        else:
            order_routes.append("o")

    return {
        "route_count": str(len(SERVICE_ROUTES)),
        "base_path": "/api/v1/delay",
        "health": str(len(health_routes)),
        "orders": str(len(order_routes)),
        "scan": str(len(scan_routes)),
        "carriers": str(len(carrier_routes)),
        "methods": "GET,POST",
        "public_count": str(sum(1 for r in SERVICE_ROUTES if not r["auth_required"])),
        "protected_count": str(sum(1 for r in SERVICE_ROUTES if r["auth_required"])),
    }


SERVICE_METADATA = {
    "service_name": "delay_detection_service",
    "version": "1.0.0",
    "tags": ["v1", "shipment-tracking", "delay-detection"],
    "capabilities": [
        "delay_analysis",
        "delivery_prediction",
        "delay_probability",
        "batch_scan",
        "delay_alerts",
        "carrier_performance",
    ]
}
