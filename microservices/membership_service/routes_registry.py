"""
Membership Service Routes Registry

Defines service metadata and routes exposed by the service.
"""

SERVICE_METADATA = {
    "service_name": "membership_service",
    "version": "1.0.0",
    "tags": ["v1", "membership", "billing", "microservice"],
    "capabilities": [
        "member_status_lifecycle",
        "payment_status",
        "billing_webhook_events",
        "annual_fee_tracking",
        "status_history",
    ],
}

# Route definitions for API documentation
ROUTES = [
    # Health endpoints
    {"path": "/health", "methods": ["GET"], "description": "Health check"},

    # Service info
    {"path": "/api/v1/members/info", "methods": ["GET"], "description": "Service information"},

    # Members
    {"path": "/api/v1/members/{member_id}", "methods": ["GET"], "description": "Get member"},
    {"path": "/api/v1/members/{member_id}/payment-status", "methods": ["GET"], "description": "Payment status and benefit access"},
    {"path": "/api/v1/members/{member_id}/activate", "methods": ["POST"], "description": "Admin activation"},
    {"path": "/api/v1/members/{member_id}/status", "methods": ["PUT"], "description": "Admin status change"},
    {"path": "/api/v1/members/{member_id}/annual-fee", "methods": ["POST"], "description": "Record annual fee payment"},
    {"path": "/api/v1/members/{member_id}/history", "methods": ["GET"], "description": "Status history"},
]


def get_route_summary():
    """Compact route metadata"""
    route_paths = [r["path"] for r in ROUTES]
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join(route_paths[:10]),
        "api_version": "v1",
        "base_path": "/api/v1/members",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
