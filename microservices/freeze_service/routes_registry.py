"""
Freeze Service Routes Registry
"""

SERVICE_METADATA = {
    "service_name": "freeze_service",
    "version": "1.0.0",
    "tags": ["v1", "membership", "freeze", "microservice"],
    "capabilities": [
        "freeze_eligibility",
        "freeze_requests",
        "freeze_review",
        "freeze_expiration",
    ],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/api/v1/freezes/info", "methods": ["GET"], "description": "Service information"},
    {"path": "/api/v1/freezes/eligibility/{member_id}", "methods": ["GET"], "description": "Yearly freeze allowance"},
    {"path": "/api/v1/freezes", "methods": ["GET", "POST"], "description": "List or submit freeze requests"},
    {"path": "/api/v1/freezes/{freeze_id}", "methods": ["GET"], "description": "Get freeze request"},
    {"path": "/api/v1/freezes/{freeze_id}/approve", "methods": ["POST"], "description": "Admin approval"},
    {"path": "/api/v1/freezes/{freeze_id}/reject", "methods": ["POST"], "description": "Admin rejection"},
    {"path": "/api/v1/freezes/{freeze_id}/cancel", "methods": ["POST"], "description": "Member withdrawal"},
    {"path": "/api/v1/freezes/{freeze_id}/activate", "methods": ["POST"], "description": "Activate after fee payment"},
    {"path": "/api/v1/freezes/expirations/run", "methods": ["POST"], "description": "Run the expiration sweep"},
]


def get_route_summary():
    route_paths = [r["path"] for r in ROUTES]
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join(route_paths[:10]),
        "api_version": "v1",
        "base_path": "/api/v1/freezes",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
