"""
Waitlist Service Routes Registry
"""

SERVICE_METADATA = {
    "service_name": "waitlist_service",
    "version": "1.0.0",
    "tags": ["v1", "classes", "waitlist", "microservice"],
    "capabilities": [
        "waitlist_promotion",
        "claim_window",
        "claim_expiry_sweep",
        "waitlist_notification",
    ],
}

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": "/api/v1/waitlist/info", "methods": ["GET"], "description": "Service information"},
    {"path": "/api/v1/waitlist/promote", "methods": ["POST"], "description": "Promote the next waiting user"},
    {"path": "/api/v1/waitlist/expired-claims/run", "methods": ["POST"], "description": "Run the claim-expiry sweep"},
    {"path": "/api/v1/waitlist/sessions/{session_id}", "methods": ["GET"], "description": "Waitlist for a session"},
]


def get_route_summary():
    route_paths = [r["path"] for r in ROUTES]
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join(route_paths),
        "api_version": "v1",
        "base_path": "/api/v1/waitlist",
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "get_route_summary"]
