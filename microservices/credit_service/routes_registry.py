"""
Credit Service Routes Registry
Defines all API routes exposed by the service.
"""
from typing import List, Dict, Any

SERVICE_ROUTES = [
    # Health and Service Info
    {
        "path": "/health",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Basic health check endpoint"
    },
    {
        "path": "/api/v1/credits/info",
        "methods": ["GET"],
        "auth_required": False,
        "description": "Service metadata and route summary"
    },
    # Issuance
    {
        "path": "/api/v1/credits/issuance/run",
        "methods": ["POST"],
        "auth_required": True,
        "description": "Run monthly credit issuance for a date"
    },
    # Balances
    {
        "path": "/api/v1/credits/members/{member_id}",
        "methods": ["GET"],
        "auth_required": True,
        "description": "Unexpired grants and balances for a member"
    },
]


def get_route_summary() -> Dict[str, Any]:
    """
    Compact route metadata for service discovery and the info endpoint.
    """
    health_routes: List[str] = []
    issuance_routes: List[str] = []
    member_routes: List[str] = []
    for route in SERVICE_ROUTES:
        path = route["path"]
        compact_path = path.replace("/api/v1/credits/", "")
        if path.startswith("/health") or path.endswith("/info"):
            health_routes.append(compact_path)
        elif "issuance" in path:
            issuance_routes.append(compact_path)
        else:
            member_routes.append(compact_path)
    return {
        "route_count": str(len(SERVICE_ROUTES)),
        "base_path": "/api/v1/credits",
        "health": ",".join(health_routes),
        "issuance": ",".join(issuance_routes),
        "members": ",".join(member_routes),
        "methods": "GET,POST",
        "public_count": str(sum(1 for r in SERVICE_ROUTES if not r["auth_required"])),
        "protected_count": str(sum(1 for r in SERVICE_ROUTES if r["auth_required"])),
    }


# Service metadata
SERVICE_METADATA = {
    "service_name": "credit_service",
    "version": "1.0.0",
    "tags": ["v1", "credit", "membership", "billing"],
    "capabilities": [
        "monthly_issuance",
        "billing_anniversary",
        "tier_allocation",
        "activation_credits",
        "event_driven"
    ]
}
