"""
Credit Service Event Package

Event-driven architecture for credit service:
- Publishing: Credit issuance events (cycle issued, run completed)
- Subscription: Membership activation for first-cycle credits
"""

from .models import (
    CreditEventType,
    CreditCycleIssuedEventData,
    CreditIssuanceCompletedEventData,
    create_credit_cycle_issued_event_data,
    create_credit_issuance_completed_event_data,
)

from .publishers import (
    publish_credit_cycle_issued,
    publish_credit_issuance_completed,
)

from .handlers import get_event_handlers

__all__ = [
    # Event models
    "CreditEventType",
    "CreditCycleIssuedEventData",
    "CreditIssuanceCompletedEventData",
    # Helper functions
    "create_credit_cycle_issued_event_data",
    "create_credit_issuance_completed_event_data",
    # Publishers
    "publish_credit_cycle_issued",
    "publish_credit_issuance_completed",
    # Handlers
    "get_event_handlers",
]
