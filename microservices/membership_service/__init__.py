"""
Membership Service

Member status lifecycle driven by billing webhooks, freeze events and
admin actions, and the payment status used to gate benefits.
"""

__version__ = "1.0.0"
