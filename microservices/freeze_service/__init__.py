"""
Freeze Service

Membership freeze (hold) requests.

Features:
- Yearly allowance: two freeze months, two freezes, one outstanding request
- Admin approval and rejection
- Activation when the freeze fee is paid
- Daily expiration sweep that returns members to active
"""

__version__ = "1.0.0"
