"""
Credit Service

Monthly benefit credits for club members.

Features:
- Per-member billing anniversary with short-month folding
- Tier credit bundles (class, red light, dry cryo)
- Idempotent daily issuance run
- First-cycle credits on membership activation
"""

__version__ = "1.0.0"
