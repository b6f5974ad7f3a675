"""
Waitlist Service

FIFO waitlist promotion for full class sessions with a 5 minute claim
window and a sweep that passes lapsed claims to the next user.
"""

__version__ = "1.0.0"
