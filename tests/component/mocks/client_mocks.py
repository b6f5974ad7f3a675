"""
HTTP collaborator mocks for component testing
"""
from typing import Any, Dict, List, Optional


class MockAccountClient:
    """In-memory AccountClient"""

    def __init__(self, emails: Optional[Dict[str, str]] = None):
        self.emails: Dict[str, str] = dict(emails or {})
        self.lookups: List[str] = []
        self._should_raise: Optional[Exception] = None

    async def get_user_email(self, user_id: str) -> Optional[str]:
        self.lookups.append(user_id)
        if self._should_raise:
            raise self._should_raise
        return self.emails.get(user_id)

    def set_error(self, error: Exception):
        self._should_raise = error


class MockNotificationClient:
    """Records sends; fail() makes send return False"""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self._result = True
        self._should_raise: Optional[Exception] = None

    async def send(self, notification_type: str, to: str, data: Dict[str, Any]) -> bool:
        if self._should_raise:
            raise self._should_raise
        self.sent.append({"type": notification_type, "to": to, "data": data})
        return self._result

    def fail(self):
        self._result = False

    def set_error(self, error: Exception):
        self._should_raise = error
