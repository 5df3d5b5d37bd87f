"""Session store: the single source of truth for "who is logged in".

Wraps any MutableMapping. In the portal that is Flask's signed-cookie ``session``
(held by the browser); tests pass a plain dict. The user record is kept as a JSON
string, the same shape the backend returns from /api/login, so corrupt or
foreign data can show up here and must read as "not logged in".
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, MutableMapping, Optional

logger = logging.getLogger(__name__)

USER_KEY = 'user'
AUTH_FLAG_KEY = 'isAuthenticated'
SESSION_ID_KEY = 'sessionId'
CREDENTIALS_KEY = 'credentials'
LAST_ACTIVITY_KEY = 'lastActivity'
LAST_CHECK_KEY = 'lastSessionCheck'

# Cleared together on logout / expiry
SESSION_KEYS = (
    USER_KEY,
    AUTH_FLAG_KEY,
    SESSION_ID_KEY,
    CREDENTIALS_KEY,
    LAST_ACTIVITY_KEY,
    LAST_CHECK_KEY,
)


def _first(payload: Dict[str, Any], *keys: str):
    for k in keys:
        value = payload.get(k)
        if value is not None and value != '':
            return value
    return None


@dataclass(frozen=True)
class SessionUser:
    id: Any
    role: Optional[str]
    first_name: str = ''
    last_name: str = ''
    email: Optional[str] = None
    employee_id: Any = None
    login_type: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'SessionUser':
        """Build from the backend user object (camelCase or snake_case keys)."""
        return cls(
            id=payload.get('id'),
            role=payload.get('role'),
            first_name=_first(payload, 'firstName', 'first_name') or '',
            last_name=_first(payload, 'lastName', 'last_name') or '',
            email=payload.get('email'),
            employee_id=_first(payload, 'employeeId', 'employee_id'),
            login_type=_first(payload, 'loginType', 'login_type'),
        )

    def to_payload(self) -> Dict[str, Any]:
        data = asdict(self)
        return {
            'id': data['id'],
            'role': data['role'],
            'firstName': data['first_name'],
            'lastName': data['last_name'],
            'email': data['email'],
            'employeeId': data['employee_id'],
            'loginType': data['login_type'],
        }

    @property
    def full_name(self) -> str:
        return ' '.join(part for part in (self.first_name, self.last_name) if part)


class SessionStore:
    def __init__(self, storage: MutableMapping[str, Any]):
        self.storage = storage

    def load_user(self) -> Optional[SessionUser]:
        raw = self.storage.get(USER_KEY)
        if not raw:
            return None
        try:
            payload = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        except ValueError:
            logger.warning('Discarding unreadable session user payload')
            return None
        if not isinstance(payload, dict):
            logger.warning('Discarding session user payload of type %s', type(payload).__name__)
            return None
        return SessionUser.from_payload(payload)

    def login(self, user_payload: Dict[str, Any], session_id: Optional[str] = None,
              credentials: Optional[Dict[str, str]] = None):
        self.storage[USER_KEY] = json.dumps(user_payload)
        self.storage[AUTH_FLAG_KEY] = 'true'
        self.storage[SESSION_ID_KEY] = session_id
        self.storage[CREDENTIALS_KEY] = dict(credentials or {})

    def is_authenticated(self) -> bool:
        return self.storage.get(AUTH_FLAG_KEY) == 'true' and self.load_user() is not None

    @property
    def session_id(self) -> Optional[str]:
        return self.storage.get(SESSION_ID_KEY)

    @property
    def credentials(self) -> Dict[str, str]:
        creds = self.storage.get(CREDENTIALS_KEY)
        return dict(creds) if isinstance(creds, dict) else {}

    def get_stamp(self, key: str) -> Optional[float]:
        value = self.storage.get(key)
        if isinstance(value, (int, float)):
            return float(value)
        return None

    def set_stamp(self, key: str, value: float):
        self.storage[key] = value

    def clear(self):
        """Remove every session key. Safe to call on an already-cleared store."""
        for key in SESSION_KEYS:
            self.storage.pop(key, None)
