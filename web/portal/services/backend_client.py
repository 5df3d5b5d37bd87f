"""HTTP client for the business backend's session API.

The backend owns authentication and enforces its own authorization; the portal
only relays credentials and keeps the backend session cookie so later calls can
be made "with credentials".
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

LOGIN_TYPES = ('super_admin', 'employee')


class BackendError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


@dataclass
class LoginResult:
    user: Dict[str, Any]
    session_id: Optional[str] = None
    cookies: Dict[str, str] = field(default_factory=dict)


@dataclass
class SessionCheck:
    ok: bool
    active: bool
    status: int


class BackendClient:
    def __init__(self, base_url: str, timeout: float = 10, http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = http or requests.Session()

    def _url(self, path: str) -> str:
        return f'{self.base_url}{path}'

    def login(self, login_type: str, email: str, password: Optional[str] = None,
              employee_id: Optional[str] = None) -> LoginResult:
        if login_type not in LOGIN_TYPES:
            raise BackendError(400, 'Invalid login type')
        body: Dict[str, Any] = {'loginType': login_type, 'email': email}
        if login_type == 'super_admin':
            body['password'] = password
        else:
            body['employeeId'] = employee_id
        try:
            resp = self.http.post(self._url('/api/login'), json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning('Login request failed: %s', e)
            raise BackendError(502, 'Login service unavailable') from e
        data = _json_or_empty(resp)
        if resp.status_code != 200:
            raise BackendError(resp.status_code, data.get('message') or 'Login failed')
        user = data.get('user')
        if not isinstance(user, dict):
            raise BackendError(502, 'Malformed login response')
        return LoginResult(user=user, session_id=data.get('sessionId'), cookies=resp.cookies.get_dict())

    def check_session(self, cookies: Optional[Dict[str, str]] = None) -> SessionCheck:
        """GET /api/check-session with the stored cookies.

        Network errors, and 200 bodies that are unreadable or not a JSON object,
        propagate to the caller;
        only an explicit status or ``active`` flag is treated as an answer.
        """
        resp = self.http.get(self._url('/api/check-session'), cookies=cookies or {}, timeout=self.timeout)
        if not resp.ok:
            return SessionCheck(ok=False, active=False, status=resp.status_code)
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f'Unexpected check-session body: {type(data).__name__}')
        return SessionCheck(ok=True, active=bool(data.get('active')), status=resp.status_code)

    def list_timesheets(self, cookies: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        try:
            resp = self.http.get(self._url('/api/timesheets'), cookies=cookies or {}, timeout=self.timeout)
        except requests.RequestException as e:
            raise BackendError(502, 'Timesheet service unavailable') from e
        data = _json_or_empty(resp)
        if not resp.ok:
            raise BackendError(resp.status_code, data.get('message') or 'Failed to fetch timesheets')
        rows = data.get('data')
        return rows if isinstance(rows, list) else []

    def logout(self, cookies: Optional[Dict[str, str]] = None) -> bool:
        try:
            resp = self.http.post(self._url('/api/logout'), cookies=cookies or {}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning('Backend logout failed: %s', e)
            return False
        return resp.ok


def _json_or_empty(resp) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
