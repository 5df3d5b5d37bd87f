"""Session liveness: idle timeout plus periodic re-validation against the backend.

Both timers are deadlines kept in the session (``lastActivity`` and
``lastSessionCheck``) and evaluated on every watched request, so nothing keeps
running once the user is gone and there is nothing to release on shutdown.

Policy:
  * idle for ``SESSION_INACTIVITY_LIMIT`` seconds -> forced logout
  * backend answers non-2xx or ``active: false`` -> forced logout
  * backend unreachable / unreadable -> logged, session kept
Both logout paths run the same idempotent sequence (clear every session key,
flash the reason, redirect to login).
"""
from __future__ import annotations
import logging
import time
from typing import Callable, Optional

import requests
from flask import current_app, flash, jsonify, redirect, request, session

from portal.config.session import (
    ACTIVITY_THROTTLE,
    BACKEND_EXPIRED_MESSAGE,
    CHECK_INTERVAL,
    IDLE_EXPIRED_MESSAGE,
    INACTIVITY_LIMIT,
)
from portal.services.navigation import LOGIN_ROUTE
from portal.services.session_store import LAST_ACTIVITY_KEY, LAST_CHECK_KEY, SessionStore

logger = logging.getLogger(__name__)

# Requests that never count as activity nor trigger checks
UNWATCHED_ENDPOINTS = frozenset({'static', 'health', 'auth.login', 'auth.login_submit', 'auth.logout'})

# Timer-driven status polls from the page: checked, but not user activity
PASSIVE_ENDPOINTS = frozenset({'auth.session_status'})

# Answered with a JSON 401 instead of a redirect when the session ends
JSON_ENDPOINTS = frozenset({'auth.heartbeat', 'auth.session_status'})


def get_backend_client():
    return current_app.extensions['backend_client']


class SessionWatcher:
    def __init__(self, app=None, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.inactivity_limit = INACTIVITY_LIMIT
        self.check_interval = CHECK_INTERVAL
        self.activity_throttle = ACTIVITY_THROTTLE
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.inactivity_limit = app.config.get('SESSION_INACTIVITY_LIMIT', INACTIVITY_LIMIT)
        self.check_interval = app.config.get('SESSION_CHECK_INTERVAL', CHECK_INTERVAL)
        self.activity_throttle = app.config.get('SESSION_ACTIVITY_THROTTLE', ACTIVITY_THROTTLE)
        app.extensions['session_watcher'] = self
        app.before_request(self._before_request)

    @property
    def idle_message(self) -> str:
        return IDLE_EXPIRED_MESSAGE.format(minutes=max(1, self.inactivity_limit // 60))

    def page_timers(self) -> dict:
        """Millisecond timers the page arms so expiry happens without user input."""
        return {
            'idle_ms': self.inactivity_limit * 1000,
            'check_ms': self.check_interval * 1000,
        }

    # --- timers ---

    def start(self, store: SessionStore, now: Optional[float] = None):
        """Arm both timers for a freshly created session."""
        now = self.clock() if now is None else now
        store.set_stamp(LAST_ACTIVITY_KEY, now)
        store.set_stamp(LAST_CHECK_KEY, now)

    def idle_expired(self, store: SessionStore, now: float) -> bool:
        last = store.get_stamp(LAST_ACTIVITY_KEY)
        if last is None:
            return False
        return now - last >= self.inactivity_limit

    def record_activity(self, store: SessionStore, now: float) -> bool:
        """Reset the idle countdown; coalesced to one write per throttle window."""
        last = store.get_stamp(LAST_ACTIVITY_KEY)
        if last is not None and now - last < self.activity_throttle:
            return False
        store.set_stamp(LAST_ACTIVITY_KEY, now)
        return True

    def poll_due(self, store: SessionStore, now: float) -> bool:
        last = store.get_stamp(LAST_CHECK_KEY)
        if last is None:
            return True
        return now - last >= self.check_interval

    def check_backend_session(self, store: SessionStore, now: Optional[float] = None) -> bool:
        """Return False only when the backend says the session is over."""
        now = self.clock() if now is None else now
        store.set_stamp(LAST_CHECK_KEY, now)
        try:
            result = get_backend_client().check_session(store.credentials)
        except (requests.RequestException, ValueError) as e:
            logger.warning('Session check failed, keeping session: %s', e)
            return True
        if not result.ok:
            logger.info('Backend session check failed with status %s', result.status)
            return False
        if not result.active:
            logger.info('Backend reports session inactive')
            return False
        return True

    # --- logout ---

    def force_logout(self, store: SessionStore, message: str, reason: str = 'logout'):
        user = store.load_user()
        if user is not None:
            logger.info('Ending session for user %s (%s)', user.id, reason)
        store.clear()
        flash(message, 'warning')
        if _wants_json():
            return jsonify({'active': False, 'message': message}), 401
        return redirect(LOGIN_ROUTE)

    def _before_request(self):
        if request.endpoint in UNWATCHED_ENDPOINTS or request.endpoint is None:
            return None
        store = SessionStore(session)
        if store.load_user() is None:
            return None
        now = self.clock()
        if self.idle_expired(store, now):
            return self.force_logout(store, self.idle_message, reason='idle')
        if request.endpoint not in PASSIVE_ENDPOINTS:
            self.record_activity(store, now)
        if self.poll_due(store, now) and not self.check_backend_session(store, now):
            return self.force_logout(store, BACKEND_EXPIRED_MESSAGE, reason='backend')
        return None


def _wants_json() -> bool:
    if request.is_json or request.endpoint in JSON_ENDPOINTS:
        return True
    best = request.accept_mimetypes.best_match(['application/json', 'text/html'])
    return best == 'application/json'
