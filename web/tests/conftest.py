import os, sys, pytest
# Ensure web/ is on path so 'portal' can be imported without installing
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from unittest.mock import Mock
from portal import create_app
from portal.services.backend_client import BackendClient, SessionCheck
from portal.services.session_store import SessionStore


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


USERS = {
    'super_admin': {'id': 1, 'role': 'Super Admin', 'firstName': 'Sam', 'lastName': 'Root',
                    'email': 'root@basadi.test', 'loginType': 'super_admin'},
    'administrator': {'id': 2, 'employeeId': 2, 'role': 'Administrator', 'firstName': 'Ada', 'lastName': 'Min',
                      'email': 'ada@basadi.test', 'loginType': 'employee'},
    'admin': {'id': 3, 'employeeId': 3, 'role': 'admin', 'firstName': 'Al', 'lastName': 'Dee',
              'email': 'al@basadi.test', 'loginType': 'employee'},
    'accountant': {'id': 4, 'employeeId': 4, 'role': 'Accountant', 'firstName': 'Acc', 'lastName': 'Ount',
                   'email': 'acc@basadi.test', 'loginType': 'employee'},
    'trainer': {'id': 7, 'employeeId': 7, 'role': 'trainer', 'firstName': 'Tia', 'lastName': 'Rainer',
                'email': 'tia@basadi.test', 'loginType': 'employee'},
    'support': {'id': 8, 'employeeId': 8, 'role': 'SUPPORT', 'firstName': 'Sue', 'lastName': 'Port',
                'email': 'sue@basadi.test', 'loginType': 'employee'},
}


def make_store(role=None, **overrides):
    """SessionStore over a plain dict, logged in as ``role`` (or empty)."""
    store = SessionStore({})
    if role is not None:
        payload = dict(USERS.get(role, {'id': 99, 'role': role}))
        payload.update(overrides)
        store.login(payload, session_id='sid-test', credentials={'basadi.session': 'cookie'})
    return store


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def backend():
    b = Mock(spec=BackendClient)
    b.check_session.return_value = SessionCheck(ok=True, active=True, status=200)
    b.list_timesheets.return_value = []
    b.logout.return_value = True
    return b


@pytest.fixture()
def app_instance(backend, clock):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'BACKEND_BASE_URL': 'http://backend.test',
        'SESSION_INACTIVITY_LIMIT': 1200,
        'SESSION_CHECK_INTERVAL': 120,
        'SESSION_ACTIVITY_THROTTLE': 1,
    })
    app.extensions['backend_client'] = backend
    app.extensions['session_watcher'].clock = clock
    yield app


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def login_as(client, app_instance, clock):
    """Seed the client's session as if /auth/login had succeeded."""
    def _login(role, **overrides):
        payload = dict(USERS.get(role, {'id': 99, 'role': role}))
        payload.update(overrides)
        with client.session_transaction() as sess:
            store = SessionStore(sess)
            store.login(payload, session_id='sid-test', credentials={'basadi.session': 'cookie'})
            app_instance.extensions['session_watcher'].start(store, clock())
        return payload
    return _login


@pytest.fixture()
def store_for():
    return make_store
