from flask import Blueprint, abort, current_app, redirect, render_template, request, session
from portal.services.backend_client import LOGIN_TYPES, BackendError
from portal.services.policy import current_resolver
from portal.services.navigation import LOGIN_ROUTE
from portal.services.session_store import SessionStore
from portal.services.session_watcher import get_backend_client

auth_bp = Blueprint('auth', __name__)


@auth_bp.get('/login')
def login():
    resolver = current_resolver()
    if resolver.get_current_user() is not None:
        return redirect(resolver.get_default_route())
    return render_template('login.html', login_types=LOGIN_TYPES)


@auth_bp.post('/login')
def login_submit():
    form = request.form
    login_type = form.get('loginType', 'employee')
    email = (form.get('email') or '').strip()
    if login_type not in LOGIN_TYPES:
        abort(400, description='Invalid login type')
    if not email:
        abort(400, description='email required')
    if login_type == 'super_admin' and not form.get('password'):
        abort(400, description='email & password required')
    if login_type == 'employee' and not (form.get('employeeId') or '').strip():
        abort(400, description='email & employee id required')
    try:
        result = get_backend_client().login(
            login_type,
            email,
            password=form.get('password'),
            employee_id=(form.get('employeeId') or '').strip() or None,
        )
    except BackendError as e:
        current_app.logger.info('Login failed for %s: %s', email, e.message)
        body = render_template('login.html', login_types=LOGIN_TYPES, error=e.message, email=email)
        return body, e.status
    store = SessionStore(session)
    store.clear()
    store.login(result.user, session_id=result.session_id, credentials=result.cookies)
    current_app.extensions['session_watcher'].start(store)
    return redirect(current_resolver().get_default_route())


@auth_bp.post('/logout')
def logout():
    store = SessionStore(session)
    if store.load_user() is not None:
        get_backend_client().logout(store.credentials)
    return current_app.extensions['session_watcher'].force_logout(
        store, 'You have been signed out.', reason='logout'
    )


def _session_state():
    store = SessionStore(session)
    if not store.is_authenticated():
        return {'active': False}, 401
    return {'active': True}


@auth_bp.post('/heartbeat')
def heartbeat():
    # Activity itself is recorded by the session watcher before this runs
    return _session_state()


@auth_bp.get('/session')
def session_status():
    # Idle and backend checks run in the watcher; this does not count as activity
    return _session_state()


def root_redirect():
    resolver = current_resolver()
    if resolver.get_current_user() is None:
        return redirect(LOGIN_ROUTE)
    return redirect(resolver.get_default_route())
