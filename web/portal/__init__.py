from flask import Flask
from werkzeug.exceptions import HTTPException
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

from portal.config.session import (
    ACTIVITY_THROTTLE,
    BACKEND_TIMEOUT,
    CHECK_INTERVAL,
    INACTIVITY_LIMIT,
    bool_from_env,
    int_from_env,
)

load_dotenv()


def create_app(config: Optional[Dict[str, Any]] = None):
    app = Flask(__name__)

    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret')
    app.config['BACKEND_BASE_URL'] = os.getenv('BACKEND_BASE_URL', 'http://localhost:5000')
    app.config['BACKEND_TIMEOUT'] = int_from_env('BACKEND_TIMEOUT', BACKEND_TIMEOUT)
    app.config['SESSION_INACTIVITY_LIMIT'] = int_from_env('SESSION_INACTIVITY_LIMIT', INACTIVITY_LIMIT)
    app.config['SESSION_CHECK_INTERVAL'] = int_from_env('SESSION_CHECK_INTERVAL', CHECK_INTERVAL)
    app.config['SESSION_ACTIVITY_THROTTLE'] = int_from_env('SESSION_ACTIVITY_THROTTLE', ACTIVITY_THROTTLE)
    app.config['RBAC_EVERYTHING_IMPLIES_ALL'] = bool_from_env('RBAC_EVERYTHING_IMPLIES_ALL', False)
    app.config['SESSION_COOKIE_NAME'] = os.getenv('SESSION_COOKIE_NAME', 'basadi.portal')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    from .services.backend_client import BackendClient
    from .services.session_watcher import SessionWatcher
    app.extensions['backend_client'] = BackendClient(
        app.config['BACKEND_BASE_URL'], timeout=app.config['BACKEND_TIMEOUT']
    )
    SessionWatcher(app)

    # None renders as empty output (gates return None when denied without fallback)
    app.jinja_env.finalize = lambda value: '' if value is None else value

    from .services.gates import permission_gate, timesheet_permission_gate
    from .services.policy import current_resolver

    @app.context_processor
    def inject_rbac():
        resolver = current_resolver()
        return {
            'permission_gate': permission_gate,
            'timesheet_gate': timesheet_permission_gate,
            'has_permission': resolver.has_permission,
            'nav_items': resolver.get_navigation_items(),
            'display_info': resolver.get_user_display_info(),
            'session_timers': app.extensions['session_watcher'].page_timers(),
        }

    from .routes.auth import auth_bp, root_redirect
    from .routes.pages import pages_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(pages_bp)
    app.add_url_rule('/', endpoint='index', view_func=root_redirect)

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app
