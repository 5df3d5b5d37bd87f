from flask import Blueprint, current_app, render_template, session
from portal.decorators.auth import require_page, with_role_protection
from portal.models.timesheet import Timesheet
from portal.services.backend_client import BackendError
from portal.services.navigation import PAGES, PAGE_BY_PATH, TIMESHEET_ROUTE
from portal.services.session_store import SessionStore
from portal.services.session_watcher import get_backend_client

pages_bp = Blueprint('pages', __name__)


def _placeholder_view(page):
    def view():
        return render_template('page.html', page=page)
    view.__name__ = f'{page.endpoint}_page'
    return view


@require_page(PAGE_BY_PATH[TIMESHEET_ROUTE].permission)
def timesheet_page():
    page = PAGE_BY_PATH[TIMESHEET_ROUTE]
    error = None
    rows = []
    try:
        rows = get_backend_client().list_timesheets(SessionStore(session).credentials)
    except BackendError as e:
        current_app.logger.warning('Could not load timesheets: %s', e.message)
        error = e.message
    timesheets = [(row, Timesheet.coerce(row)) for row in rows if isinstance(row, dict)]
    return render_template('timesheet.html', page=page, timesheets=timesheets, error=error)


# Every page is registered through with_role_protection
for _page in PAGES:
    if _page.path == TIMESHEET_ROUTE:
        _view = timesheet_page
    else:
        _view = with_role_protection(_placeholder_view(_page), _page.permission)
    pages_bp.add_url_rule(_page.path, endpoint=_page.endpoint, view_func=_view)
