from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List

from portal.constants.permissions import Permission, Role

LOGIN_ROUTE = '/auth/login'
DASHBOARD_ROUTE = '/dashboard'
TIMESHEET_ROUTE = '/timesheet'


@dataclass(frozen=True)
class PageSpec:
    endpoint: str
    path: str
    title: str
    icon: str
    permission: str


# Navigation order
PAGES: List[PageSpec] = [
    PageSpec('dashboard', DASHBOARD_ROUTE, 'Dashboard', 'dashboard', Permission.DASHBOARD.value),
    PageSpec('timesheet', TIMESHEET_ROUTE, 'Timesheet', 'timesheet', Permission.TIMESHEETS.value),
    PageSpec('projects', '/projects', 'Projects', 'projects', Permission.PROJECTS.value),
    PageSpec('material', '/material', 'Material', 'material', Permission.MATERIALS.value),
    PageSpec('products', '/products', 'Products', 'products', Permission.PRODUCTS.value),
    PageSpec('customers', '/customers', 'Customers', 'customers', Permission.CUSTOMERS.value),
    PageSpec('orders', '/orders', 'Orders', 'orders', Permission.ORDERS.value),
    PageSpec('advertisement', '/advertisement', 'Advertisement', 'advertisement', Permission.ADVERTISEMENT.value),
    PageSpec('employees', '/employees', 'Employees', 'employees', Permission.EMPLOYEES.value),
    PageSpec('approval', '/approval', 'Approval', 'approval', Permission.APPROVAL.value),
    PageSpec('reports', '/reports', 'Reports', 'reports', Permission.REPORTS.value),
]

PAGE_BY_PATH: Dict[str, PageSpec] = {p.path: p for p in PAGES}

DEFAULT_ROUTES: Dict[str, str] = {
    Role.SUPER_ADMIN.value: DASHBOARD_ROUTE,
    Role.ADMINISTRATOR.value: DASHBOARD_ROUTE,
    Role.ACCOUNTANT.value: DASHBOARD_ROUTE,
    # admin has no dashboard permission
    Role.ADMIN.value: TIMESHEET_ROUTE,
    Role.TRAINER.value: TIMESHEET_ROUTE,
    Role.SUPPORT.value: TIMESHEET_ROUTE,
}


def get_default_route(resolver) -> str:
    """Landing path for the resolver's current role; timesheet when unknown."""
    role = resolver.get_user_role()
    return DEFAULT_ROUTES.get(role, TIMESHEET_ROUTE)
