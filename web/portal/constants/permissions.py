"""Role -> permission table. Sole policy source for the portal.
Role and permission strings must match the backend vocabulary exactly; add new keys
rather than renaming existing ones.
"""
from __future__ import annotations
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class Role(str, Enum):
    SUPER_ADMIN = 'super_admin'
    ADMINISTRATOR = 'administrator'
    ADMIN = 'admin'
    ACCOUNTANT = 'accountant'
    TRAINER = 'trainer'
    SUPPORT = 'support'


class Permission(str, Enum):
    DASHBOARD = 'dashboard'
    TIMESHEETS = 'timesheets'
    PROJECTS = 'projects'
    CUSTOMERS = 'customers'
    ORDERS = 'orders'
    PRODUCTS = 'products'
    MATERIALS = 'materials'
    EMPLOYEES = 'employees'
    APPROVAL = 'approval'
    REPORTS = 'reports'
    ADVERTISEMENT = 'advertisement'
    EVERYTHING = 'everything'
    # Timesheet capabilities
    TIMESHEETS_CREATE = 'timesheets_create'
    TIMESHEETS_VIEW_OWN = 'timesheets_view_own'
    TIMESHEETS_VIEW_ALL = 'timesheets_view_all'
    TIMESHEETS_APPROVE = 'timesheets_approve'
    TIMESHEETS_REJECT = 'timesheets_reject'
    TIMESHEETS_EDIT_ALL = 'timesheets_edit_all'


ALL_PERMISSION_CODES = [p.value for p in Permission]

# Baseline every role inherits: own timesheets only
_EMPLOYEE_BASE: Dict[str, bool] = {
    'dashboard': False,
    'timesheets': True,
    'projects': False,
    'customers': False,
    'orders': False,
    'products': False,
    'materials': False,
    'employees': False,
    'approval': False,
    'reports': False,
    'advertisement': False,
    'everything': False,
    'timesheets_create': True,
    'timesheets_view_own': True,
    'timesheets_view_all': False,
    'timesheets_approve': False,
    'timesheets_reject': False,
    'timesheets_edit_all': False,
}


def _preset(**overrides: bool) -> Mapping[str, bool]:
    unknown = set(overrides) - set(_EMPLOYEE_BASE)
    if unknown:
        raise KeyError(f'Unknown permission keys: {sorted(unknown)}')
    return MappingProxyType({**_EMPLOYEE_BASE, **overrides})


ROLE_PERMISSIONS: Mapping[str, Mapping[str, bool]] = MappingProxyType({
    Role.SUPER_ADMIN.value: _preset(**{code: True for code in ALL_PERMISSION_CODES}),
    Role.ADMINISTRATOR.value: _preset(
        dashboard=True, projects=True, customers=True, orders=True, products=True,
        materials=True, reports=True, advertisement=True,
        timesheets_view_all=True,
    ),
    # Restricted admin: no dashboard, orders, products or materials
    Role.ADMIN.value: _preset(
        projects=True, customers=True, reports=True,
        timesheets_view_all=True,
    ),
    # Billing needs customers and orders, nothing operational
    Role.ACCOUNTANT.value: _preset(
        dashboard=True, customers=True, orders=True, reports=True,
    ),
    Role.TRAINER.value: _preset(projects=True),
    Role.SUPPORT.value: _preset(projects=True),
})

_EMPTY: Mapping[str, bool] = MappingProxyType({})


def lookup(role: Optional[str], table: Mapping[str, Mapping[str, bool]] = ROLE_PERMISSIONS) -> Mapping[str, bool]:
    """Return the permission map for ``role``; an empty map for unknown roles."""
    if not role:
        return _EMPTY
    return table.get(role, _EMPTY)
