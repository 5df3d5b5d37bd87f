from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional

from flask import current_app, g, session

from portal.constants.permissions import ROLE_PERMISSIONS, Permission, Role, lookup
from portal.models.timesheet import Timesheet
from portal.services import navigation
from portal.services.session_store import SessionStore, SessionUser

SUPER_ADMIN_LOGIN_TYPE = 'super_admin'
ADMIN_LEVEL_ROLES = frozenset({Role.SUPER_ADMIN.value, Role.ADMINISTRATOR.value, Role.ADMIN.value})


def normalize_role(role: Optional[str], login_type: Optional[str] = None) -> Optional[str]:
    """Normalize a backend role string.

    A ``super_admin`` login type wins over whatever the role string says; otherwise
    the role is trimmed and lower-cased. Missing or blank roles give None.
    """
    if login_type == SUPER_ADMIN_LOGIN_TYPE:
        return Role.SUPER_ADMIN.value
    if not isinstance(role, str):
        return None
    role = role.strip().lower()
    return role or None


def _same_id(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return str(a) == str(b)


class PermissionResolver:
    """Answers permission queries for the session held by ``store``.

    Every call reads the store again; nothing is cached, so a logout or role
    change is visible to the next check.
    """

    def __init__(self, store: SessionStore,
                 table: Mapping[str, Mapping[str, bool]] = ROLE_PERMISSIONS,
                 everything_implies_all: bool = False):
        self.store = store
        self.table = table
        self.everything_implies_all = everything_implies_all

    def get_current_user(self) -> Optional[SessionUser]:
        return self.store.load_user()

    def get_user_role(self) -> Optional[str]:
        user = self.get_current_user()
        if user is None:
            return None
        return normalize_role(user.role, user.login_type)

    def get_user_permissions(self) -> Mapping[str, bool]:
        return lookup(self.get_user_role(), self.table)

    def has_permission(self, permission: str) -> bool:
        if isinstance(permission, Permission):
            permission = permission.value
        if not isinstance(permission, str) or not permission:
            return False
        perms = self.get_user_permissions()
        if perms.get(permission) is True:
            return True
        # catch-all only covers keys the table knows about
        if self.everything_implies_all and permission in perms:
            return perms.get(Permission.EVERYTHING.value) is True
        return False

    def can_access_page(self, page: str) -> bool:
        return self.has_permission(page)

    def is_admin_level(self) -> bool:
        return self.get_user_role() in ADMIN_LEVEL_ROLES

    def is_super_admin(self) -> bool:
        return self.get_user_role() == Role.SUPER_ADMIN.value

    def get_user_display_info(self) -> Optional[Dict[str, Any]]:
        user = self.get_current_user()
        if user is None:
            return None
        return {
            'name': user.full_name,
            'email': user.email,
            'role': user.role,
            'permissions': dict(self.get_user_permissions()),
        }

    def get_default_route(self) -> str:
        return navigation.get_default_route(self)

    def get_navigation_items(self) -> List[Dict[str, str]]:
        return [
            {'title': p.title, 'href': p.path, 'icon': p.icon}
            for p in navigation.PAGES
            if self.can_access_page(p.permission)
        ]

    # --- Timesheet capabilities ---

    def can_create_timesheet(self) -> bool:
        return self.has_permission(Permission.TIMESHEETS_CREATE.value)

    def can_view_own_timesheets(self) -> bool:
        return self.has_permission(Permission.TIMESHEETS_VIEW_OWN.value)

    def can_view_all_timesheets(self) -> bool:
        return self.has_permission(Permission.TIMESHEETS_VIEW_ALL.value)

    def can_approve_timesheets(self) -> bool:
        return self.has_permission(Permission.TIMESHEETS_APPROVE.value)

    def can_reject_timesheets(self) -> bool:
        return self.has_permission(Permission.TIMESHEETS_REJECT.value)

    def can_edit_all_timesheets(self) -> bool:
        return self.has_permission(Permission.TIMESHEETS_EDIT_ALL.value)

    def owns(self, timesheet: Timesheet) -> bool:
        user = self.get_current_user()
        if user is None:
            return False
        return _same_id(timesheet.employee_id, user.employee_id)

    def can_view_timesheet(self, timesheet) -> bool:
        timesheet = Timesheet.coerce(timesheet)
        if timesheet is None:
            return False
        if self.can_view_all_timesheets():
            return True
        return self.can_view_own_timesheets() and self.owns(timesheet)

    def can_edit_timesheet(self, timesheet) -> bool:
        timesheet = Timesheet.coerce(timesheet)
        if timesheet is None:
            return False
        if self.can_edit_all_timesheets():
            return True
        return self.owns(timesheet) and not timesheet.is_locked


def current_resolver() -> PermissionResolver:
    """Resolver over the request's session, built once per request."""
    resolver = g.get('permission_resolver')
    if resolver is None:
        resolver = PermissionResolver(
            SessionStore(session),
            everything_implies_all=current_app.config.get('RBAC_EVERYTHING_IMPLIES_ALL', False),
        )
        g.permission_resolver = resolver
    return resolver
