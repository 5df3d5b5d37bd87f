"""Conditional-render helpers driven by permission checks.

Both gates return ``children`` or ``fallback``. Either may be a callable, in which
case only the chosen branch is invoked; templates use this to avoid building
markup the user is not allowed to see:

    {{ permission_gate('employees', add_button) }}
    {{ timesheet_gate('edit_timesheet', edit_link, timesheet=ts) }}
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Union

from portal.models.timesheet import Timesheet
from portal.services.policy import PermissionResolver, current_resolver


def _render(value: Any):
    return value() if callable(value) else value


def check_permissions(resolver: PermissionResolver, permission: Union[str, Sequence[str], None],
                      require_all: bool = False, require_any: bool = False) -> bool:
    if not permission:
        return False
    if isinstance(permission, str):
        return resolver.has_permission(permission)
    perms = list(permission)
    if require_all:
        return all(resolver.has_permission(p) for p in perms)
    if require_any:
        return any(resolver.has_permission(p) for p in perms)
    # list without a mode: deny
    return False


def permission_gate(permission, children, fallback=None, require_all: bool = False,
                    require_any: bool = False, resolver: Optional[PermissionResolver] = None):
    resolver = resolver or current_resolver()
    if check_permissions(resolver, permission, require_all=require_all, require_any=require_any):
        return _render(children)
    return _render(fallback)


class TimesheetAction(str, Enum):
    CREATE = 'create'
    VIEW_OWN = 'view_own'
    VIEW_ALL = 'view_all'
    APPROVE = 'approve'
    REJECT = 'reject'
    EDIT_ALL = 'edit_all'
    VIEW_TIMESHEET = 'view_timesheet'
    EDIT_TIMESHEET = 'edit_timesheet'

    @classmethod
    def parse(cls, value) -> Optional['TimesheetAction']:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# Role-level capabilities, no instance needed
_ROLE_CHECKS: Dict[TimesheetAction, Callable[[PermissionResolver], bool]] = {
    TimesheetAction.CREATE: PermissionResolver.can_create_timesheet,
    TimesheetAction.VIEW_OWN: PermissionResolver.can_view_own_timesheets,
    TimesheetAction.VIEW_ALL: PermissionResolver.can_view_all_timesheets,
    TimesheetAction.APPROVE: PermissionResolver.can_approve_timesheets,
    TimesheetAction.REJECT: PermissionResolver.can_reject_timesheets,
    TimesheetAction.EDIT_ALL: PermissionResolver.can_edit_all_timesheets,
}

# Ownership-aware, need the timesheet
_INSTANCE_CHECKS: Dict[TimesheetAction, Callable[[PermissionResolver, Timesheet], bool]] = {
    TimesheetAction.VIEW_TIMESHEET: PermissionResolver.can_view_timesheet,
    TimesheetAction.EDIT_TIMESHEET: PermissionResolver.can_edit_timesheet,
}


def check_timesheet_action(resolver: PermissionResolver, action, timesheet=None) -> bool:
    action = TimesheetAction.parse(action)
    if action is None:
        return False
    if action in _INSTANCE_CHECKS:
        timesheet = Timesheet.coerce(timesheet)
        if timesheet is None:
            return False
        return _INSTANCE_CHECKS[action](resolver, timesheet)
    return _ROLE_CHECKS[action](resolver)


def timesheet_permission_gate(action, children, timesheet=None, fallback=None,
                              resolver: Optional[PermissionResolver] = None):
    resolver = resolver or current_resolver()
    if check_timesheet_action(resolver, action, timesheet):
        return _render(children)
    return _render(fallback)
