from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

STATUSES = ('draft', 'submitted', 'approved', 'declined', 'archived')

# Owners may no longer edit once the timesheet is in review or closed
LOCKED_STATUSES = frozenset({'submitted', 'approved', 'archived'})


@dataclass(frozen=True)
class Timesheet:
    """Read-only view of a timesheet as handed to the permission checks."""
    id: Any = None
    employee_id: Any = None
    status: Optional[str] = None

    @classmethod
    def coerce(cls, value: Any) -> Optional['Timesheet']:
        """Accept a Timesheet, a mapping, or any object exposing the same fields."""
        if value is None or isinstance(value, Timesheet):
            return value
        if isinstance(value, Mapping):
            get = value.get
        else:
            def get(key, default=None):
                return getattr(value, key, default)
        employee_id = get('employee_id')
        if employee_id is None:
            employee_id = get('employeeId')
        status = get('status')
        return cls(
            id=get('id'),
            employee_id=employee_id,
            status=status.lower() if isinstance(status, str) else status,
        )

    @property
    def is_locked(self) -> bool:
        return self.status in LOCKED_STATUSES
