"""
Capability checks applied at the API boundary.

Roles map to permission sets; routers ask ``authorizer.can`` before calling
into the scheduling services, which stay permission-agnostic.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from app.core.exceptions import PermissionDeniedError
from app.models import User

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    # Legacy umbrella permission, implies every calendar permission
    MANAGE_CRM_CALENDAR = "MANAGE_CRM_CALENDAR"
    VIEW_CALENDARS = "VIEW_CALENDARS"
    CREATE_CALENDARS = "CREATE_CALENDARS"
    SHARE_CALENDARS = "SHARE_CALENDARS"
    USE_AVAILABILITY_FINDER = "USE_AVAILABILITY_FINDER"
    MANAGE_CALENDAR_TASKS = "MANAGE_CALENDAR_TASKS"
    CUSTOMIZE_SCHEDULE = "CUSTOMIZE_SCHEDULE"


ALL_PERMISSIONS = frozenset(Permission)

ROLE_PERMISSIONS: dict[str, frozenset[Permission]] = {
    "admin": ALL_PERMISSIONS,
    "manager": frozenset({Permission.MANAGE_CRM_CALENDAR}),
    "employee": frozenset(
        {
            Permission.VIEW_CALENDARS,
            Permission.CREATE_CALENDARS,
            Permission.SHARE_CALENDARS,
            Permission.USE_AVAILABILITY_FINDER,
            Permission.MANAGE_CALENDAR_TASKS,
            Permission.CUSTOMIZE_SCHEDULE,
        }
    ),
    "viewer": frozenset({Permission.VIEW_CALENDARS}),
}


class Authorizer:
    """Answers ``can(user, action, resource)`` from a role -> permissions table."""

    def __init__(self, role_permissions: Mapping[str, frozenset[Permission]] | None = None):
        self.role_permissions = dict(role_permissions or ROLE_PERMISSIONS)

    def permissions_for(self, user: User) -> frozenset[Permission]:
        granted = self.role_permissions.get(user.role, frozenset())
        if Permission.MANAGE_CRM_CALENDAR in granted:
            return ALL_PERMISSIONS
        return granted

    def can(self, user: User, action: Permission | str, resource: Any = None) -> bool:
        if not user.is_active:
            return False
        try:
            permission = Permission(action)
        except ValueError:
            logger.warning(f"Unknown permission requested: {action}")
            return False
        if permission not in self.permissions_for(user):
            return False
        if permission is Permission.SHARE_CALENDARS and resource is not None:
            # Only owners hand out access to a calendar
            return getattr(resource, "owner_id", None) == user.id
        return True

    def require(self, user: User, action: Permission | str, resource: Any = None) -> None:
        if not self.can(user, action, resource):
            raise PermissionDeniedError("missing-permission", f"Missing permission {action}")


authorizer = Authorizer()


def get_authorizer() -> Authorizer:
    return authorizer
