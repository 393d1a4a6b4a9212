"""
Role-based permissions.

A user's capabilities come from the role attached to them. Anything that
cannot be resolved (anonymous user, missing role) yields no permission
record, and every check against a missing record is false.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# (attribute name, payload name)
PERMISSIONS = (
    ('can_create_tickets', 'canCreateTickets'),
    ('can_update_own_tickets', 'canUpdateOwnTickets'),
    ('can_update_all_tickets', 'canUpdateAllTickets'),
    ('can_close_tickets', 'canCloseTickets'),
    ('can_view_all_tickets', 'canViewAllTickets'),
    ('can_approve_changes', 'canApproveChanges'),
    ('can_manage_knowledgebase', 'canManageKnowledgebase'),
    ('can_manage_service_catalog', 'canManageServiceCatalog'),
    ('can_run_reports', 'canRunReports'),
    ('can_manage_users', 'canManageUsers'),
    ('can_manage_roles', 'canManageRoles'),
    ('can_manage_cmdb', 'canManageCMDB'),
    ('can_view_cmdb', 'canViewCMDB'),
    ('is_tenant_scoped', 'isTenantScoped'),
)

PERMISSION_FIELDS = tuple(attr for attr, _ in PERMISSIONS)
_PAYLOAD_TO_FIELD = {payload: attr for attr, payload in PERMISSIONS}
_FIELD_TO_PAYLOAD = {attr: payload for attr, payload in PERMISSIONS}

LEGACY_ADMIN_ROLE = 'admin'


def permission_field(name: str) -> Optional[str]:
    """Attribute name for ``canManageUsers`` or ``can_manage_users``; None if unknown."""
    if name in _FIELD_TO_PAYLOAD:
        return name
    return _PAYLOAD_TO_FIELD.get(name)


@dataclass(frozen=True)
class UserPermissions:
    can_create_tickets: bool = False
    can_update_own_tickets: bool = False
    can_update_all_tickets: bool = False
    can_close_tickets: bool = False
    can_view_all_tickets: bool = False
    can_approve_changes: bool = False
    can_manage_knowledgebase: bool = False
    can_manage_service_catalog: bool = False
    can_run_reports: bool = False
    can_manage_users: bool = False
    can_manage_roles: bool = False
    can_manage_cmdb: bool = False
    can_view_cmdb: bool = False
    is_tenant_scoped: bool = False

    @classmethod
    def all_granted(cls) -> 'UserPermissions':
        """Every capability, not tenant scoped (legacy admin)."""
        return cls(**{f.name: f.name != 'is_tenant_scoped' for f in fields(cls)})

    @classmethod
    def from_role(cls, role) -> 'UserPermissions':
        return cls(**{name: getattr(role, name, False) is True for name in PERMISSION_FIELDS})

    @classmethod
    def from_payload(cls, payload: Any) -> Optional['UserPermissions']:
        """Build from an API payload; anything that is not a mapping means no record."""
        if not isinstance(payload, Mapping):
            return None
        values = {}
        for key, value in payload.items():
            attr = permission_field(key)
            if attr is not None:
                values[attr] = value is True
        return cls(**values)

    def to_payload(self) -> Dict[str, bool]:
        return {payload: getattr(self, attr) for attr, payload in PERMISSIONS}

    def get(self, name: str) -> bool:
        attr = permission_field(name)
        if attr is None:
            return False
        return getattr(self, attr) is True


class PermissionChecker:
    """
    Boolean checks over an optional permission record.

    Usage:
        checker = PermissionChecker(resolve_permissions(user))
        if checker.has_any_permission('canManageUsers', 'canManageRoles'):
            ...
    """

    def __init__(self, permissions: Optional[UserPermissions],
                 navigate: Optional[Callable[[str], Any]] = None):
        self.permissions = permissions
        self._navigate = navigate

    def has_permission(self, permission: str) -> bool:
        if self.permissions is None:
            return False
        return self.permissions.get(permission)

    def has_any_permission(self, *permissions: str) -> bool:
        if self.permissions is None:
            return False
        return any(self.permissions.get(p) for p in permissions)

    def has_all_permissions(self, *permissions: str) -> bool:
        # With no arguments this is true only when a record exists.
        if self.permissions is None:
            return False
        return all(self.permissions.get(p) for p in permissions)

    def require_permission(self, permission: str, redirect_to: str = '/') -> bool:
        """
        Guard for page-level gating: when the permission is missing, navigate
        to ``redirect_to`` and return False. Advisory only; API endpoints
        enforce permissions on their own.
        """
        if not self.has_permission(permission):
            if self._navigate is not None:
                self._navigate(redirect_to)
            return False
        return True


def resolve_permissions(user) -> Optional[UserPermissions]:
    """
    Permission record for ``user``.

    Legacy admins get everything, users with a role get the role's flags and
    anyone else (anonymous, no role) gets None.
    """
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    if getattr(user, 'role', None) == LEGACY_ADMIN_ROLE:
        return UserPermissions.all_granted()
    role = getattr(user, 'role_details', None)
    if role is None:
        return None
    return UserPermissions.from_role(role)


def is_scoped_to_tenant(user) -> bool:
    role = getattr(user, 'role_details', None)
    if role is None:
        return False
    return getattr(role, 'is_tenant_scoped', False) is True


def can_access_all_customers(user) -> bool:
    if getattr(user, 'role', None) == LEGACY_ADMIN_ROLE:
        return True
    return not is_scoped_to_tenant(user)


def get_tenant_filter(user) -> Optional[str]:
    """Customer id to restrict queries to, or None for unrestricted access."""
    if can_access_all_customers(user):
        return None
    return getattr(user, 'customer_id', None)
