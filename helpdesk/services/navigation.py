"""Sidebar navigation for the single-page front end, filtered by module and permission."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from flask_babel import lazy_gettext as _

from helpdesk.services.modules import ModuleKey, is_module_enabled
from helpdesk.services.permissions import PermissionChecker


@dataclass(frozen=True)
class NavItem:
    key: str
    title: Any
    url: str
    permission: Optional[str] = None
    module: Optional[ModuleKey] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'key': self.key, 'title': str(self.title), 'url': self.url}


MAIN_ITEMS = (
    NavItem('dashboard', _('Dashboard'), '/'),
    NavItem('incidents', _('Incidents'), '/tickets', module=ModuleKey.INCIDENTS),
    NavItem('problems', _('Problems'), '/problems', module=ModuleKey.PROBLEMS),
    NavItem('changes', _('Changes'), '/changes', module=ModuleKey.CHANGES),
    NavItem('cmdb', _('CMDB'), '/cmdb', permission='canViewCMDB', module=ModuleKey.CMDB),
    NavItem('knowledge-base', _('Knowledge Base'), '/knowledge', module=ModuleKey.KNOWLEDGE),
    NavItem('service-catalog', _('Service Catalog'), '/service-catalog', module=ModuleKey.SERVICE_CATALOG),
    NavItem('email-inbox', _('Email Inbox'), '/emails', module=ModuleKey.EMAIL_INBOX),
)

ADMIN_ITEMS = (
    NavItem('reports', _('Reports'), '/reports', permission='canRunReports', module=ModuleKey.REPORTS),
    NavItem('settings', _('Settings'), '/admin'),
)

ADMIN_SECTION_PERMISSIONS = ('canManageUsers', 'canManageRoles', 'canRunReports', 'canManageServiceCatalog')


def _visible(item: NavItem, checker: PermissionChecker, settings_map) -> bool:
    if item.permission is not None and not checker.has_permission(item.permission):
        return False
    if item.module is not None and not is_module_enabled(item.module, settings_map):
        return False
    return True


def build_navigation(checker: PermissionChecker, settings_map) -> Dict[str, Any]:
    """Navigation payload: visible main items plus the admin section when allowed."""
    items: List[Dict[str, Any]] = [i.to_dict() for i in MAIN_ITEMS if _visible(i, checker, settings_map)]
    show_admin = checker.has_any_permission(*ADMIN_SECTION_PERMISSIONS)
    admin_items = [i.to_dict() for i in ADMIN_ITEMS if _visible(i, checker, settings_map)] if show_admin else []
    return {
        'items': items,
        'admin': {'visible': show_admin, 'items': admin_items},
    }
