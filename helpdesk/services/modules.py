"""
Feature module registry.

Central registry for the application's toggleable modules. The catalog is
static; whether a module is on for an installation is decided by the
settings store, falling back to the module's default.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from helpdesk.services.settings_store import SettingsMap

logger = logging.getLogger(__name__)


class ModuleKey(str, Enum):
    INCIDENTS = 'incidents'
    PROBLEMS = 'problems'
    CHANGES = 'changes'
    CMDB = 'cmdb'
    KNOWLEDGE = 'knowledge'
    SERVICE_CATALOG = 'service_catalog'
    EMAIL_INBOX = 'email_inbox'
    REPORTS = 'reports'
    NETWORK_DISCOVERY = 'network_discovery'


class ModuleCategory(str, Enum):
    CORE = 'core'
    ITIL = 'itil'
    ADVANCED = 'advanced'


@dataclass(frozen=True)
class ModuleDefinition:
    key: ModuleKey
    name: str
    description: str
    setting_key: str
    default_enabled: bool
    category: ModuleCategory

    def to_dict(self, enabled: Optional[bool] = None) -> Dict[str, Any]:
        info = {
            'key': self.key.value,
            'name': self.name,
            'description': self.description,
            'settingKey': self.setting_key,
            'defaultEnabled': self.default_enabled,
            'category': self.category.value,
        }
        if enabled is not None:
            info['enabled'] = enabled
        return info


def _coerce_key(module_key) -> Optional[ModuleKey]:
    if isinstance(module_key, ModuleKey):
        return module_key
    try:
        return ModuleKey(module_key)
    except ValueError:
        return None


class ModuleRegistry:
    """Registry of module definitions keyed by :class:`ModuleKey`."""

    def __init__(self):
        self._modules: Dict[ModuleKey, ModuleDefinition] = {}

    def register(self, definition: ModuleDefinition) -> None:
        if definition.key in self._modules:
            logger.warning(f"ModuleRegistry: Module '{definition.key.value}' already registered, overwriting")
        self._modules[definition.key] = definition

    def get(self, module_key) -> Optional[ModuleDefinition]:
        key = _coerce_key(module_key)
        if key is None:
            return None
        return self._modules.get(key)

    def all(self) -> List[ModuleDefinition]:
        return list(self._modules.values())

    def by_category(self, category) -> List[ModuleDefinition]:
        try:
            category = ModuleCategory(category)
        except ValueError:
            return []
        return [m for m in self._modules.values() if m.category == category]

    def is_enabled(self, module_key, settings_map) -> bool:
        module = self.get(module_key)
        if module is None:
            logger.debug(f"ModuleRegistry: Unknown module '{module_key}'")
            return False
        return SettingsMap.wrap(settings_map).get_bool(module.setting_key, module.default_enabled)

    def enabled_modules(self, settings_map) -> Set[ModuleKey]:
        settings = SettingsMap.wrap(settings_map)
        return {m.key for m in self._modules.values() if self.is_enabled(m.key, settings)}


module_registry = ModuleRegistry()

for _definition in (
    ModuleDefinition(ModuleKey.INCIDENTS, 'Incident Management',
                     'Track and resolve IT incidents and helpdesk tickets',
                     'module_incidents_enabled', True, ModuleCategory.CORE),
    ModuleDefinition(ModuleKey.PROBLEMS, 'Problem Management',
                     'Identify and manage root causes of recurring incidents',
                     'module_problems_enabled', False, ModuleCategory.ITIL),
    ModuleDefinition(ModuleKey.CHANGES, 'Change Management',
                     'Plan and track IT changes with approval workflows',
                     'module_changes_enabled', False, ModuleCategory.ITIL),
    ModuleDefinition(ModuleKey.CMDB, 'Configuration Management Database',
                     'Manage IT assets and configuration items',
                     'module_cmdb_enabled', True, ModuleCategory.CORE),
    ModuleDefinition(ModuleKey.KNOWLEDGE, 'Knowledge Base',
                     'Create and manage knowledge articles and documentation',
                     'module_knowledge_enabled', True, ModuleCategory.CORE),
    ModuleDefinition(ModuleKey.SERVICE_CATALOG, 'Service Catalog',
                     'ITIL service request fulfillment and catalog management',
                     'module_service_catalog_enabled', True, ModuleCategory.ITIL),
    ModuleDefinition(ModuleKey.EMAIL_INBOX, 'Email Inbox',
                     'Email integration for ticket creation',
                     'module_email_inbox_enabled', False, ModuleCategory.ADVANCED),
    ModuleDefinition(ModuleKey.REPORTS, 'Reporting & Analytics',
                     'Generate reports and view analytics dashboards',
                     'module_reports_enabled', True, ModuleCategory.CORE),
    ModuleDefinition(ModuleKey.NETWORK_DISCOVERY, 'Network Discovery',
                     'Automated network device and asset discovery',
                     'module_network_discovery_enabled', False, ModuleCategory.ADVANCED),
):
    module_registry.register(_definition)


def get_module(module_key) -> Optional[ModuleDefinition]:
    return module_registry.get(module_key)


def is_module_enabled(module_key, settings_map) -> bool:
    """
    Whether a module is on for the given settings snapshot.

    Unknown modules are off. A missing, ``None`` or empty setting means the
    module's default; any other value is on only if it is exactly ``"true"``.
    """
    return module_registry.is_enabled(module_key, settings_map)


def get_enabled_modules(settings_map) -> Set[ModuleKey]:
    return module_registry.enabled_modules(settings_map)


def get_modules_by_category(category) -> List[ModuleDefinition]:
    return module_registry.by_category(category)
