"""
System settings store.

Settings are persisted as a flat string-to-string mapping (``SystemSetting``
rows) so deployments can add keys without schema changes. Reads go through
:class:`SettingsMap`, which owns the fallback rules for typed access.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional

from flask import current_app

from helpdesk import cache, db
from helpdesk.models import SystemSetting

logger = logging.getLogger(__name__)

TRUE = 'true'
FALSE = 'false'
SETTINGS_CACHE_KEY = 'system_settings_map'


def bool_to_setting(value: bool) -> str:
    return TRUE if value else FALSE


class SettingsMap(Mapping):
    """Read-only snapshot of the settings store with typed accessors."""

    def __init__(self, values: Optional[Mapping] = None):
        self._values: Dict[str, Any] = dict(values or {})

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self):
        return f"SettingsMap({self._values!r})"

    @staticmethod
    def _is_unset(value) -> bool:
        return value is None or value == ''

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._values.get(key)
        if self._is_unset(value):
            return default
        return str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Absent or empty -> ``default``; otherwise only the text ``"true"`` is true."""
        value = self._values.get(key)
        if self._is_unset(value):
            return default
        return value == TRUE

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self._values.get(key)
        if self._is_unset(value):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Setting '{key}' is not an integer: {value!r}")
            return default

    @classmethod
    def wrap(cls, settings: Any) -> 'SettingsMap':
        """Coerce whatever the caller holds into a snapshot; junk becomes empty."""
        if isinstance(settings, SettingsMap):
            return settings
        if settings is None:
            return cls()
        if isinstance(settings, Mapping):
            return cls(settings)
        logger.warning(f"Ignoring malformed settings snapshot of type {type(settings).__name__}")
        return cls()


def _settings_timeout() -> int:
    return current_app.config.get('CACHE_SETTINGS_TIMEOUT', 300)


def load_settings_map() -> SettingsMap:
    """Current settings snapshot, served from cache when possible."""
    values = cache.get(SETTINGS_CACHE_KEY)
    if values is None:
        values = {s.key: s.value for s in SystemSetting.query.all()}
        cache.set(SETTINGS_CACHE_KEY, values, timeout=_settings_timeout())
    return SettingsMap(values)


def invalidate_settings_cache() -> None:
    cache.delete(SETTINGS_CACHE_KEY)


def get_all_settings() -> List[SystemSetting]:
    return SystemSetting.query.order_by(SystemSetting.key).all()


def get_setting(key: str) -> Optional[SystemSetting]:
    return SystemSetting.query.filter_by(key=key).first()


def upsert_setting(key: str, value: Optional[str]) -> SystemSetting:
    """Create or update a setting and drop the cached snapshot."""
    setting = get_setting(key)
    if setting is None:
        setting = SystemSetting(key=key, value=value)
        db.session.add(setting)
    else:
        setting.value = value
    db.session.commit()
    invalidate_settings_cache()
    logger.info(f"Setting '{key}' updated")
    return setting


def delete_setting(key: str) -> bool:
    setting = get_setting(key)
    if setting is None:
        return False
    db.session.delete(setting)
    db.session.commit()
    invalidate_settings_cache()
    logger.info(f"Setting '{key}' deleted")
    return True
