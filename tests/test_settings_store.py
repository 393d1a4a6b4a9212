from helpdesk.models import SystemSetting
from helpdesk.services.settings_store import (
    SettingsMap, bool_to_setting, delete_setting, get_all_settings, get_setting, load_settings_map,
    upsert_setting,
)
from helpdesk import db


def test_get_bool_rules():
    settings = SettingsMap({'a': 'true', 'b': 'false', 'c': '', 'd': None, 'e': 'TRUE'})
    assert settings.get_bool('a') is True
    assert settings.get_bool('b', True) is False
    assert settings.get_bool('c', True) is True
    assert settings.get_bool('d', True) is True
    assert settings.get_bool('e', True) is False
    assert settings.get_bool('missing', True) is True


def test_get_int_and_str():
    settings = SettingsMap({'n': '42', 'bad': 'x', 's': 'hello', 'empty': ''})
    assert settings.get_int('n') == 42
    assert settings.get_int('bad', 7) == 7
    assert settings.get_str('s') == 'hello'
    assert settings.get_str('empty', 'fallback') == 'fallback'


def test_wrap():
    snapshot = SettingsMap({'a': 'b'})
    assert SettingsMap.wrap(snapshot) is snapshot
    assert dict(SettingsMap.wrap({'x': 'y'})) == {'x': 'y'}
    assert len(SettingsMap.wrap(None)) == 0
    assert len(SettingsMap.wrap(42)) == 0


def test_bool_to_setting():
    assert bool_to_setting(True) == 'true'
    assert bool_to_setting(False) == 'false'


def test_upsert_and_delete(app):
    upsert_setting('site_name', 'Helpdesk')
    upsert_setting('site_name', 'Service Desk')
    assert SystemSetting.query.count() == 1
    assert get_setting('site_name').value == 'Service Desk'

    assert delete_setting('site_name') is True
    assert delete_setting('site_name') is False
    assert get_setting('site_name') is None


def test_snapshot_is_cached_and_invalidated(app):
    upsert_setting('module_problems_enabled', 'true')
    assert load_settings_map()['module_problems_enabled'] == 'true'

    # Writes that bypass the store are not seen until the cache is dropped
    get_setting('module_problems_enabled').value = 'false'
    db.session.commit()
    assert load_settings_map()['module_problems_enabled'] == 'true'

    upsert_setting('module_changes_enabled', 'true')
    settings = load_settings_map()
    assert settings['module_problems_enabled'] == 'false'
    assert settings['module_changes_enabled'] == 'true'


def test_null_values_are_stored(app):
    upsert_setting('smtp_host', None)
    assert load_settings_map().get_str('smtp_host', 'localhost') == 'localhost'
    assert [s.key for s in get_all_settings()] == ['smtp_host']
