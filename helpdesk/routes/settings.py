"""
System settings and feature modules.

Settings are free-form key/value strings. Modules are switched on and off
through their setting key, so the module endpoints are a typed view over
the same store.
"""
from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from helpdesk.forms import ModuleToggleForm, SettingForm
from helpdesk.services.modules import get_module, module_registry
from helpdesk.services.settings_store import (
    bool_to_setting, delete_setting, get_all_settings, get_setting, load_settings_map, upsert_setting,
)
from helpdesk.utils.audit_log import log_action
from helpdesk.utils.decorators import permission_required
from helpdesk.utils.messages import ERROR_NOT_FOUND, MODULE_UPDATED, SETTING_DELETED, SETTING_UPDATED
from helpdesk.utils.responses import form_error_response, json_error

bp = Blueprint("settings", __name__, url_prefix="/api")


@bp.route('/settings', methods=['GET'])
@login_required
def settings_list():
    return jsonify([s.to_dict() for s in get_all_settings()])


@bp.route('/settings/<key>', methods=['GET'])
def setting_detail(key):
    setting = get_setting(key)
    if setting is None:
        return json_error(ERROR_NOT_FOUND % {'item': key}, 404)
    return jsonify(setting.to_dict())


@bp.route('/settings', methods=['POST'])
@permission_required('canManageUsers')
def setting_upsert():
    form = SettingForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    key = form.key.data.strip()
    setting = upsert_setting(key, form.value.data)
    log_action('SETTING_UPDATED', f'Setting {key} updated', subject=setting,
               additional_info={key: form.value.data})
    return jsonify({'message': str(SETTING_UPDATED % {'key': key}), 'setting': setting.to_dict()})


@bp.route('/settings/<key>', methods=['DELETE'])
@permission_required('canManageUsers')
def setting_delete(key):
    if not delete_setting(key):
        return json_error(ERROR_NOT_FOUND % {'item': key}, 404)
    log_action('SETTING_DELETED', f'Setting {key} deleted')
    return jsonify({'message': str(SETTING_DELETED % {'key': key})})


@bp.route('/modules', methods=['GET'])
@login_required
def modules_list():
    settings = load_settings_map()
    return jsonify([m.to_dict(enabled=module_registry.is_enabled(m.key, settings))
                    for m in module_registry.all()])


@bp.route('/modules/<module_key>', methods=['PUT'])
@permission_required('canManageUsers')
def module_toggle(module_key):
    module = get_module(module_key)
    if module is None:
        return json_error(ERROR_NOT_FOUND % {'item': module_key}, 404)

    form = ModuleToggleForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    upsert_setting(module.setting_key, bool_to_setting(form.enabled.data))
    current_app.logger.info(f"Module '{module.key.value}' set to {form.enabled.data}")
    log_action('MODULE_TOGGLED', f'Module {module.name} set to {form.enabled.data}',
               additional_info={'module': module.key.value, 'enabled': form.enabled.data})
    return jsonify({
        'message': str(MODULE_UPDATED % {'name': module.name}),
        'module': module.to_dict(enabled=form.enabled.data),
    })
