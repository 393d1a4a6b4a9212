from functools import wraps

from flask import flash, jsonify, redirect, url_for
from flask_login import current_user

from helpdesk.services.modules import get_module, is_module_enabled
from helpdesk.services.permissions import PermissionChecker, resolve_permissions
from helpdesk.services.settings_store import load_settings_map
from helpdesk.utils.messages import (
    AUTH_LOGIN_REQUIRED, ERROR_MODULE_DISABLED, ERROR_PERMISSION_DENIED,
)


def get_permission_checker(navigate=None):
    """PermissionChecker for the current request's user."""
    return PermissionChecker(resolve_permissions(current_user), navigate=navigate)


def permission_required(*permissions):
    """Decorator to require at least one of the given permissions for an API route."""
    def wrapper(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'message': str(AUTH_LOGIN_REQUIRED)}), 401
            if not get_permission_checker().has_any_permission(*permissions):
                return jsonify({'message': str(ERROR_PERMISSION_DENIED)}), 403
            return f(*args, **kwargs)
        return decorated_function
    return wrapper


def module_required(module_key):
    """Decorator hiding a route (404) while its module is switched off."""
    def wrapper(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if get_module(module_key) is None or not is_module_enabled(module_key, load_settings_map()):
                return jsonify({'message': str(ERROR_MODULE_DISABLED)}), 404
            return f(*args, **kwargs)
        return decorated_function
    return wrapper


def page_permission_required(permission, redirect_endpoint='main.home'):
    """
    Page guard: without the permission, flash a message and redirect.

    Only gates what is rendered; the API routes behind the page check
    permissions themselves.
    """
    def wrapper(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            target = []
            checker = get_permission_checker(navigate=target.append)
            if not checker.require_permission(permission, url_for(redirect_endpoint)):
                flash(str(ERROR_PERMISSION_DENIED), 'danger')
                return redirect(target[0])
            return f(*args, **kwargs)
        return decorated_function
    return wrapper
