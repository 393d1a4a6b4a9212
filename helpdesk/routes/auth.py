from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from helpdesk import limiter
from helpdesk.forms import LoginForm
from helpdesk.models import User
from helpdesk.services.permissions import resolve_permissions
from helpdesk.utils.audit_log import log_action, log_failed_login
from helpdesk.utils.messages import (
    AUTH_ACCOUNT_INACTIVE, AUTH_INVALID_CREDENTIALS, AUTH_LOGIN_SUCCESS, AUTH_LOGOUT_SUCCESS,
)
from helpdesk.utils.responses import form_error_response, json_error

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def user_payload(user):
    permissions = resolve_permissions(user)
    data = user.to_dict()
    data['permissions'] = permissions.to_payload() if permissions is not None else None
    return data


@bp.route("/login", methods=['POST'])
@limiter.limit("5 per minute")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    email = form.email.data.strip().lower()
    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(form.password.data):
        log_failed_login(email)
        return json_error(AUTH_INVALID_CREDENTIALS, 401)
    if not user.is_active:
        current_app.logger.info(f"Login refused for inactive user {user.id}")
        return json_error(AUTH_ACCOUNT_INACTIVE, 403)

    login_user(user)
    log_action('LOGIN', f'User logged in: {user.email}', subject=user)
    return jsonify({'message': str(AUTH_LOGIN_SUCCESS), 'user': user_payload(user)})


@bp.route("/logout", methods=['POST'])
@login_required
def logout():
    log_action('LOGOUT', f'User logged out: {current_user.email}', subject=current_user._get_current_object())
    logout_user()
    return jsonify({'message': str(AUTH_LOGOUT_SUCCESS)})


@bp.route("/user")
@login_required
def user():
    return jsonify(user_payload(current_user))
