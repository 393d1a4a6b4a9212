"""
User and role management.

New active users count against the licensed seats, so creation is refused
once the active license is full, expired or missing.
"""
from flask import Blueprint, current_app, jsonify, request

from helpdesk import db
from helpdesk.forms import RoleForm, UserForm
from helpdesk.models import Role, User
from helpdesk.services.licensing.manager import ensure_user_capacity
from helpdesk.services.permissions import PERMISSION_FIELDS, UserPermissions
from helpdesk.utils.audit_log import log_action
from helpdesk.utils.decorators import permission_required
from helpdesk.utils.messages import ERROR_DUPLICATE, ERROR_NOT_FOUND, ROLE_ADDED, USER_ADDED
from helpdesk.utils.responses import form_error_response, json_error

bp = Blueprint("users", __name__, url_prefix="/api")


@bp.route('/users', methods=['GET'])
@permission_required('canManageUsers')
def users_list():
    users = User.query.order_by(User.email).all()
    return jsonify([u.to_dict() for u in users])


@bp.route('/users', methods=['POST'])
@permission_required('canManageUsers')
def user_create():
    form = UserForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        return json_error(ERROR_DUPLICATE % {'item': email}, 400, code='DUPLICATE_EMAIL')

    role = None
    if form.roleId.data is not None:
        role = db.session.get(Role, form.roleId.data)
        if role is None:
            return json_error(ERROR_NOT_FOUND % {'item': 'Role'}, 400, code='ROLE_NOT_FOUND')

    # LicenseInvalidError / UserLimitExceededError become 403 JSON
    ensure_user_capacity(additional=1)

    user = User(
        email=email,
        first_name=form.firstName.data or None,
        last_name=form.lastName.data or None,
        role=form.role.data,
        role_details=role,
        customer_id=form.customerId.data or None,
        must_change_password=True,
    )
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()

    current_app.logger.info(f"User {user.id} created")
    log_action('USER_CREATED', f'New user created: {user.email}', subject=user,
               additional_info={'email': user.email, 'role': user.role})
    return jsonify({'message': str(USER_ADDED % {'email': user.email}), 'user': user.to_dict()}), 201


@bp.route('/roles', methods=['GET'])
@permission_required('canManageRoles')
def roles_list():
    return jsonify([r.to_dict() for r in Role.query.order_by(Role.name).all()])


@bp.route('/roles', methods=['POST'])
@permission_required('canManageRoles')
def role_create():
    form = RoleForm()
    if not form.validate_on_submit():
        return form_error_response(form)

    name = form.name.data.strip()
    if Role.query.filter_by(name=name).first():
        return json_error(ERROR_DUPLICATE % {'item': name}, 400, code='DUPLICATE_ROLE')

    payload = request.get_json(silent=True) or {}
    permissions = UserPermissions.from_payload(payload.get('permissions')) or UserPermissions()
    role = Role(name=name, description=form.description.data or None)
    for attr in PERMISSION_FIELDS:
        setattr(role, attr, getattr(permissions, attr))
    db.session.add(role)
    db.session.commit()

    log_action('ROLE_CREATED', f'Role created: {role.name}', subject=role,
               additional_info={'permissions': permissions.to_payload()})
    return jsonify({'message': str(ROLE_ADDED % {'name': role.name}), 'role': role.to_dict()}), 201
