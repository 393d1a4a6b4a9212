"""Default roles and administrator for a fresh installation."""
import logging

from flask import current_app

from helpdesk import db
from helpdesk.models import Role, User
from helpdesk.services.permissions import PERMISSION_FIELDS

logger = logging.getLogger(__name__)

DEFAULT_ROLES = {
    'Administrator': {
        'description': 'Full access to every module and the admin area',
        'grants': [f for f in PERMISSION_FIELDS if f != 'is_tenant_scoped'],
    },
    'Agent': {
        'description': 'Service desk agent working tickets for all customers',
        'grants': ['can_create_tickets', 'can_update_own_tickets', 'can_update_all_tickets',
                   'can_close_tickets', 'can_view_all_tickets', 'can_view_cmdb'],
    },
    'Customer': {
        'description': 'End user limited to their own organisation',
        'grants': ['can_create_tickets', 'can_update_own_tickets', 'is_tenant_scoped'],
    },
}


def seed_roles():
    roles = {}
    for name, definition in DEFAULT_ROLES.items():
        role = Role.query.filter_by(name=name).first()
        if role is None:
            role = Role(name=name, description=definition['description'])
            for field in PERMISSION_FIELDS:
                setattr(role, field, field in definition['grants'])
            db.session.add(role)
            logger.info(f"Seeded role '{name}'")
        roles[name] = role
    db.session.commit()
    return roles


def seed_defaults():
    """Create default roles and the administrator account; idempotent."""
    roles = seed_roles()
    email = current_app.config['DEFAULT_ADMIN_EMAIL']
    admin = User.query.filter_by(email=email).first()
    if admin is None:
        admin = User(email=email, first_name='System', last_name='Administrator',
                     role='admin', role_details=roles['Administrator'], must_change_password=True)
        admin.set_password(current_app.config['DEFAULT_ADMIN_PASSWORD'])
        db.session.add(admin)
        db.session.commit()
        logger.warning(f"Default administrator {email} created; change the password on first login")
    return admin
