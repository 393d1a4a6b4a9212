from helpdesk import db
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
import datetime


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class Role(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)

    can_create_tickets = db.Column(db.Boolean, default=False, nullable=False)
    can_update_own_tickets = db.Column(db.Boolean, default=False, nullable=False)
    can_update_all_tickets = db.Column(db.Boolean, default=False, nullable=False)
    can_close_tickets = db.Column(db.Boolean, default=False, nullable=False)
    can_view_all_tickets = db.Column(db.Boolean, default=False, nullable=False)
    can_approve_changes = db.Column(db.Boolean, default=False, nullable=False)
    can_manage_knowledgebase = db.Column(db.Boolean, default=False, nullable=False)
    can_manage_service_catalog = db.Column(db.Boolean, default=False, nullable=False)
    can_run_reports = db.Column(db.Boolean, default=False, nullable=False)
    can_manage_users = db.Column(db.Boolean, default=False, nullable=False)
    can_manage_roles = db.Column(db.Boolean, default=False, nullable=False)
    can_manage_cmdb = db.Column(db.Boolean, default=False, nullable=False)
    can_view_cmdb = db.Column(db.Boolean, default=False, nullable=False)
    is_tenant_scoped = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    users = db.relationship('User', back_populates='role_details', lazy=True)

    def __str__(self):
        return self.name

    def to_dict(self):
        from helpdesk.services.permissions import UserPermissions
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'permissions': UserPermissions.from_role(self).to_payload(),
        }


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(50))
    last_name = db.Column(db.String(50))
    password_hash = db.Column(db.String(255))
    # Legacy role: 'admin' always carries every permission
    role = db.Column(db.String(20), default='user', nullable=False)
    role_id = db.Column(db.Integer, db.ForeignKey('role.id'), nullable=True)
    customer_id = db.Column(db.String(64), nullable=True, index=True)
    status = db.Column(db.String(20), default='active', nullable=False)  # 'active', 'inactive'
    must_change_password = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    role_details = db.relationship('Role', back_populates='users')

    def __str__(self):
        return self.email

    @property
    def is_active(self):
        return self.status == 'active'

    @property
    def full_name(self):
        parts = [p for p in (self.first_name, self.last_name) if p]
        return ' '.join(parts) or self.email

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'name': self.full_name,
            'role': self.role,
            'roleId': self.role_id,
            'customerId': self.customer_id,
            'status': self.status,
            'mustChangePassword': self.must_change_password,
            'roleDetails': {
                'id': self.role_details.id,
                'name': self.role_details.name,
                'description': self.role_details.description,
            } if self.role_details else None,
        }


class SystemSetting(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False, index=True)
    value = db.Column(db.Text)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __str__(self):
        return f"{self.key}={self.value!r}"

    def to_dict(self):
        return {
            'key': self.key,
            'value': self.value,
            'updatedAt': self.updated_at.isoformat() + 'Z' if self.updated_at else None,
        }


class License(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    license_key = db.Column(db.Text, nullable=False)
    company_name = db.Column(db.String(255), nullable=False)
    contact_email = db.Column(db.String(255), nullable=False)
    expiration_date = db.Column(db.DateTime, nullable=False)  # naive UTC
    max_users = db.Column(db.Integer, nullable=False)
    features = db.Column(db.JSON, default=list)
    is_active = db.Column(db.Boolean, default=False, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __str__(self):
        return f"License {self.id}: {self.company_name} ({self.max_users} users)"

    def to_dict(self):
        return {
            'id': self.id,
            'licenseKey': self.license_key,
            'companyName': self.company_name,
            'contactEmail': self.contact_email,
            'expirationDate': self.expiration_date.isoformat() + 'Z',
            'maxUsers': self.max_users,
            'features': list(self.features or []),
            'isActive': self.is_active,
            'createdAt': self.created_at.isoformat() + 'Z' if self.created_at else None,
        }


class AuditLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.Integer, nullable=True, index=True)
    actor_role = db.Column(db.String(20))
    ip = db.Column(db.String(45))
    action = db.Column(db.String(100), nullable=False, index=True)
    object_type = db.Column(db.String(100))
    object_id = db.Column(db.String(64))
    details = db.Column(db.Text)
    success = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    def __str__(self):
        return f"{self.created_at} {self.action}"
