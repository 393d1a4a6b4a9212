import os
from datetime import datetime, timedelta, timezone

import pytest
from flask import g

os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'

from helpdesk import create_app, db  # noqa: E402
from helpdesk.models import Role, User  # noqa: E402
from helpdesk.services.licensing.keys import LicenseData, generate_key_pair, generate_license_key  # noqa: E402
from helpdesk.services.permissions import PERMISSION_FIELDS  # noqa: E402


@pytest.fixture(scope='session')
def keypair():
    """Vendor key pair used to sign test licenses (private_pem, public_pem)."""
    return generate_key_pair()


@pytest.fixture(scope='session')
def other_keypair():
    return generate_key_pair()


@pytest.fixture
def app(keypair):
    """Create and configure a test app."""
    app = create_app(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI='sqlite:///:memory:',
        WTF_CSRF_ENABLED=False,
        RATELIMIT_ENABLED=False,
        SCHEDULER_ENABLED=False,
        LICENSE_PUBLIC_KEY=keypair[1],
    )

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


def future(days=365):
    return (datetime.now(timezone.utc) + timedelta(days=days)).date().isoformat()


@pytest.fixture
def make_license_key(keypair):
    """Factory signing a license with the test vendor key."""
    def _make(company='Acme Corp', email='it@acme.example', expires=None, users=5,
              features=('cmdb',), private_key=None):
        data = LicenseData(company_name=company, contact_email=email,
                           expiration_date=expires or future(), max_users=users,
                           features=frozenset(features))
        return generate_license_key(data, private_key or keypair[0])
    return _make


def make_role(name, *grants):
    role = Role(name=name, description=f'{name} role')
    for field in PERMISSION_FIELDS:
        setattr(role, field, field in grants)
    db.session.add(role)
    db.session.commit()
    return role


def make_user(email, role='user', role_details=None, status='active', password='password123'):
    user = User(email=email, role=role, role_details=role_details, status=status)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_user(app):
    """Legacy administrator: every permission."""
    return make_user('admin@example.com', role='admin')


@pytest.fixture
def manager_user(app):
    role = make_role('User Manager', 'can_manage_users', 'can_run_reports')
    return make_user('manager@example.com', role_details=role)


@pytest.fixture
def agent_user(app):
    role = make_role('Agent', 'can_create_tickets', 'can_view_all_tickets', 'can_view_cmdb')
    return make_user('agent@example.com', role_details=role)


@pytest.fixture
def customer_user(app):
    role = make_role('Customer', 'can_create_tickets', 'is_tenant_scoped')
    user = make_user('customer@example.com', role_details=role)
    user.customer_id = 'cust-42'
    db.session.commit()
    return user


@pytest.fixture
def roleless_user(app):
    return make_user('nobody@example.com')


def login(client, user):
    """Log ``user`` in by writing the Flask-Login session directly."""
    g.pop('_login_user', None)
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def admin_client(client, admin_user):
    return login(client, admin_user)


@pytest.fixture
def manager_client(client, manager_user):
    return login(client, manager_user)


@pytest.fixture
def agent_client(client, agent_user):
    return login(client, agent_user)
