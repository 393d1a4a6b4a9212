from conftest import make_user
from helpdesk.models import Role, User
from helpdesk.services.licensing.manager import activate_license

NEW_USER = {'email': 'new.agent@example.com', 'password': 'Secret123!', 'firstName': 'New', 'lastName': 'Agent'}


def test_list_users(manager_client, agent_user):
    emails = [u['email'] for u in manager_client.get('/api/users').get_json()]
    assert emails == ['agent@example.com', 'manager@example.com']


def test_list_users_forbidden(agent_client):
    assert agent_client.get('/api/users').status_code == 403


def test_create_user_within_license(manager_client, make_license_key):
    activate_license(make_license_key(users=5))
    resp = manager_client.post('/api/users', json=NEW_USER)
    assert resp.status_code == 201
    user = resp.get_json()['user']
    assert user['email'] == 'new.agent@example.com'
    assert user['mustChangePassword'] is True
    assert User.query.filter_by(email='new.agent@example.com').one().check_password('Secret123!')


def test_create_user_without_license(manager_client):
    resp = manager_client.post('/api/users', json=NEW_USER)
    assert resp.status_code == 403
    assert resp.get_json()['code'] == 'LICENSE_INVALID'


def test_create_user_over_limit(manager_client, make_license_key):
    activate_license(make_license_key(users=2))
    make_user('second@example.com')
    resp = manager_client.post('/api/users', json=NEW_USER)
    assert resp.status_code == 403
    assert resp.get_json()['code'] == 'USER_LIMIT_EXCEEDED'
    assert User.query.count() == 2


def test_inactive_users_do_not_count(manager_client, make_license_key):
    activate_license(make_license_key(users=2))
    make_user('retired@example.com', status='inactive')
    assert manager_client.post('/api/users', json=NEW_USER).status_code == 201


def test_create_user_with_role(manager_client, make_license_key, agent_user):
    activate_license(make_license_key(users=10))
    role = Role.query.filter_by(name='Agent').one()
    resp = manager_client.post('/api/users', json=dict(NEW_USER, roleId=role.id))
    assert resp.status_code == 201
    assert resp.get_json()['user']['roleDetails']['name'] == 'Agent'


def test_create_user_unknown_role(manager_client, make_license_key):
    activate_license(make_license_key(users=10))
    resp = manager_client.post('/api/users', json=dict(NEW_USER, roleId=999))
    assert resp.status_code == 400


def test_create_user_duplicate_email(manager_client, make_license_key):
    activate_license(make_license_key(users=10))
    resp = manager_client.post('/api/users', json=dict(NEW_USER, email='manager@example.com'))
    assert resp.status_code == 400
    assert resp.get_json()['code'] == 'DUPLICATE_EMAIL'


def test_create_user_validation(manager_client):
    resp = manager_client.post('/api/users', json={'email': 'not-an-email', 'password': 'short'})
    assert resp.status_code == 400
    errors = resp.get_json()['errors']
    assert 'email' in errors
    assert 'password' in errors


def test_roles_require_manage_roles(manager_client):
    assert manager_client.get('/api/roles').status_code == 403


def test_create_and_list_roles(admin_client):
    resp = admin_client.post('/api/roles', json={
        'name': 'Change Board',
        'description': 'Approves changes',
        'permissions': {'canApproveChanges': True, 'canViewCMDB': True, 'canFly': True},
    })
    assert resp.status_code == 201
    permissions = resp.get_json()['role']['permissions']
    assert permissions['canApproveChanges'] is True
    assert permissions['canViewCMDB'] is True
    assert permissions['canManageUsers'] is False

    names = [r['name'] for r in admin_client.get('/api/roles').get_json()]
    assert names == ['Change Board']

    assert admin_client.post('/api/roles', json={'name': 'Change Board'}).status_code == 400
