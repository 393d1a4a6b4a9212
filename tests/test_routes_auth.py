from conftest import make_user
from helpdesk.models import AuditLog


def test_login_and_current_user(client, manager_user):
    resp = client.post('/api/auth/login', json={'email': 'Manager@Example.com', 'password': 'password123'})
    assert resp.status_code == 200
    user = resp.get_json()['user']
    assert user['email'] == 'manager@example.com'
    assert user['permissions']['canManageUsers'] is True
    assert user['permissions']['canManageRoles'] is False

    me = client.get('/api/auth/user').get_json()
    assert me['id'] == manager_user.id
    assert me['roleDetails']['name'] == 'User Manager'


def test_login_wrong_password(client, manager_user):
    resp = client.post('/api/auth/login', json={'email': 'manager@example.com', 'password': 'nope'})
    assert resp.status_code == 401
    assert AuditLog.query.filter_by(action='FAILED_LOGIN', success=False).count() == 1


def test_login_unknown_user(client):
    resp = client.post('/api/auth/login', json={'email': 'ghost@example.com', 'password': 'x'})
    assert resp.status_code == 401


def test_login_inactive_user(client, app):
    make_user('old@example.com', status='inactive')
    resp = client.post('/api/auth/login', json={'email': 'old@example.com', 'password': 'password123'})
    assert resp.status_code == 403


def test_login_validation(client):
    resp = client.post('/api/auth/login', json={'email': 'someone@example.com'})
    assert resp.status_code == 400
    assert 'password' in resp.get_json()['errors']


def test_roleless_user_has_null_permissions(client, roleless_user):
    client.post('/api/auth/login', json={'email': 'nobody@example.com', 'password': 'password123'})
    assert client.get('/api/auth/user').get_json()['permissions'] is None


def test_logout(client, manager_user):
    client.post('/api/auth/login', json={'email': 'manager@example.com', 'password': 'password123'})
    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/auth/user').status_code == 401


def test_user_requires_login(client):
    resp = client.get('/api/auth/user')
    assert resp.status_code == 401
    assert resp.get_json()['message'] == 'Authentication required.'
