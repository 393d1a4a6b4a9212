from helpdesk.models import License
from helpdesk.services.licensing.manager import activate_license


def test_status_without_license(client):
    resp = client.get('/api/licenses/status')
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['active'] is False
    assert data['isValid'] is False
    assert data['maxUsers'] is None


def test_activate(client, make_license_key):
    resp = client.post('/api/licenses/activate', json={'licenseKey': make_license_key(users=20)})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['license']['maxUsers'] == 20
    assert data['status']['isValid'] is True

    status = client.get('/api/licenses/status').get_json()
    assert status['active'] is True
    assert status['companyName'] == 'Acme Corp'
    assert status['isExpired'] is False


def test_activate_rejects_forged_key(client, make_license_key, other_keypair):
    resp = client.post('/api/licenses/activate',
                       json={'licenseKey': make_license_key(private_key=other_keypair[0])})
    assert resp.status_code == 400
    assert resp.get_json()['code'] == 'INVALID_LICENSE_KEY'
    assert License.query.count() == 0


def test_activate_rejects_expired_key(client, make_license_key):
    resp = client.post('/api/licenses/activate', json={'licenseKey': make_license_key(expires='2021-03-01')})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['code'] == 'LICENSE_EXPIRED'
    assert '2021-03-01' in body['message']


def test_activate_requires_key(client):
    resp = client.post('/api/licenses/activate', json={})
    assert resp.status_code == 400
    assert 'licenseKey' in resp.get_json()['errors']


def test_list_requires_manage_users(agent_client):
    assert agent_client.get('/api/licenses').status_code == 403


def test_list_and_deactivate(manager_client, make_license_key):
    row = activate_license(make_license_key())
    listing = manager_client.get('/api/licenses').get_json()
    assert [item['id'] for item in listing] == [row.id]

    resp = manager_client.post(f'/api/licenses/{row.id}/deactivate')
    assert resp.status_code == 200
    assert resp.get_json()['license']['isActive'] is False

    assert manager_client.post('/api/licenses/999/deactivate').status_code == 404
