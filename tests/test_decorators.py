import pytest
from flask import jsonify

from conftest import login
from helpdesk.utils.decorators import module_required, page_permission_required, permission_required


@pytest.fixture
def guarded_app(app):
    @app.route('/_test/users')
    @permission_required('canManageUsers', 'canManageRoles')
    def _users():
        return jsonify({'ok': True})

    @app.route('/_test/problems')
    @module_required('problems')
    def _problems():
        return jsonify({'ok': True})

    @app.route('/_test/page')
    @page_permission_required('canRunReports', 'main.home')
    def _page():
        return jsonify({'ok': True})

    return app


def test_permission_required_unauthenticated(guarded_app, client):
    assert client.get('/_test/users').status_code == 401


def test_permission_required_forbidden(guarded_app, client, agent_user):
    login(client, agent_user)
    resp = client.get('/_test/users')
    assert resp.status_code == 403
    assert 'permission' in resp.get_json()['message']


def test_permission_required_any_of(guarded_app, client, manager_user):
    login(client, manager_user)
    assert client.get('/_test/users').status_code == 200


def test_roleless_user_is_denied(guarded_app, client, roleless_user):
    login(client, roleless_user)
    assert client.get('/_test/users').status_code == 403


def test_module_required(guarded_app, client):
    from helpdesk.services.settings_store import upsert_setting

    assert client.get('/_test/problems').status_code == 404
    upsert_setting('module_problems_enabled', 'true')
    assert client.get('/_test/problems').status_code == 200


def test_page_permission_redirects(guarded_app, client, agent_user):
    login(client, agent_user)
    resp = client.get('/_test/page')
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/')
    with client.session_transaction() as sess:
        assert sess['_flashes'][0][0] == 'danger'


def test_page_permission_allows(guarded_app, client, manager_user):
    login(client, manager_user)
    assert client.get('/_test/page').status_code == 200
