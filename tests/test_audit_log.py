import json

from helpdesk.models import AuditLog
from helpdesk.utils.audit_log import configure_audit_logger, audit_logger, log_action, mask_sensitive


def test_mask_sensitive():
    masked = mask_sensitive({'password': 'x', 'Token': 'y', 'private_key': 'z',
                             'license_key': 'k', 'email': 'a@example.com'})
    assert masked == {'password': '***', 'Token': '***', 'private_key': '***',
                      'license_key': '***', 'email': 'a@example.com'}
    assert mask_sensitive(None) is None
    assert mask_sensitive(['not', 'a', 'dict']) is None


def test_mask_sensitive_matches_compound_keys():
    masked = mask_sensitive({'smtp_password': 'p', 'API_TOKEN': 't', 'ldap_bind_password': 'l',
                             'client_secret': 's', 'support_email': 'help@example.com'})
    assert masked == {'smtp_password': '***', 'API_TOKEN': '***', 'ldap_bind_password': '***',
                      'client_secret': '***', 'support_email': 'help@example.com'}


def test_log_action_writes_row(app):
    entry = log_action('TEST_ACTION', 'Something happened', additional_info={'secret': 's', 'n': 1})
    assert entry.id is not None
    row = AuditLog.query.one()
    assert row.action == 'TEST_ACTION'
    assert json.loads(row.details) == {'secret': '***', 'n': 1}
    assert row.actor_id is None


def test_log_action_records_actor(app, manager_user):
    with app.test_request_context('/'):
        from flask import g
        g._login_user = manager_user
        log_action('TEST_ACTOR', 'Actor check', subject=manager_user)
    row = AuditLog.query.filter_by(action='TEST_ACTOR').one()
    assert row.actor_id == manager_user.id
    assert row.object_type == 'User'
    assert row.object_id == str(manager_user.id)


def test_json_file_output(app, tmp_path):
    path = tmp_path / 'audit.log'
    configure_audit_logger(str(path))
    try:
        log_action('FILE_ACTION', 'Written to file', additional_info={'password': 'hunter2'})
        for handler in audit_logger.handlers:
            handler.flush()
        line = path.read_text(encoding='utf-8').strip().splitlines()[-1]
        record = json.loads(line)
        assert record['message'] == 'Written to file'
        assert record['action'] == 'FILE_ACTION'
        assert record['details'] == {'password': '***'}
        assert 'hunter2' not in line
    finally:
        for handler in list(audit_logger.handlers):
            audit_logger.removeHandler(handler)
            handler.close()


def test_db_failure_is_swallowed(app, monkeypatch):
    from helpdesk import db

    def boom():
        raise RuntimeError('database is gone')

    monkeypatch.setattr(db.session, 'commit', boom)
    assert log_action('BROKEN', 'Cannot be stored') is None
