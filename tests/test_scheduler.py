import logging
from datetime import datetime, timedelta, timezone

from helpdesk.models import AuditLog
from helpdesk.services.licensing.manager import activate_license
from helpdesk.utils.scheduler import check_license_expiry


def test_no_license_is_reported(app, caplog):
    with caplog.at_level(logging.WARNING, logger='helpdesk.utils.scheduler'):
        status = check_license_expiry(app)
    assert status.is_valid is False
    assert 'No active license' in caplog.text


def test_warns_close_to_expiry(app, make_license_key, caplog):
    expires = (datetime.now(timezone.utc) + timedelta(days=10)).date().isoformat()
    activate_license(make_license_key(expires=expires))
    with caplog.at_level(logging.WARNING, logger='helpdesk.utils.scheduler'):
        status = check_license_expiry(app)
    assert status.is_valid
    assert 'expires in' in caplog.text
    assert AuditLog.query.filter_by(action='LICENSE_EXPIRING').count() == 1


def test_quiet_when_far_from_expiry(app, make_license_key):
    activate_license(make_license_key())
    check_license_expiry(app)
    assert AuditLog.query.filter_by(action='LICENSE_EXPIRING').count() == 0


def test_expired_license_is_audited(app, make_license_key, caplog):
    activate_license(make_license_key(expires='2031-01-01'))
    with caplog.at_level(logging.ERROR, logger='helpdesk.utils.scheduler'):
        status = check_license_expiry(app, now=datetime(2031, 3, 1, tzinfo=timezone.utc))
    assert status.is_expired
    assert 'License expired on 2031-01-01' in caplog.text
    assert AuditLog.query.filter_by(action='LICENSE_EXPIRED', success=False).count() == 1
