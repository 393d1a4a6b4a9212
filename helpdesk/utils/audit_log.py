"""
Audit logging for security relevant operations.

Every entry is written twice: as a JSON line through the ``helpdesk.audit``
logger (optionally to ``AUDIT_LOG_FILE``) and as a compact ``AuditLog`` row
for quick queries from the admin UI.
"""

import json
import logging
import os
from datetime import datetime, timezone

from flask import has_request_context, request
from flask_login import current_user
from pythonjsonlogger.json import JsonFormatter

from helpdesk import db

AUDIT_LOGGER_NAME = 'helpdesk.audit'
SENSITIVE_KEYS = ('password', 'token', 'secret', 'private_key', 'license_key')
MASK = '***'

audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)


def configure_audit_logger(path=None):
    """Attach a JSON-lines file handler to the audit logger (once per path)."""
    audit_logger.setLevel(logging.INFO)
    if not path:
        return
    for handler in audit_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(path):
            return
    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setFormatter(JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'asctime': 'timestamp'},
        json_ensure_ascii=False,
    ))
    audit_logger.addHandler(handler)


def mask_sensitive(info):
    if not isinstance(info, dict):
        return None
    masked = {}
    for k, v in info.items():
        name = str(k).lower()
        if any(s in name for s in SENSITIVE_KEYS):
            masked[k] = MASK
        else:
            masked[k] = v
    return masked


def _actor():
    if current_user and getattr(current_user, 'is_authenticated', False):
        return current_user.id, getattr(current_user, 'role', None)
    return None, None


def _build_log_record(action, description, subject=None, additional_info=None, success=True):
    actor_id, actor_role = _actor()
    record = {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'action': action,
        'description': description,
        'actor_id': actor_id,
        'actor_role': actor_role,
        'ip': request.remote_addr if has_request_context() else None,
        'subject_type': None,
        'subject_id': None,
        'details': mask_sensitive(additional_info),
        'success': bool(success),
    }
    if subject is not None:
        record['subject_type'] = subject.__class__.__name__
        record['subject_id'] = getattr(subject, 'id', None)
    return record


def log_action_db(record):
    """Store a short audit row. Failures are logged and rolled back."""
    try:
        from helpdesk.models import AuditLog
        entry = AuditLog(
            actor_id=record['actor_id'],
            actor_role=record['actor_role'],
            ip=record['ip'],
            action=record['action'],
            object_type=record['subject_type'],
            object_id=str(record['subject_id']) if record['subject_id'] is not None else None,
            details=json.dumps(record['details'], ensure_ascii=False, default=str)
            if record['details'] is not None else None,
            success=record['success'],
        )
        db.session.add(entry)
        db.session.commit()
        return entry
    except Exception:
        audit_logger.exception('Failed to write DB audit entry')
        db.session.rollback()
        return None


def log_action(action: str, description: str, subject=None, additional_info: dict = None, success: bool = True):
    """Generic audit action writer.

    Example: log_action('USER_CREATED', 'Created user', subject=user, additional_info={'email': user.email})
    """
    record = _build_log_record(action, description, subject=subject,
                               additional_info=additional_info, success=success)
    audit_logger.info(description, extra={k: v for k, v in record.items() if k not in ('description', 'timestamp')})
    return log_action_db(record)


def log_failed_login(email: str):
    log_action('FAILED_LOGIN', f'Failed login attempt for {email}',
               additional_info={'email': email}, success=False)
