"""
Installation license management.

Stores activated licenses, reports the current license status and enforces
the licensed user count. Keys are verified with the configured public key on
activation and again whenever the status is computed, so an edited database
row cannot extend a license.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import current_app

from helpdesk import db
from helpdesk.exceptions import (
    InvalidLicenseKeyError, LicenseExpiredError, LicenseInvalidError,
    LicenseNotFoundError, UserLimitExceededError,
)
from helpdesk.models import License, User
from helpdesk.services.licensing.keys import normalize_license_key, verify_license_key
from helpdesk.services.licensing.policy import (
    days_remaining, has_user_capacity, is_license_expired,
)
from helpdesk.utils.audit_log import log_action

logger = logging.getLogger(__name__)


@dataclass
class LicenseStatus:
    is_valid: bool
    is_expired: bool
    days_remaining: Optional[int]
    max_users: Optional[int]
    current_users: int
    features: List[str] = field(default_factory=list)
    message: str = ''
    company_name: Optional[str] = None
    expiration_date: Optional[datetime] = None
    # missing | unverified | expired | user_limit, None when valid
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isValid': self.is_valid,
            'isExpired': self.is_expired,
            'daysRemaining': self.days_remaining,
            'maxUsers': self.max_users,
            'currentUsers': self.current_users,
            'features': self.features,
            'message': self.message,
            'companyName': self.company_name,
            'expirationDate': self.expiration_date.isoformat() + 'Z' if self.expiration_date else None,
        }


def _public_key() -> Optional[str]:
    return current_app.config.get('LICENSE_PUBLIC_KEY')


def count_active_users() -> int:
    return User.query.filter_by(status='active').count()


def get_active_license() -> Optional[License]:
    return (License.query
            .filter_by(is_active=True)
            .order_by(License.created_at.desc(), License.id.desc())
            .first())


def list_licenses() -> List[License]:
    return License.query.order_by(License.created_at.desc(), License.id.desc()).all()


def check_license(now: Optional[datetime] = None) -> LicenseStatus:
    """
    Evaluate the active license against signature, expiry and user count.

    Expiry, user limit and features come from the signed claims, never from
    the stored row.
    """
    current_users = count_active_users()
    active = get_active_license()
    if active is None:
        return LicenseStatus(
            is_valid=False, is_expired=False, days_remaining=None, max_users=None,
            current_users=current_users, reason='missing',
            message='No active license found. Please enter a valid license key.',
        )

    verification = verify_license_key(active.license_key, _public_key())
    if not verification.valid:
        logger.error(f"Stored license {active.id} failed verification: {verification.error}")
        return LicenseStatus(is_valid=False, is_expired=False, days_remaining=None, max_users=None,
                             current_users=current_users, reason='unverified',
                             message='License signature could not be verified.')

    data = verification.data
    expires_at = data.expires_at
    base = dict(max_users=data.max_users, current_users=current_users, features=sorted(data.features),
                company_name=data.company_name, expiration_date=expires_at.replace(tzinfo=None))

    if is_license_expired(expires_at, now=now):
        return LicenseStatus(is_valid=False, is_expired=True, days_remaining=0, reason='expired',
                             message=f'License expired on {expires_at.date().isoformat()}', **base)

    remaining = days_remaining(expires_at, now=now)

    if not has_user_capacity(data.max_users, current_users):
        return LicenseStatus(
            is_valid=False, is_expired=False, days_remaining=remaining, reason='user_limit',
            message=(f'User limit exceeded. License allows {data.max_users} users, '
                     f'but {current_users} users exist.'),
            **base)

    return LicenseStatus(is_valid=True, is_expired=False, days_remaining=remaining,
                         message='License is valid', **base)


def activate_license(license_key: str, now: Optional[datetime] = None) -> License:
    """
    Verify a license key and make it the installation's only active license.

    Raises:
        InvalidLicenseKeyError: signature or format check failed
        LicenseExpiredError: the license is authentic but already expired
    """
    verification = verify_license_key(license_key, _public_key())
    if not verification.valid:
        log_action('LICENSE_ACTIVATION_FAILED', 'License activation rejected',
                   additional_info={'reason': verification.error}, success=False)
        raise InvalidLicenseKeyError(verification.error or 'Invalid license key signature')

    data = verification.data
    if is_license_expired(data.expiration_date, now=now):
        log_action('LICENSE_ACTIVATION_FAILED', f'Expired license rejected for {data.company_name}',
                   additional_info={'reason': 'expired', 'expires': data.expiration_date}, success=False)
        raise LicenseExpiredError(f'License expired on {data.expires_at.date().isoformat()}')

    # Keys are stored without grouping so the same key in another layout matches.
    stored_key = normalize_license_key(license_key)
    license_row = License.query.filter_by(license_key=stored_key).first()
    if license_row is None:
        license_row = License(
            license_key=stored_key,
            company_name=data.company_name,
            contact_email=data.contact_email,
            expiration_date=data.expires_at.replace(tzinfo=None),
            max_users=data.max_users,
            features=sorted(data.features),
        )
        db.session.add(license_row)
        db.session.flush()

    License.query.filter(License.id != license_row.id).update({'is_active': False})
    license_row.is_active = True
    db.session.commit()

    logger.info(f"License {license_row.id} activated for '{data.company_name}'")
    log_action('LICENSE_ACTIVATED', f'License activated for {data.company_name}', subject=license_row,
               additional_info={'max_users': data.max_users, 'expires': data.expiration_date})
    return license_row


def deactivate_license(license_id: int) -> License:
    license_row = db.session.get(License, license_id)
    if license_row is None:
        raise LicenseNotFoundError()
    license_row.is_active = False
    db.session.commit()
    logger.info(f"License {license_id} deactivated")
    log_action('LICENSE_DEACTIVATED', f'License {license_id} deactivated', subject=license_row)
    return license_row


def ensure_user_capacity(additional: int = 1, now: Optional[datetime] = None) -> None:
    """
    Raise unless the active license allows ``additional`` more active users.

    Raises:
        LicenseInvalidError: no usable license (missing, unverifiable or expired)
        UserLimitExceededError: the new users would not fit
    """
    if not current_app.config.get('LICENSE_ENFORCE_USER_LIMIT', True):
        return

    status = check_license(now=now)
    if status.reason in ('missing', 'unverified', 'expired'):
        raise LicenseInvalidError(status.message)

    if not has_user_capacity(status.max_users, status.current_users, additional):
        raise UserLimitExceededError(
            f'License allows {status.max_users} users and {status.current_users} are active.')
