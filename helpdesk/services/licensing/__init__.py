"""
Licensing system.

Offline-signed license keys, their verification, and the installation's
stored license with its expiry and user-limit checks.
"""

from helpdesk.services.licensing.keys import (
    LicenseData, LicenseVerification, generate_key_pair, generate_license_key,
    verify_license_key,
)
from helpdesk.services.licensing.policy import (
    days_remaining, has_user_capacity, is_license_expired, is_license_usable,
)
from helpdesk.services.licensing.manager import (
    LicenseStatus, activate_license, check_license, ensure_user_capacity,
)

__all__ = [
    'LicenseData',
    'LicenseVerification',
    'generate_key_pair',
    'generate_license_key',
    'verify_license_key',
    'days_remaining',
    'has_user_capacity',
    'is_license_expired',
    'is_license_usable',
    'LicenseStatus',
    'activate_license',
    'check_license',
    'ensure_user_capacity',
]
