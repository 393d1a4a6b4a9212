"""
License status policy.

Business rules evaluated on top of a verified license: expiry and the
licensed user count. Authenticity is checked separately in
:mod:`helpdesk.services.licensing.keys`.
"""

import math
from datetime import date, datetime, timezone
from typing import Optional, Union

DateLike = Union[str, date, datetime]


def parse_expiration_date(value: DateLike) -> datetime:
    """
    Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Date-only values mean midnight UTC of that day and naive datetimes are
    taken to be UTC.

    Raises:
        ValueError: if the value is not a valid date
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("expiration date is empty")
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
    else:
        raise ValueError(f"unsupported expiration date type: {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def is_license_expired(expiration_date: DateLike, now: Optional[datetime] = None) -> bool:
    """True iff ``now`` is strictly after the expiration instant."""
    return _now(now) > parse_expiration_date(expiration_date)


def days_remaining(expiration_date: DateLike, now: Optional[datetime] = None) -> int:
    """Whole days left before expiry, rounded up; 0 once expired."""
    delta = parse_expiration_date(expiration_date) - _now(now)
    if delta.total_seconds() <= 0:
        return 0
    return math.ceil(delta.total_seconds() / 86400)


def has_user_capacity(max_users: Optional[int], current_users: int, additional: int = 0) -> bool:
    """Whether ``current_users + additional`` fits in the licensed seat count."""
    if max_users is None:
        return True
    return current_users + additional <= max_users


def is_license_usable(verification, now: Optional[datetime] = None,
                      current_users: Optional[int] = None, additional_users: int = 0) -> bool:
    """
    A license is usable iff it verified, it has not expired and, when a user
    count is supplied, the action fits in the licensed seats.
    """
    if not verification.valid or verification.data is None:
        return False
    if is_license_expired(verification.data.expiration_date, now=now):
        return False
    if current_users is None:
        return True
    return has_user_capacity(verification.data.max_users, current_users, additional_users)
