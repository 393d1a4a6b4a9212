from datetime import date, datetime, timedelta, timezone

import pytest

from helpdesk.services.licensing.keys import LicenseData, LicenseVerification
from helpdesk.services.licensing.policy import (
    days_remaining, has_user_capacity, is_license_expired, is_license_usable, parse_expiration_date,
)

EXPIRES = datetime(2030, 6, 1, tzinfo=timezone.utc)


def test_not_expired_before():
    assert is_license_expired(EXPIRES, now=EXPIRES - timedelta(seconds=1)) is False


def test_not_expired_at_equality():
    assert is_license_expired(EXPIRES, now=EXPIRES) is False


def test_expired_after():
    assert is_license_expired(EXPIRES, now=EXPIRES + timedelta(microseconds=1)) is True


def test_date_only_means_midnight_utc():
    assert parse_expiration_date('2030-06-01') == EXPIRES
    assert is_license_expired('2030-06-01', now=datetime(2030, 6, 1, 0, 0, 1, tzinfo=timezone.utc))
    assert not is_license_expired(date(2030, 6, 1), now=EXPIRES)


def test_naive_values_are_utc():
    assert parse_expiration_date('2030-06-01T00:00:00') == EXPIRES
    assert is_license_expired(EXPIRES, now=datetime(2030, 6, 2)) is True


def test_offsets_are_normalised():
    assert parse_expiration_date('2030-06-01T02:00:00+02:00') == EXPIRES
    assert parse_expiration_date('2030-06-01T00:00:00Z') == EXPIRES


@pytest.mark.parametrize('value', ['', 'tomorrow', '2030-13-01', None, 3])
def test_invalid_dates(value):
    with pytest.raises(ValueError):
        parse_expiration_date(value)


def test_days_remaining_rounds_up():
    assert days_remaining(EXPIRES, now=EXPIRES - timedelta(days=10)) == 10
    assert days_remaining(EXPIRES, now=EXPIRES - timedelta(days=9, hours=1)) == 10
    assert days_remaining(EXPIRES, now=EXPIRES - timedelta(seconds=1)) == 1
    assert days_remaining(EXPIRES, now=EXPIRES) == 0
    assert days_remaining(EXPIRES, now=EXPIRES + timedelta(days=3)) == 0


def test_user_capacity():
    assert has_user_capacity(5, 4, additional=1) is True
    assert has_user_capacity(5, 5, additional=1) is False
    assert has_user_capacity(5, 5) is True
    assert has_user_capacity(5, 6) is False
    assert has_user_capacity(None, 1000) is True


def test_usable_requires_valid_unexpired_and_capacity():
    data = LicenseData(company_name='Acme', contact_email='a@example.com',
                       expiration_date='2030-06-01', max_users=3)
    ok = LicenseVerification(valid=True, data=data)
    before = EXPIRES - timedelta(days=1)

    assert is_license_usable(ok, now=before) is True
    assert is_license_usable(ok, now=EXPIRES + timedelta(days=1)) is False
    assert is_license_usable(ok, now=before, current_users=3) is True
    assert is_license_usable(ok, now=before, current_users=3, additional_users=1) is False
    assert is_license_usable(LicenseVerification.failure('Invalid license signature'), now=before) is False
