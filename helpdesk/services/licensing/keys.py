"""
License key issuance and verification.

A license key is a base64 envelope ``{"data": ..., "signature": ...}`` where
``data`` is the base64 of the canonical JSON claims and ``signature`` is an
RSA PKCS#1 v1.5 / SHA-256 signature over those exact bytes. The envelope is
split into dash-separated groups of four characters for copy/paste; the
dashes carry no meaning.

Signing happens offline with the vendor's private key. Installations only
ever hold the public key.
"""

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from helpdesk.exceptions import LicenseDataError, LicenseSigningError
from helpdesk.services.licensing.policy import parse_expiration_date

logger = logging.getLogger(__name__)

# Vendor verification key shipped with every installation.
DEFAULT_PUBLIC_KEY = """-----BEGIN PUBLIC KEY-----
MIIBIjANBgkqhkiG9w0BAQEFAAOCAQ8AMIIBCgKCAQEAmJLJf84pIic36aWLvRwO
qi/QQssPOxy9oU1N+zD30JUsg8Svvyf097W068U7PoCVcCsUducOX3uKxZstHO0n
5jPi24pm8o0d6K9i/eo7dGVWxYMLBH22zmAGb9GWs3pNefe7WSiHdI0wkOqftr5S
2/RtAYapeuoQZ5UwHsPQJU/7DfmLkUmvWXLt0hr5khKkQ3XqfYQ+wqKDCOxdckk2
OBRfK0qnrKKVzf5yo1utE2s8oMMDi5HybD3aYV9U/VlDQ926ntNmmff6vMawm7bX
EF6flWr8vgvK5S43kuS1bWCJUzG2Lp1WbEtgVkQrxuhMl0kl9/bVP1cBCt52ujyz
QQIDAQAB
-----END PUBLIC KEY-----
"""

GROUP_SIZE = 4
KEY_SIZE = 2048

_SEPARATORS_RE = re.compile(r'[\s-]+')
_BASE64_RE = re.compile(r'^[A-Za-z0-9+/]+={0,2}$')

PemKey = Union[str, bytes]


@dataclass(frozen=True)
class LicenseData:
    """Claims carried by a license key."""

    company_name: str
    contact_email: str
    expiration_date: str  # ISO-8601
    max_users: int
    features: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.company_name, str) or not self.company_name.strip():
            raise LicenseDataError("Company name is required")
        if not isinstance(self.contact_email, str) or not self.contact_email.strip():
            raise LicenseDataError("Contact email is required")
        if isinstance(self.max_users, bool) or not isinstance(self.max_users, int):
            raise LicenseDataError("Maximum users must be an integer")
        if self.max_users < 1:
            raise LicenseDataError("Maximum users must be at least 1")
        if not isinstance(self.expiration_date, str):
            raise LicenseDataError("Expiration date must be an ISO-8601 string")
        try:
            parse_expiration_date(self.expiration_date)
        except ValueError as e:
            raise LicenseDataError(f"Invalid expiration date {self.expiration_date!r}: {e}") from e

        features = self.features
        if features is None:
            features = frozenset()
        elif isinstance(features, str) or not all(isinstance(f, str) for f in features):
            raise LicenseDataError("Features must be a collection of strings")
        object.__setattr__(self, 'features', frozenset(features))

    @property
    def expires_at(self) -> datetime:
        return parse_expiration_date(self.expiration_date)

    def to_claims(self) -> Dict[str, Any]:
        """Claims in canonical key order."""
        return {
            'company': self.company_name,
            'email': self.contact_email,
            'expires': self.expiration_date,
            'users': self.max_users,
            'features': sorted(self.features),
        }

    def canonical_json(self) -> str:
        return json.dumps(self.to_claims(), separators=(',', ':'), ensure_ascii=False)

    @classmethod
    def from_claims(cls, claims: Any) -> 'LicenseData':
        if not isinstance(claims, dict):
            raise LicenseDataError("License claims must be a JSON object")
        missing = [k for k in ('company', 'email', 'expires', 'users') if k not in claims]
        if missing:
            raise LicenseDataError(f"License claims missing: {', '.join(missing)}")
        return cls(
            company_name=claims['company'],
            contact_email=claims['email'],
            expiration_date=claims['expires'],
            max_users=claims['users'],
            features=claims.get('features') or frozenset(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'companyName': self.company_name,
            'contactEmail': self.contact_email,
            'expirationDate': self.expiration_date,
            'maxUsers': self.max_users,
            'features': sorted(self.features),
        }


@dataclass(frozen=True)
class LicenseVerification:
    """Outcome of :func:`verify_license_key`."""

    valid: bool
    data: Optional[LicenseData] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> 'LicenseVerification':
        return cls(valid=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        result = {'valid': self.valid}
        if self.data is not None:
            result['data'] = self.data.to_dict()
        if self.error is not None:
            result['error'] = self.error
        return result


def _as_bytes(value: PemKey) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    if isinstance(value, bytes):
        return value
    raise TypeError(f"expected PEM text, got {type(value).__name__}")


def load_private_key(private_key: PemKey) -> rsa.RSAPrivateKey:
    """
    Load an unencrypted PEM RSA private key.

    Raises:
        LicenseSigningError: if the key is malformed, encrypted or not RSA
    """
    try:
        key = serialization.load_pem_private_key(_as_bytes(private_key), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise LicenseSigningError(f"Invalid private key: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise LicenseSigningError("License signing requires an RSA private key")
    return key


def load_public_key(public_key: PemKey) -> rsa.RSAPublicKey:
    """Load a PEM RSA public key. Raises ValueError on anything else."""
    try:
        key = serialization.load_pem_public_key(_as_bytes(public_key))
    except (TypeError, UnsupportedAlgorithm) as e:
        raise ValueError(f"Invalid public key: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError("License verification requires an RSA public key")
    return key


def format_license_key(raw: str) -> str:
    """Split a raw key into dash-separated groups of four characters."""
    return '-'.join(raw[i:i + GROUP_SIZE] for i in range(0, len(raw), GROUP_SIZE))


def normalize_license_key(license_key: Any) -> str:
    """
    Strip grouping dashes and whitespace and check the result is well-formed
    base64 before any decoding is attempted.

    Raises:
        ValueError: describing the structural problem
    """
    if not isinstance(license_key, str):
        raise ValueError("license key must be text")
    cleaned = _SEPARATORS_RE.sub('', license_key)
    if not cleaned:
        raise ValueError("license key is empty")
    if len(cleaned) % 4:
        raise ValueError(f"license key has unexpected length {len(cleaned)}")
    if not _BASE64_RE.match(cleaned):
        raise ValueError("license key contains unexpected characters")
    return cleaned


def generate_license_key(license_data: LicenseData, private_key: PemKey) -> str:
    """
    Sign ``license_data`` and return the formatted license key.

    Args:
        license_data: Claims to sign
        private_key: PEM encoded RSA private key (never stored or logged)

    Returns:
        License key as dash-separated groups

    Raises:
        LicenseSigningError: if the private key cannot be used
    """
    key = load_private_key(private_key)
    payload = license_data.canonical_json().encode('utf-8')
    signature = key.sign(payload, padding.PKCS1v15(), hashes.SHA256())

    envelope = {
        'data': base64.b64encode(payload).decode('ascii'),
        'signature': base64.b64encode(signature).decode('ascii'),
    }
    raw = base64.b64encode(json.dumps(envelope, separators=(',', ':')).encode('utf-8')).decode('ascii')

    logger.info(f"Generated license key for '{license_data.company_name}' "
                f"({license_data.max_users} users, expires {license_data.expiration_date})")
    return format_license_key(raw)


def _decode_envelope(cleaned: str) -> Tuple[bytes, bytes]:
    envelope = json.loads(base64.b64decode(cleaned, validate=True).decode('utf-8'))
    if not isinstance(envelope, dict):
        raise ValueError("license envelope is not an object")
    data_b64 = envelope.get('data')
    signature_b64 = envelope.get('signature')
    if not isinstance(data_b64, str) or not isinstance(signature_b64, str):
        raise ValueError("license envelope is missing data or signature")
    return base64.b64decode(data_b64, validate=True), base64.b64decode(signature_b64, validate=True)


def _verify(license_key: Any, public_key: Optional[PemKey]) -> LicenseVerification:
    try:
        cleaned = normalize_license_key(license_key)
        payload, signature = _decode_envelope(cleaned)
    except (ValueError, binascii.Error) as e:
        return LicenseVerification.failure(f"License key format error: {e}")

    try:
        key = load_public_key(public_key or DEFAULT_PUBLIC_KEY)
    except ValueError as e:
        logger.error(f"License verification key could not be loaded: {e}")
        return LicenseVerification.failure("License verification key is misconfigured")

    try:
        key.verify(signature, payload, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return LicenseVerification.failure("Invalid license signature")

    try:
        data = LicenseData.from_claims(json.loads(payload.decode('utf-8')))
    except ValueError as e:
        return LicenseVerification.failure(f"License data error: {e}")

    return LicenseVerification(valid=True, data=data)


def verify_license_key(license_key: Any, public_key: Optional[PemKey] = None) -> LicenseVerification:
    """
    Check that ``license_key`` was signed by the vendor and extract its claims.

    Never raises: every failure is reported through ``error``. Expiry is not
    checked here, see :func:`helpdesk.services.licensing.policy.is_license_expired`.

    Args:
        license_key: Key as entered by the user (dashes and whitespace allowed)
        public_key: PEM RSA public key; defaults to the embedded vendor key
    """
    try:
        return _verify(license_key, public_key)
    except Exception as e:
        logger.exception("Unexpected error verifying license key")
        return LicenseVerification.failure(f"License verification failed: {e}")


def generate_key_pair(key_size: int = KEY_SIZE) -> Tuple[str, str]:
    """
    Create a new vendor key pair.

    Returns:
        (private_pem, public_pem): PKCS#8 private key and SubjectPublicKeyInfo public key
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode('ascii')
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode('ascii')
    return private_pem, public_pem
