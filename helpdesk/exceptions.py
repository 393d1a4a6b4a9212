"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    status_code = 400

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class LicenseDataError(LicenseException, ValueError):
    """Raised when license claims violate the data invariants."""

    def __init__(self, message: str = "Invalid license data"):
        super().__init__(message, code="INVALID_LICENSE_DATA")


class LicenseSigningError(LicenseException):
    """Raised when a license cannot be signed (bad or unsupported private key)."""

    def __init__(self, message: str = "Unable to sign license"):
        super().__init__(message, code="LICENSE_SIGNING_FAILED")


class InvalidLicenseKeyError(LicenseException):
    """Raised when a license key fails verification."""

    def __init__(self, message: str = "Invalid license key"):
        super().__init__(message, code="INVALID_LICENSE_KEY")


class LicenseExpiredError(LicenseException):
    """Raised when a license has expired."""

    def __init__(self, message: str = "License has expired"):
        super().__init__(message, code="LICENSE_EXPIRED")


class LicenseNotFoundError(LicenseException):
    """Raised when a license is not found."""

    status_code = 404

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class LicenseInvalidError(LicenseException):
    """Raised when an action needs a usable license and none is active."""

    status_code = 403

    def __init__(self, message: str = "No valid license is active"):
        super().__init__(message, code="LICENSE_INVALID")


class UserLimitExceededError(LicenseException):
    """Raised when the licensed user count would be exceeded."""

    status_code = 403

    def __init__(self, message: str = "License user limit exceeded"):
        super().__init__(message, code="USER_LIMIT_EXCEEDED")

