"""
Standardized API messages for the application.
All messages use consistent formatting and are translatable.
"""

from flask_babel import lazy_gettext as _

# Generic
ERROR_NOT_FOUND = _("%(item)s not found.")
ERROR_PERMISSION_DENIED = _("You do not have permission to perform this action.")
ERROR_INVALID_INPUT = _("Invalid input provided.")
ERROR_DUPLICATE = _("%(item)s already exists.")
ERROR_MODULE_DISABLED = _("This module is not enabled.")

# Auth messages
AUTH_LOGIN_REQUIRED = _("Authentication required.")
AUTH_LOGIN_SUCCESS = _("Login successful!")
AUTH_INVALID_CREDENTIALS = _("Invalid email or password. Please try again.")
AUTH_ACCOUNT_INACTIVE = _("This account is inactive.")
AUTH_LOGOUT_SUCCESS = _("You have been logged out.")

# License messages
LICENSE_ACTIVATED = _("License activated successfully.")
LICENSE_DEACTIVATED = _("License has been deactivated.")
LICENSE_GENERATOR_DISABLED = _("License generation is not available on this installation.")

# Settings
SETTING_UPDATED = _("Setting %(key)s has been updated.")
SETTING_DELETED = _("Setting %(key)s has been deleted.")
MODULE_UPDATED = _("Module %(name)s has been updated.")

# Users and roles
USER_ADDED = _("User %(email)s has been created successfully.")
ROLE_ADDED = _("Role %(name)s has been created successfully.")
