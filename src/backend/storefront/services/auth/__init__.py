"""Authentication services - mock login and registration for the storefront"""

from .mock_auth import MockAuthService, LOGIN_FIELD_MESSAGES, REGISTRATION_FIELD_MESSAGES

__all__ = ["MockAuthService", "LOGIN_FIELD_MESSAGES", "REGISTRATION_FIELD_MESSAGES"]
