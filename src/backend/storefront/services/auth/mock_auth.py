"""
Mock authentication for the storefront login form.

There is no identity provider yet: any well-formed login succeeds and gets
a generated user, a company profile (for non-admin roles) and a token.
Registration builds the user and an unverified company from the form.
"""

import logging
import time
from typing import Callable, Dict, Optional

from ...models.user import Address, Company, ContactPerson, LoginRequest, RegistrationRequest, User, UserRole
from ..state.user_reducer import LoginSuccess

logger = logging.getLogger(__name__)

# Per-field messages returned when the login form fails validation
LOGIN_FIELD_MESSAGES: Dict[str, str] = {
    "email": "Please enter a valid email address",
    "password": "Password must be at least 8 characters",
    "role": "Please select your role",
}

# Per-field messages returned when the registration form fails validation
REGISTRATION_FIELD_MESSAGES: Dict[str, str] = {
    "first_name": "First name must be at least 2 characters",
    "last_name": "Last name must be at least 2 characters",
    "email": "Please enter a valid email address",
    "password": "Password must be at least 8 characters",
    "confirm_password": "Passwords don't match",
    "role": "Please select your role",
    "company_name": "Company name must be at least 2 characters",
    "tax_id": "Tax ID is required",
    "industry": "Please specify your industry",
    "website": "Please enter a valid website URL",
    "street": "Please enter a valid street address",
    "city": "Please enter a valid city",
    "postal_code": "Please enter a valid postal code",
    "country": "Please select your country",
    "phone": "Please enter a valid phone number",
    "position": "Please enter your position",
    "accept_terms": "You must accept the terms and conditions",
    "accept_privacy": "You must accept the privacy policy",
}


class MockAuthService:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def _mock_company(self, user: User, role: UserRole, stamp: int) -> Optional[Company]:
        if role == UserRole.ADMIN:
            return None

        is_supplier = role == UserRole.SUPPLIER
        return Company(
            id=f"company-{stamp}",
            name="Supplier Company" if is_supplier else "Buyer Company",
            tax_id="DE123456789",
            address=Address(
                street="Sample Street 123",
                city="Berlin",
                postal_code="10115",
                country="Germany",
            ),
            contact_person=ContactPerson(
                name=user.name,
                email=user.email,
                phone="+49 30 12345678",
                position="Sales Manager" if is_supplier else "Procurement Manager",
            ),
            industry="Manufacturing" if is_supplier else "Construction",
            verified=True,
        )

    def authenticate(self, request: LoginRequest) -> LoginSuccess:
        """Build the login_success payload for a validated login form."""
        stamp = int(self._clock() * 1000)
        email = str(request.email)

        user = User(
            id=f"user-{stamp}",
            email=email,
            name=email.split("@")[0],
            role=request.role,
            is_b2b_user=True,
        )
        company = self._mock_company(user, request.role, stamp)
        if company is not None:
            user.company_id = company.id

        logger.info(f"Mock login for {user.id} as {request.role.value}")
        return LoginSuccess(user=user, company=company, token=f"mock-jwt-token-{stamp}")

    def register(self, request: RegistrationRequest) -> LoginSuccess:
        """Build the login_success payload for a validated registration form; the company starts unverified."""
        stamp = int(self._clock() * 1000)
        email = str(request.email)

        user = User(
            id=f"user-{stamp}",
            email=email,
            name=request.full_name,
            role=request.role,
            company_id=f"company-{stamp}",
            is_b2b_user=True,
        )
        company = Company(
            id=user.company_id,
            name=request.company_name,
            tax_id=request.tax_id,
            address=Address(
                street=request.street,
                city=request.city,
                postal_code=request.postal_code,
                country=request.country,
            ),
            contact_person=ContactPerson(
                name=user.name,
                email=email,
                phone=request.phone,
                position=request.position,
            ),
            industry=request.industry,
            website=request.website,
            verified=False,
        )

        logger.info(f"Mock registration for {user.id} as {request.role.value}")
        return LoginSuccess(user=user, company=company, token=f"mock-jwt-token-{stamp}")
