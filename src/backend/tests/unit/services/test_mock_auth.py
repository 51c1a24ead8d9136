"""
Unit tests for the mock authentication service
"""

import pytest
from pydantic import ValidationError

from storefront.models.user import LoginRequest, RegistrationRequest, UserRole
from storefront.services.auth.mock_auth import MockAuthService


@pytest.fixture
def auth_service():
    return MockAuthService(clock=lambda: 1718000000.5)


@pytest.mark.unit
class TestMockAuthService:
    def test_buyer_gets_company(self, auth_service):
        result = auth_service.authenticate(
            LoginRequest(email="anna.buyer@example.com", password="secret123", role=UserRole.BUYER)
        )

        assert result.user.id == "user-1718000000500"
        assert result.user.name == "anna.buyer"
        assert result.user.role == UserRole.BUYER
        assert result.company.id == "company-1718000000500"
        assert result.user.company_id == result.company.id
        assert result.company.contact_person.position == "Procurement Manager"
        assert result.token == "mock-jwt-token-1718000000500"

    def test_supplier_company_profile(self, auth_service):
        result = auth_service.authenticate(
            LoginRequest(email="sam@supplier.example.com", password="secret123", role=UserRole.SUPPLIER)
        )

        assert result.company.industry == "Manufacturing"
        assert result.company.contact_person.position == "Sales Manager"

    def test_admin_has_no_company(self, auth_service):
        result = auth_service.authenticate(
            LoginRequest(email="root@example.com", password="secret123", role=UserRole.ADMIN)
        )

        assert result.company is None
        assert result.user.company_id is None


def registration_form(**overrides):
    form = {
        "first_name": "Anna",
        "last_name": "Becker",
        "email": "anna.becker@example.com",
        "password": "secret123",
        "confirm_password": "secret123",
        "role": "buyer",
        "company_name": "Becker Bau GmbH",
        "tax_id": "DE987654321",
        "industry": "Construction",
        "website": "",
        "street": "Hauptstrasse 12",
        "city": "Hamburg",
        "postal_code": "20095",
        "country": "Germany",
        "phone": "+49 40 1234567",
        "position": "Head of Procurement",
        "accept_terms": True,
        "accept_privacy": True,
    }
    form.update(overrides)
    return form


def _invalid_fields(error: ValidationError):
    return {str(err["loc"][0]) for err in error.errors()}


@pytest.mark.unit
class TestRegistration:
    def test_register_builds_unverified_company(self, auth_service):
        result = auth_service.register(RegistrationRequest(**registration_form()))

        assert result.user.name == "Anna Becker"
        assert result.user.role == UserRole.BUYER
        assert result.user.company_id == result.company.id == "company-1718000000500"
        assert result.company.name == "Becker Bau GmbH"
        assert result.company.address.city == "Hamburg"
        assert result.company.contact_person.position == "Head of Procurement"
        assert result.company.verified is False
        assert result.company.website is None
        assert result.token == "mock-jwt-token-1718000000500"

    def test_website_kept_when_valid(self, auth_service):
        result = auth_service.register(RegistrationRequest(**registration_form(website="https://becker-bau.de")))

        assert result.company.website == "https://becker-bau.de"

    def test_password_mismatch_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            RegistrationRequest(**registration_form(confirm_password="secret124"))

        assert _invalid_fields(exc_info.value) == {"confirm_password"}

    def test_admin_cannot_register(self):
        with pytest.raises(ValidationError) as exc_info:
            RegistrationRequest(**registration_form(role="admin"))

        assert _invalid_fields(exc_info.value) == {"role"}

    @pytest.mark.parametrize(
        "field,value",
        [
            ("first_name", "A"),
            ("email", "not-an-email"),
            ("tax_id", "DE1"),
            ("website", "becker-bau"),
            ("postal_code", "123"),
            ("phone", "12345"),
            ("accept_terms", False),
            ("accept_privacy", False),
        ],
    )
    def test_invalid_field_rejected(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            RegistrationRequest(**registration_form(**{field: value}))

        assert field in _invalid_fields(exc_info.value)
