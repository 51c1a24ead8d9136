"""
User and Company Models
Storefront accounts, company profiles and the login and registration forms
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """Roles a storefront user can act in"""

    SUPPLIER = "supplier"
    BUYER = "buyer"
    ADMIN = "admin"


class Address(BaseModel):
    street: str
    city: str
    postal_code: str
    country: str


class ContactPerson(BaseModel):
    name: str
    email: str
    phone: str
    position: str


class Company(BaseModel):
    """Company profile attached to every non-admin user"""

    id: str
    name: str
    tax_id: str
    address: Address
    contact_person: ContactPerson
    industry: str
    website: Optional[str] = None
    logo: Optional[str] = None
    verified: bool = False
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class User(BaseModel):
    """Authenticated storefront user"""

    id: str
    email: str
    name: str
    role: UserRole
    company_id: Optional[str] = None
    is_b2b_user: bool = True
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class LoginRequest(BaseModel):
    """Login form submitted by the storefront"""

    email: EmailStr
    password: str = Field(min_length=8)
    role: UserRole
    remember_me: bool = False


class RegistrationRequest(BaseModel):
    """
    B2B registration form: the person, their company and its address.

    Only supplier and buyer accounts can be registered. The website may be
    left empty; otherwise it must be an http(s) URL.
    """

    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=8)
    confirm_password: str
    role: UserRole

    company_name: str = Field(min_length=2)
    tax_id: str = Field(min_length=5)
    industry: str = Field(min_length=2)
    website: Optional[str] = None

    street: str = Field(min_length=5)
    city: str = Field(min_length=2)
    postal_code: str = Field(min_length=4)
    country: str = Field(min_length=2)

    phone: str = Field(min_length=10)
    position: str = Field(min_length=2)

    accept_terms: bool
    accept_privacy: bool

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if value != info.data.get("password"):
            raise ValueError("Passwords don't match")
        return value

    @field_validator("role")
    @classmethod
    def no_admin_signup(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("Please select your role")
        return value

    @field_validator("website")
    @classmethod
    def website_is_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not value.startswith(("http://", "https://")) or "." not in value.split("//", 1)[1]:
            raise ValueError("Please enter a valid website URL")
        return value

    @field_validator("accept_terms", "accept_privacy")
    @classmethod
    def must_accept(cls, value: bool) -> bool:
        if not value:
            raise ValueError("Consent is required")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}"


class ProfileUpdate(BaseModel):
    """Partial user profile patch"""

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    company_id: Optional[str] = None


class CompanyUpdate(BaseModel):
    """Partial company profile patch"""

    name: Optional[str] = None
    tax_id: Optional[str] = None
    address: Optional[Address] = None
    contact_person: Optional[ContactPerson] = None
    industry: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
