"""
Unit tests for the user reducer

Tests the authentication lifecycle, profile edits, role switching and favorites
"""

import pytest

from storefront.models.session import UserState
from storefront.models.user import Address, Company, CompanyUpdate, ContactPerson, ProfileUpdate, User, UserRole
from storefront.services.state.user_reducer import (
    ClearError,
    LoginFailure,
    LoginStart,
    LoginSuccess,
    Logout,
    SetLoading,
    SwitchRole,
    ToggleFavProduct,
    UpdateCompany,
    UpdateProfile,
    user_reducer,
)


def _user(role=UserRole.BUYER):
    return User(id="user-1", email="anna@example.com", name="anna", role=role, company_id="company-1")


def _company():
    return Company(
        id="company-1",
        name="Buyer Company",
        tax_id="DE123456789",
        address=Address(street="Sample Street 123", city="Berlin", postal_code="10115", country="Germany"),
        contact_person=ContactPerson(name="anna", email="anna@example.com", phone="+49", position="Procurement Manager"),
        industry="Construction",
    )


@pytest.fixture
def logged_in_state():
    return user_reducer(None, LoginSuccess(user=_user(), company=_company(), token="mock-jwt-token-1"))


@pytest.mark.unit
class TestAuthenticationLifecycle:
    def test_login_start_sets_loading_and_clears_error(self):
        state = user_reducer(UserState(error="old"), LoginStart())

        assert state.is_loading
        assert state.error is None

    def test_login_success(self, logged_in_state):
        assert logged_in_state.is_authenticated
        assert logged_in_state.user.id == "user-1"
        assert logged_in_state.company.id == "company-1"
        assert logged_in_state.token == "mock-jwt-token-1"
        assert not logged_in_state.is_loading

    def test_login_failure_clears_identity(self, logged_in_state):
        state = user_reducer(logged_in_state, LoginFailure(error="Login failed"))

        assert not state.is_authenticated
        assert state.user is None
        assert state.token is None
        assert state.error == "Login failed"

    def test_logout_clears_favorites(self, logged_in_state):
        state = user_reducer(logged_in_state, ToggleFavProduct(id="exc-1"))
        state = user_reducer(state, Logout())

        assert not state.is_authenticated
        assert state.user is None
        assert state.company is None
        assert state.fav_products == []

    def test_clear_error_and_set_loading(self):
        state = user_reducer(UserState(error="boom"), ClearError())
        state = user_reducer(state, SetLoading(is_loading=True))

        assert state.error is None
        assert state.is_loading


@pytest.mark.unit
class TestProfileUpdates:
    def test_update_profile_merges_changes(self, logged_in_state):
        state = user_reducer(logged_in_state, UpdateProfile(changes=ProfileUpdate(name="Anna Schmidt")))

        assert state.user.name == "Anna Schmidt"
        assert state.user.email == "anna@example.com"
        assert state.user.updated_at >= logged_in_state.user.updated_at

    def test_update_profile_without_user_is_noop(self):
        state = user_reducer(UserState(), UpdateProfile(changes=ProfileUpdate(name="Ghost")))

        assert state.user is None

    def test_update_company_keeps_nested_models(self, logged_in_state):
        new_address = Address(street="Hafenstrasse 1", city="Hamburg", postal_code="20457", country="Germany")

        state = user_reducer(
            logged_in_state,
            UpdateCompany(changes=CompanyUpdate(address=new_address, website="https://buyer.example.com")),
        )

        assert state.company.address.city == "Hamburg"
        assert state.company.website == "https://buyer.example.com"
        assert state.company.tax_id == "DE123456789"


@pytest.mark.unit
class TestRoleSwitching:
    def test_non_admin_cannot_switch_to_supplier(self, logged_in_state):
        state = user_reducer(logged_in_state, SwitchRole(role=UserRole.SUPPLIER))

        assert state.user.role == UserRole.BUYER

    def test_anyone_can_switch_to_admin(self, logged_in_state):
        state = user_reducer(logged_in_state, SwitchRole(role=UserRole.ADMIN))

        assert state.user.role == UserRole.ADMIN

    def test_admin_can_switch_to_any_role(self):
        state = user_reducer(None, LoginSuccess(user=_user(UserRole.ADMIN)))
        state = user_reducer(state, SwitchRole(role=UserRole.SUPPLIER))

        assert state.user.role == UserRole.SUPPLIER


@pytest.mark.unit
class TestFavorites:
    def test_toggle_twice_restores_favorites(self, logged_in_state):
        once = user_reducer(logged_in_state, ToggleFavProduct(id="alu-7"))
        twice = user_reducer(once, ToggleFavProduct(id="alu-7"))

        assert once.fav_products == ["alu-7"]
        assert twice.fav_products == logged_in_state.fav_products

    def test_reducer_does_not_mutate_input(self, logged_in_state):
        user_reducer(logged_in_state, ToggleFavProduct(id="alu-7"))

        assert logged_in_state.fav_products == []

    def test_unknown_action_rejected(self, logged_in_state):
        with pytest.raises(ValueError):
            user_reducer(logged_in_state, object())
