"""
User Reducer

Pure state transitions for the user slice of a storefront session:
authentication lifecycle, profile and company edits, role switching,
favorites and loading/error flags.

Usage:
    from storefront.services.state import user_reducer, LoginStart

    state = user_reducer(state, LoginStart())

The input state is never mutated; every action returns a new UserState.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Type, Union

from pydantic import BaseModel

from ...models.session import UserState
from ...models.user import Company, CompanyUpdate, ProfileUpdate, User, UserRole

logger = logging.getLogger(__name__)


# ============================================================================
# Actions
# ============================================================================

class LoginStart(BaseModel):
    pass


class LoginSuccess(BaseModel):
    user: User
    company: Optional[Company] = None
    token: Optional[str] = None


class LoginFailure(BaseModel):
    error: str


class Logout(BaseModel):
    pass


class UpdateProfile(BaseModel):
    changes: ProfileUpdate


class UpdateCompany(BaseModel):
    changes: CompanyUpdate


class SwitchRole(BaseModel):
    role: UserRole


class ToggleFavProduct(BaseModel):
    id: str


class ClearError(BaseModel):
    pass


class SetLoading(BaseModel):
    is_loading: bool


UserAction = Union[
    LoginStart, LoginSuccess, LoginFailure, Logout, UpdateProfile,
    UpdateCompany, SwitchRole, ToggleFavProduct, ClearError, SetLoading,
]


# ============================================================================
# Handlers
# ============================================================================

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _login_start(state: UserState, action: LoginStart) -> UserState:
    state.is_loading = True
    state.error = None
    return state


def _login_success(state: UserState, action: LoginSuccess) -> UserState:
    state.is_loading = False
    state.is_authenticated = True
    state.user = action.user
    state.company = action.company
    state.token = action.token
    state.error = None
    return state


def _login_failure(state: UserState, action: LoginFailure) -> UserState:
    state.is_loading = False
    state.is_authenticated = False
    state.user = None
    state.company = None
    state.token = None
    state.error = action.error
    return state


def _logout(state: UserState, action: Logout) -> UserState:
    state.user = None
    state.company = None
    state.is_authenticated = False
    state.token = None
    state.error = None
    state.fav_products = []
    return state


def _update_profile(state: UserState, action: UpdateProfile) -> UserState:
    if state.user is None:
        return state

    changes = action.changes.model_dump(exclude_unset=True, exclude_none=True)
    state.user = state.user.model_copy(update={**changes, "updated_at": _now()})
    return state


def _update_company(state: UserState, action: UpdateCompany) -> UserState:
    if state.company is None:
        return state

    changes = action.changes.model_dump(exclude_unset=True, exclude_none=True)
    # Nested models are dumped to dicts; revalidate to keep Company typed
    merged = {**state.company.model_dump(), **changes, "updated_at": _now()}
    state.company = Company.model_validate(merged)
    return state


def _switch_role(state: UserState, action: SwitchRole) -> UserState:
    if state.user is None:
        return state

    # Admins may take any role; anyone may switch to admin
    if state.user.role == UserRole.ADMIN or action.role == UserRole.ADMIN:
        state.user = state.user.model_copy(update={"role": action.role})
    else:
        logger.info(f"Role switch to {action.role.value} ignored for non-admin user {state.user.id}")
    return state


def _toggle_fav_product(state: UserState, action: ToggleFavProduct) -> UserState:
    if action.id in state.fav_products:
        state.fav_products = [pid for pid in state.fav_products if pid != action.id]
    else:
        state.fav_products = [*state.fav_products, action.id]
    return state


def _clear_error(state: UserState, action: ClearError) -> UserState:
    state.error = None
    return state


def _set_loading(state: UserState, action: SetLoading) -> UserState:
    state.is_loading = action.is_loading
    return state


_HANDLERS: Dict[Type[BaseModel], Callable[[UserState, BaseModel], UserState]] = {
    LoginStart: _login_start,
    LoginSuccess: _login_success,
    LoginFailure: _login_failure,
    Logout: _logout,
    UpdateProfile: _update_profile,
    UpdateCompany: _update_company,
    SwitchRole: _switch_role,
    ToggleFavProduct: _toggle_fav_product,
    ClearError: _clear_error,
    SetLoading: _set_loading,
}


def user_reducer(state: Optional[UserState], action: UserAction) -> UserState:
    """
    Apply an action to the user slice.

    Args:
        state: Current user state (None means the initial state)
        action: One of the user action models

    Returns:
        New UserState; the given state is left untouched

    Raises:
        ValueError: If the action type is unknown
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise ValueError(f"Unknown user action: {type(action).__name__}")

    base = state if state is not None else UserState()
    return handler(base.model_copy(deep=True), action)
