"""
Account API Endpoints
Login, registration, logout, profile and company edits, role switching and favorites.
Every endpoint applies the user reducer to the caller's session.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...models.session import StorefrontSession
from ...models.user import CompanyUpdate, LoginRequest, ProfileUpdate, RegistrationRequest, UserRole
from ...services.auth.mock_auth import MockAuthService
from ...services.state.user_reducer import (
    ClearError,
    LoginFailure,
    LoginStart,
    Logout,
    SwitchRole,
    ToggleFavProduct,
    UpdateCompany,
    UpdateProfile,
    user_reducer,
)
from .session_context import get_storefront_session, save_storefront_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/account", tags=["account"])

_auth_service = MockAuthService()


class RoleRequest(BaseModel):
    role: UserRole


def _account_payload(session: StorefrontSession) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        **session.user.model_dump(mode="json"),
    }


def _require_authenticated(session: StorefrontSession):
    if not session.user.is_authenticated or session.user.user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")


@router.post("/login")
async def login(request: LoginRequest, session: StorefrontSession = Depends(get_storefront_session)):
    """
    Log in with email, password and role.

    Invalid forms are rejected with 422 and one message per field before
    this handler runs.
    """
    state = user_reducer(session.user, LoginStart())
    try:
        state = user_reducer(state, _auth_service.authenticate(request))
        session.user = state
        await save_storefront_session(session)
        logger.info(f"User {state.user.id} logged in")
        return _account_payload(session)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {e}", exc_info=True)
        session.user = user_reducer(state, LoginFailure(error="Login failed"))
        await save_storefront_session(session)
        raise HTTPException(status_code=500, detail="Login failed")


@router.post("/register", status_code=201)
async def register(request: RegistrationRequest, session: StorefrontSession = Depends(get_storefront_session)):
    """
    Register a supplier or buyer account with its company profile and log it in.

    Invalid forms are rejected with 422 and one message per field.
    """
    state = user_reducer(session.user, LoginStart())
    try:
        state = user_reducer(state, _auth_service.register(request))
        session.user = state
        await save_storefront_session(session)
        logger.info(f"User {state.user.id} registered")
        return _account_payload(session)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Registration failed: {e}", exc_info=True)
        session.user = user_reducer(state, LoginFailure(error="Registration failed"))
        await save_storefront_session(session)
        raise HTTPException(status_code=500, detail="Registration failed")

@router.post("/logout")
async def logout(session: StorefrontSession = Depends(get_storefront_session)):
    try:
        session.user = user_reducer(session.user, Logout())
        await save_storefront_session(session)
        return _account_payload(session)
    except Exception as e:
        logger.error(f"Logout failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/state")
async def get_account_state(session: StorefrontSession = Depends(get_storefront_session)):
    return _account_payload(session)


@router.patch("/profile")
async def update_profile(changes: ProfileUpdate, session: StorefrontSession = Depends(get_storefront_session)):
    _require_authenticated(session)
    try:
        session.user = user_reducer(session.user, UpdateProfile(changes=changes))
        await save_storefront_session(session)
        return _account_payload(session)
    except Exception as e:
        logger.error(f"Profile update failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/company")
async def update_company(changes: CompanyUpdate, session: StorefrontSession = Depends(get_storefront_session)):
    _require_authenticated(session)
    if session.user.company is None:
        raise HTTPException(status_code=404, detail="No company profile for this account")

    try:
        session.user = user_reducer(session.user, UpdateCompany(changes=changes))
        await save_storefront_session(session)
        return _account_payload(session)
    except Exception as e:
        logger.error(f"Company update failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/role")
async def switch_role(request: RoleRequest, session: StorefrontSession = Depends(get_storefront_session)):
    """Switch role; only admins may switch, and anyone may switch to admin."""
    _require_authenticated(session)
    current_role = session.user.user.role
    if current_role != UserRole.ADMIN and request.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Only admin users can switch roles")

    session.user = user_reducer(session.user, SwitchRole(role=request.role))
    await save_storefront_session(session)
    return _account_payload(session)


@router.post("/favorites/{product_id}")
async def toggle_favorite(product_id: str, session: StorefrontSession = Depends(get_storefront_session)):
    """Add the product to favorites, or remove it if it is already there."""
    session.user = user_reducer(session.user, ToggleFavProduct(id=product_id))
    await save_storefront_session(session)
    return _account_payload(session)


@router.delete("/error")
async def clear_error(session: StorefrontSession = Depends(get_storefront_session)):
    session.user = user_reducer(session.user, ClearError())
    await save_storefront_session(session)
    return _account_payload(session)
