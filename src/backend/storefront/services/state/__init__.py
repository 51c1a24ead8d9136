"""
State management services - session reducers and wizard step rules
"""

from .user_reducer import (
    user_reducer,
    LoginStart,
    LoginSuccess,
    LoginFailure,
    Logout,
    UpdateProfile,
    UpdateCompany,
    SwitchRole,
    ToggleFavProduct,
    ClearError,
    SetLoading,
)
from .cart_reducer import cart_reducer, AddProduct, RemoveProduct, SetCount, ClearCart
from .wizard_state_manager import WizardStateManager

__all__ = [
    "user_reducer",
    "LoginStart",
    "LoginSuccess",
    "LoginFailure",
    "Logout",
    "UpdateProfile",
    "UpdateCompany",
    "SwitchRole",
    "ToggleFavProduct",
    "ClearError",
    "SetLoading",
    "cart_reducer",
    "AddProduct",
    "RemoveProduct",
    "SetCount",
    "ClearCart",
    "WizardStateManager",
]
