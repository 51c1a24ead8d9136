"""
Storefront Session Models
Per-session user slice and shopping cart persisted in the session store
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from .user import Company, User

SESSION_SCHEMA_VERSION = 1


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserState(BaseModel):
    """Authentication, profile and favorites of one browser session"""

    user: Optional[User] = None
    company: Optional[Company] = None
    is_authenticated: bool = False
    token: Optional[str] = None
    fav_products: List[str] = Field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None


class CartItem(BaseModel):
    """Product reference held in the cart"""

    id: str
    name: str
    thumb: Optional[str] = None
    price: float
    count: int = Field(default=1, ge=1)
    color: Optional[str] = None
    size: Optional[str] = None

    def same_variant(self, other: "CartItem") -> bool:
        return (self.id, self.color, self.size) == (other.id, other.color, other.size)


class CartState(BaseModel):
    cart_items: List[CartItem] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return sum(item.count for item in self.cart_items)

    @property
    def total_price(self) -> float:
        return round(sum(item.price * item.count for item in self.cart_items), 2)


class StorefrontSession(BaseModel):
    """Everything the storefront remembers about one browser session"""

    session_id: str
    user: UserState = Field(default_factory=UserState)
    cart: CartState = Field(default_factory=CartState)
    created_at: datetime = Field(default_factory=_utc_now)
    last_updated: datetime = Field(default_factory=_utc_now)
    schema_version: int = Field(default=SESSION_SCHEMA_VERSION)
