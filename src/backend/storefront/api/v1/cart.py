"""
Cart API Endpoints
Shopping cart of the caller's session, updated through the cart reducer
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...models.session import CartItem, StorefrontSession
from ...services.state.cart_reducer import AddProduct, ClearCart, RemoveProduct, SetCount, cart_reducer
from .session_context import get_storefront_session, save_storefront_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


class CountUpdate(BaseModel):
    count: int
    color: Optional[str] = None
    size: Optional[str] = None


def _cart_payload(session: StorefrontSession) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        "cart_items": [item.model_dump(mode="json") for item in session.cart.cart_items],
        "total_count": session.cart.total_count,
        "total_price": session.cart.total_price,
    }


@router.get("")
async def get_cart(session: StorefrontSession = Depends(get_storefront_session)):
    return _cart_payload(session)


@router.post("/items")
async def add_item(item: CartItem, session: StorefrontSession = Depends(get_storefront_session)):
    session.cart = cart_reducer(session.cart, AddProduct(product=item))
    await save_storefront_session(session)
    logger.info(f"Added {item.count} x {item.id} to cart")
    return _cart_payload(session)


@router.patch("/items/{product_id}")
async def set_item_count(
    product_id: str,
    update: CountUpdate,
    session: StorefrontSession = Depends(get_storefront_session),
):
    """Set the count of a cart line; a count of zero or less removes it."""
    session.cart = cart_reducer(
        session.cart,
        SetCount(id=product_id, count=update.count, color=update.color, size=update.size),
    )
    await save_storefront_session(session)
    return _cart_payload(session)


@router.delete("/items/{product_id}")
async def remove_item(
    product_id: str,
    color: Optional[str] = None,
    size: Optional[str] = None,
    session: StorefrontSession = Depends(get_storefront_session),
):
    session.cart = cart_reducer(session.cart, RemoveProduct(id=product_id, color=color, size=size))
    await save_storefront_session(session)
    return _cart_payload(session)


@router.delete("")
async def clear_cart(session: StorefrontSession = Depends(get_storefront_session)):
    session.cart = cart_reducer(session.cart, ClearCart())
    await save_storefront_session(session)
    return _cart_payload(session)
