"""
Cart Reducer
Pure state transitions for the shopping cart of a storefront session
"""

import logging
from typing import Callable, Dict, Optional, Type, Union

from pydantic import BaseModel

from ...models.session import CartItem, CartState

logger = logging.getLogger(__name__)


class AddProduct(BaseModel):
    """Add an item; an existing line with the same id, color and size gains the count"""

    product: CartItem


class RemoveProduct(BaseModel):
    id: str
    color: Optional[str] = None
    size: Optional[str] = None


class SetCount(BaseModel):
    id: str
    count: int
    color: Optional[str] = None
    size: Optional[str] = None


class ClearCart(BaseModel):
    pass


CartAction = Union[AddProduct, RemoveProduct, SetCount, ClearCart]


def _matches(item: CartItem, product_id: str, color: Optional[str], size: Optional[str]) -> bool:
    return item.id == product_id and item.color == color and item.size == size


def _add_product(state: CartState, action: AddProduct) -> CartState:
    for index, item in enumerate(state.cart_items):
        if item.same_variant(action.product):
            state.cart_items[index] = item.model_copy(update={"count": item.count + action.product.count})
            return state

    state.cart_items.append(action.product.model_copy())
    return state


def _remove_product(state: CartState, action: RemoveProduct) -> CartState:
    state.cart_items = [
        item for item in state.cart_items
        if not _matches(item, action.id, action.color, action.size)
    ]
    return state


def _set_count(state: CartState, action: SetCount) -> CartState:
    if action.count <= 0:
        return _remove_product(state, RemoveProduct(id=action.id, color=action.color, size=action.size))

    for index, item in enumerate(state.cart_items):
        if _matches(item, action.id, action.color, action.size):
            state.cart_items[index] = item.model_copy(update={"count": action.count})
            return state

    logger.debug(f"set_count ignored: product {action.id} not in cart")
    return state


def _clear_cart(state: CartState, action: ClearCart) -> CartState:
    state.cart_items = []
    return state


_HANDLERS: Dict[Type[BaseModel], Callable[[CartState, BaseModel], CartState]] = {
    AddProduct: _add_product,
    RemoveProduct: _remove_product,
    SetCount: _set_count,
    ClearCart: _clear_cart,
}


def cart_reducer(state: Optional[CartState], action: CartAction) -> CartState:
    """Apply a cart action and return the new cart; the given state is left untouched."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise ValueError(f"Unknown cart action: {type(action).__name__}")

    base = state if state is not None else CartState()
    return handler(base.model_copy(deep=True), action)
