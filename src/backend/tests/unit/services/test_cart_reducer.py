"""
Unit tests for the cart reducer
"""

import pytest

from storefront.models.session import CartItem, CartState
from storefront.services.state.cart_reducer import AddProduct, ClearCart, RemoveProduct, SetCount, cart_reducer


def _item(product_id="b2c-001", count=1, color=None, size=None, price=34.9):
    return CartItem(id=product_id, name="Work Gloves", price=price, count=count, color=color, size=size)


@pytest.mark.unit
class TestCartReducer:
    def test_add_same_variant_merges_counts(self):
        state = cart_reducer(None, AddProduct(product=_item(count=2, size="L")))
        state = cart_reducer(state, AddProduct(product=_item(count=3, size="L")))

        assert len(state.cart_items) == 1
        assert state.cart_items[0].count == 5
        assert state.total_count == 5

    def test_different_variants_are_separate_lines(self):
        state = cart_reducer(None, AddProduct(product=_item(size="L")))
        state = cart_reducer(state, AddProduct(product=_item(size="M")))

        assert [item.size for item in state.cart_items] == ["L", "M"]

    def test_totals(self):
        state = cart_reducer(None, AddProduct(product=_item(count=2, price=10.25)))
        state = cart_reducer(state, AddProduct(product=_item("exc-1", price=100.0)))

        assert state.total_count == 3
        assert state.total_price == 120.5

    def test_remove_matches_variant(self):
        state = cart_reducer(None, AddProduct(product=_item(size="L")))
        state = cart_reducer(state, AddProduct(product=_item(size="M")))

        state = cart_reducer(state, RemoveProduct(id="b2c-001", size="L"))

        assert [item.size for item in state.cart_items] == ["M"]

    def test_set_count_updates_line(self):
        state = cart_reducer(None, AddProduct(product=_item()))

        state = cart_reducer(state, SetCount(id="b2c-001", count=4))

        assert state.cart_items[0].count == 4

    def test_set_count_zero_removes_line(self):
        state = cart_reducer(None, AddProduct(product=_item()))

        state = cart_reducer(state, SetCount(id="b2c-001", count=0))

        assert state.cart_items == []

    def test_set_count_for_missing_product_is_noop(self):
        state = cart_reducer(None, AddProduct(product=_item()))

        updated = cart_reducer(state, SetCount(id="other", count=3))

        assert updated == state

    def test_clear_cart_does_not_mutate_input(self):
        state = cart_reducer(None, AddProduct(product=_item()))

        cleared = cart_reducer(state, ClearCart())

        assert cleared.cart_items == []
        assert len(state.cart_items) == 1

    def test_initial_state(self):
        state = cart_reducer(CartState(), ClearCart())

        assert state.total_count == 0
        assert state.total_price == 0
