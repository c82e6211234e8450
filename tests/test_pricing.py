"""Tests for the cart pricing functions."""

import pytest

from aymur.pos import pricing
from aymur.pos.schemas import CartItem, CartState, DiscountTypeEnum, OrderDiscount


def make_item(price, quantity=1, discount_type=None, discount_value=None, **extra):
    return CartItem(
        id=extra.pop("id", "cart_test"),
        item_id=extra.pop("item_id", "item-1"),
        name="Test Item",
        price=price,
        quantity=quantity,
        discount_type=discount_type,
        discount_value=discount_value,
        **extra,
    )


class TestLineTotal:

    def test_no_discount(self):
        assert pricing.line_total(make_item(100, 2)) == 200

    def test_percentage_discount(self):
        item = make_item(100, 2, DiscountTypeEnum.PERCENTAGE, 10)
        assert pricing.line_total(item) == pytest.approx(180)

    def test_fixed_discount(self):
        item = make_item(100, 2, DiscountTypeEnum.FIXED, 25)
        assert pricing.line_total(item) == 175

    def test_fixed_discount_larger_than_line_floors_at_zero(self):
        item = make_item(100, 2, DiscountTypeEnum.FIXED, 250)
        assert pricing.line_total(item) == 0

    def test_percentage_over_hundred_floors_at_zero(self):
        item = make_item(100, 1, DiscountTypeEnum.PERCENTAGE, 150)
        assert pricing.line_total(item) == 0

    @pytest.mark.parametrize("value", [None, 0, -5])
    def test_non_positive_discount_value_is_ignored(self, value):
        item = make_item(80, 1, DiscountTypeEnum.FIXED, value)
        assert pricing.line_total(item) == 80

    def test_value_without_type_is_ignored(self):
        assert pricing.line_total(make_item(80, 1, None, 20)) == 80


class TestOrderDiscount:

    def test_percentage(self):
        discount = OrderDiscount(type=DiscountTypeEnum.PERCENTAGE, value=10)
        assert pricing.order_discount_amount(300, discount) == pytest.approx(30)

    def test_fixed_is_clamped_to_subtotal(self):
        discount = OrderDiscount(type=DiscountTypeEnum.FIXED, value=500)
        assert pricing.order_discount_amount(300, discount) == 300

    def test_none_or_zero_is_no_discount(self):
        assert pricing.order_discount_amount(300, None) == 0
        zero = OrderDiscount(type=DiscountTypeEnum.FIXED, value=0)
        assert pricing.order_discount_amount(300, zero) == 0


class TestComputeTotals:

    def test_empty_cart(self):
        totals = pricing.compute_totals(CartState(), tax_rate=15)
        assert totals.item_count == 0
        assert totals.unique_item_count == 0
        assert totals.subtotal == 0
        assert totals.tax_amount == 0
        assert totals.grand_total == 0

    def test_subtotal_is_after_line_discounts(self):
        state = CartState(
            items=[
                make_item(100, 2, DiscountTypeEnum.PERCENTAGE, 10, id="a", item_id="i-a"),
                make_item(50, 1, id="b", item_id="i-b"),
            ]
        )
        totals = pricing.compute_totals(state)
        assert totals.item_count == 3
        assert totals.unique_item_count == 2
        assert totals.subtotal == pytest.approx(230)
        assert totals.line_discounts == pytest.approx(20)
        assert totals.grand_total == pytest.approx(230)

    def test_tax_is_charged_on_discounted_base(self):
        state = CartState(
            items=[make_item(100, 2)],
            discount=OrderDiscount(type=DiscountTypeEnum.FIXED, value=50),
        )
        totals = pricing.compute_totals(state, tax_rate=10)
        assert totals.subtotal == 200
        assert totals.order_discount == 50
        assert totals.taxable_amount == 150
        assert totals.tax_amount == pytest.approx(15)
        assert totals.grand_total == pytest.approx(165)

    def test_fixed_order_discount_wipes_out_subtotal_exactly(self):
        state = CartState(
            items=[make_item(100, 3)],
            discount=OrderDiscount(type=DiscountTypeEnum.FIXED, value=500),
        )
        totals = pricing.compute_totals(state, tax_rate=5)
        assert totals.order_discount == 300
        assert totals.tax_amount == 0
        assert totals.grand_total == 0

    def test_amounts_are_never_negative(self):
        state = CartState(
            items=[make_item(10, 1, DiscountTypeEnum.FIXED, 99)],
            discount=OrderDiscount(type=DiscountTypeEnum.PERCENTAGE, value=100),
        )
        totals = pricing.compute_totals(state, tax_rate=20)
        for field in ("subtotal", "line_discounts", "order_discount", "taxable_amount",
                      "tax_amount", "grand_total"):
            assert getattr(totals, field) >= 0
