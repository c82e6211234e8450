"""
Cart pricing — pure functions over cart items.

Order of application:
    line base (price x qty) → line discount → subtotal
    → order discount → tax on the discounted base → grand total

No amount produced here is ever negative.
"""

from typing import Iterable, Optional

from .schemas import CartItem, CartState, CartTotals, DiscountTypeEnum, OrderDiscount


def line_base(item: CartItem) -> float:
    return item.price * item.quantity


def line_total(item: CartItem) -> float:
    """Line amount after the line's own discount, floored at 0."""
    base = line_base(item)
    if not item.discount_type or not item.discount_value or item.discount_value <= 0:
        return base

    if item.discount_type == DiscountTypeEnum.PERCENTAGE:
        return max(0.0, base - base * item.discount_value / 100)
    if item.discount_type == DiscountTypeEnum.FIXED:
        return max(0.0, base - item.discount_value)
    return base


def subtotal(items: Iterable[CartItem]) -> float:
    """Sum of line totals (after line discounts, before order discount)."""
    return sum((line_total(item) for item in items), 0.0)


def line_discounts(items: Iterable[CartItem]) -> float:
    return sum((line_base(item) - line_total(item) for item in items), 0.0)


def order_discount_amount(sub: float, discount: Optional[OrderDiscount]) -> float:
    if not discount or not discount.value or discount.value <= 0:
        return 0.0

    if discount.type == DiscountTypeEnum.PERCENTAGE:
        return sub * discount.value / 100

    if discount.type == DiscountTypeEnum.FIXED:
        # fixed amount never exceeds the subtotal
        return min(discount.value, sub)
    return 0.0


def tax_amount(sub: float, order_discount: float, tax_rate: float) -> float:
    """Tax on the post-discount base."""
    return max(0.0, sub - order_discount) * tax_rate / 100


def grand_total(sub: float, order_discount: float, tax: float) -> float:
    return max(0.0, sub - order_discount + tax)


def item_count(items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in items)


def compute_totals(state: CartState, tax_rate: float = 0.0) -> CartTotals:
    sub = subtotal(state.items)
    order_discount = order_discount_amount(sub, state.discount)
    tax = tax_amount(sub, order_discount, tax_rate)
    return CartTotals(
        item_count=item_count(state.items),
        unique_item_count=len(state.items),
        subtotal=sub,
        line_discounts=line_discounts(state.items),
        order_discount=order_discount,
        taxable_amount=max(0.0, sub - order_discount),
        tax_rate=tax_rate,
        tax_amount=tax,
        grand_total=grand_total(sub, order_discount, tax),
    )
