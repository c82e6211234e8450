"""
CartStore — the POS cart for one session.

Handles line items, line and order discounts, customer selection, notes
and held orders. Each mutation builds a new CartState, saves it through
the injected storage and only then makes it current, so a caller never
observes a half-applied change.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from aymur.utils import Logger
from . import pricing
from .schemas import (
    AddItemRequest,
    CartCustomer,
    CartItem,
    CartState,
    CartTotals,
    DiscountTypeEnum,
    HeldOrder,
    OrderDiscount,
)
from .storage import CartStorage

logger = Logger("pos.cart")


def _new_line_id() -> str:
    return f"cart_{uuid.uuid4().hex[:12]}"


def _new_hold_id() -> str:
    return f"hold_{uuid.uuid4().hex[:12]}"


def _discount_type(value) -> Optional[DiscountTypeEnum]:
    """Known discount type, or None (clear) for anything else."""
    if not value:
        return None
    try:
        return DiscountTypeEnum(value)
    except ValueError:
        return None


class CartStore:
    def __init__(
        self,
        storage: Optional[CartStorage] = None,
        state: Optional[CartState] = None,
    ):
        self.storage = storage
        self._state = state if state is not None else self._load()

    def _load(self) -> CartState:
        if self.storage is None:
            return CartState()
        try:
            payload = self.storage.load()
            if payload is None:
                return CartState()
            return CartState.model_validate(payload)
        except ValueError as exc:
            logger.warning(f"Discarding unreadable saved cart: {exc}")
            return CartState()

    def _commit(self, new_state: CartState) -> None:
        if new_state == self._state:
            return
        if self.storage is not None:
            self.storage.save(new_state.model_dump(mode="json"))
        self._state = new_state

    def _update(self, **changes) -> None:
        self._commit(self._state.model_copy(update=changes))

    # ── Read ─────────────────────────────────────────────────────

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> list[CartItem]:
        return list(self._state.items)

    @property
    def held_orders(self) -> list[HeldOrder]:
        return list(self._state.held_orders)

    @property
    def is_empty(self) -> bool:
        return not self._state.items

    @property
    def item_count(self) -> int:
        return pricing.item_count(self._state.items)

    @property
    def unique_item_count(self) -> int:
        return len(self._state.items)

    def totals(self, tax_rate: float = 0.0) -> CartTotals:
        return pricing.compute_totals(self._state, tax_rate)

    def is_item_in_cart(self, item_id: str) -> bool:
        return any(line.item_id == item_id for line in self._state.items)

    def get_item_by_item_id(self, item_id: str) -> Optional[CartItem]:
        return next((line for line in self._state.items if line.item_id == item_id), None)

    def get_line(self, line_id: str) -> Optional[CartItem]:
        return next((line for line in self._state.items if line.id == line_id), None)

    # ── Items ────────────────────────────────────────────────────

    def add_item(self, data: Union[AddItemRequest, dict]) -> str:
        """Add a catalog item; an existing line for the same item gets its quantity raised."""
        if isinstance(data, dict):
            data = AddItemRequest.model_validate(data)
        quantity = data.quantity or 1

        existing = self.get_item_by_item_id(data.item_id)
        if existing is not None:
            items = [
                line.model_copy(update={"quantity": line.quantity + quantity})
                if line.id == existing.id else line
                for line in self._state.items
            ]
            self._update(items=items)
            return existing.id

        line = CartItem(id=_new_line_id(), **data.model_dump())
        self._update(items=[*self._state.items, line])
        return line.id

    def remove_item(self, line_id: str) -> None:
        self._update(items=[line for line in self._state.items if line.id != line_id])

    def update_quantity(self, line_id: str, quantity: int) -> None:
        if quantity < 1:
            self.remove_item(line_id)
            return
        self._update(
            items=[
                line.model_copy(update={"quantity": quantity}) if line.id == line_id else line
                for line in self._state.items
            ]
        )

    def set_item_discount(
        self,
        line_id: str,
        discount_type: Optional[DiscountTypeEnum],
        value: float = 0,
    ) -> None:
        discount_type = _discount_type(discount_type)
        changes = {
            "discount_type": discount_type,
            "discount_value": value if discount_type else None,
        }
        self._update(
            items=[
                line.model_copy(update=changes) if line.id == line_id else line
                for line in self._state.items
            ]
        )

    def clear_items(self) -> None:
        self._update(items=[])

    # ── Customer / discount / notes ──────────────────────────────

    def set_customer(self, customer: Optional[CartCustomer]) -> None:
        self._update(customer=customer)

    def set_order_discount(self, discount_type: Optional[DiscountTypeEnum], value: float = 0) -> None:
        """Keeps the discount only for a real type with a positive value."""
        discount = None
        discount_type = _discount_type(discount_type)
        if discount_type and value > 0:
            discount = OrderDiscount(type=discount_type, value=value)
        self._update(discount=discount)

    def set_notes(self, notes: str) -> None:
        self._update(notes=notes or "")

    # ── Hold / restore ───────────────────────────────────────────

    def hold_order(self, label: Optional[str] = None) -> Optional[str]:
        """Park the cart and clear it. Returns the held order id, or None for an empty cart."""
        state = self._state
        if not state.items:
            return None

        held = HeldOrder(
            id=_new_hold_id(),
            items=list(state.items),
            customer=state.customer,
            discount=state.discount,
            notes=state.notes,
            held_at=datetime.now(timezone.utc),
            label=label,
        )
        self._commit(
            CartState(held_orders=[*state.held_orders, held])
        )
        logger.info(f"Held order {held.id} ({len(held.items)} lines)")
        return held.id

    def get_held_order(self, held_id: str) -> Optional[HeldOrder]:
        return next((o for o in self._state.held_orders if o.id == held_id), None)

    def restore_order(self, held_id: str) -> bool:
        """Replace the active cart with a held order and drop it from the held list."""
        held = self.get_held_order(held_id)
        if held is None:
            return False

        self._commit(
            CartState(
                items=list(held.items),
                customer=held.customer,
                discount=held.discount,
                notes=held.notes,
                held_orders=[o for o in self._state.held_orders if o.id != held_id],
            )
        )
        logger.info(f"Restored held order {held_id}")
        return True

    def delete_held_order(self, held_id: str) -> None:
        self._update(held_orders=[o for o in self._state.held_orders if o.id != held_id])

    def clear_held_orders(self) -> None:
        self._update(held_orders=[])

    # ── General ──────────────────────────────────────────────────

    def clear_cart(self) -> None:
        """Empty the active cart; held orders stay."""
        self._commit(CartState(held_orders=list(self._state.held_orders)))

    def reset(self) -> None:
        """Empty the active cart and drop every held order."""
        self._commit(CartState())
