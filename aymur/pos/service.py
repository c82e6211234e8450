"""
POS cart service: loads a user's cart, applies one change, saves it.

The cart is saved before the service returns, so the next request (or a
checkout) always sees the change. Saves are versioned: when another
request saved the same cart in between, the change is replayed on the
newer cart instead of overwriting it.
"""

from typing import Callable, TypeVar

from aymur.utils import ConflictError, Logger
from . import pricing
from .cart import CartStore
from .repository import MongoCartRepository
from .storage import MemoryCartStorage

logger = Logger("pos.service")

T = TypeVar("T")

MAX_SAVE_ATTEMPTS = 3


class CartService:
    def __init__(self, repository: MongoCartRepository, user_id: str):
        self.repository = repository
        self.user_id = user_id

    async def _load(self) -> tuple[CartStore, int]:
        payload, version = await self.repository.load(self.user_id)
        return CartStore(storage=MemoryCartStorage(payload)), version

    async def open(self) -> CartStore:
        cart, _ = await self._load()
        return cart

    async def apply(self, mutation: Callable[[CartStore], T]) -> tuple[CartStore, T]:
        """Run `mutation` against the saved cart and persist the result if it changed."""
        for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
            cart, version = await self._load()
            result = mutation(cart)
            if not cart.storage.saves:
                return cart, result

            state = cart.state.model_dump(mode="json")
            if await self.repository.save(self.user_id, state, version):
                logger.debug(
                    f"Saved cart for user={self.user_id} v{version + 1} "
                    f"({cart.unique_item_count} lines)"
                )
                return cart, result
            logger.warning(
                f"Cart for user={self.user_id} changed during update "
                f"(attempt {attempt}/{MAX_SAVE_ATTEMPTS})"
            )

        raise ConflictError("Cart was changed by another request, please retry")

    # ── Presentation ─────────────────────────────────────────────

    @staticmethod
    def present(cart: CartStore, tax_rate: float) -> dict:
        state = cart.state.model_dump(mode="json")
        for line, item in zip(state["items"], cart.items):
            line["line_total"] = pricing.line_total(item)
        return {
            **state,
            "totals": cart.totals(tax_rate).model_dump(),
        }

    @staticmethod
    def to_sale_payload(cart: CartStore, tax_rate: float) -> dict:
        """Checkout body for sale creation; totals come from the pricing functions."""
        totals = cart.totals(tax_rate)
        state = cart.state
        lines = []
        for item in state.items:
            total = pricing.line_total(item)
            lines.append(
                {
                    "item_id": item.item_id,
                    "item_name": item.name,
                    "sku": item.sku,
                    "quantity": item.quantity,
                    "unit_price": item.price,
                    "discount_type": item.discount_type.value if item.discount_type else None,
                    "discount_value": item.discount_value,
                    "discount_amount": pricing.line_base(item) - total,
                    "line_total": total,
                }
            )
        return {
            "customer_id": state.customer.id if state.customer else None,
            "customer_name": state.customer.name if state.customer else None,
            "items": lines,
            "bill_discount_type": state.discount.type.value if state.discount else None,
            "bill_discount_value": state.discount.value if state.discount else None,
            "bill_discount_amount": totals.order_discount,
            "subtotal": totals.subtotal,
            "total_discount": totals.line_discounts + totals.order_discount,
            "tax_rate": tax_rate,
            "total_tax": totals.tax_amount,
            "grand_total": totals.grand_total,
            "notes": state.notes or None,
        }
