"""
POS Routes — the cashier's active cart and held orders.

Endpoints:
    GET    /cart                          Cart with computed totals
    POST   /cart/items                    Add an item (merges with an existing line)
    DELETE /cart/items/{line_id}          Remove a line
    PUT    /cart/items/{line_id}/quantity Set quantity (below 1 removes the line)
    PUT    /cart/items/{line_id}/discount Set / clear a line discount
    PUT    /cart/discount                 Set / clear the order discount
    PUT    /cart/customer                 Select / clear the customer
    PUT    /cart/notes                    Replace the notes
    DELETE /cart                          Clear the cart (held orders stay)
    POST   /cart/reset                    Clear the cart and all held orders
    GET    /cart/checkout                 Sale payload for checkout
    GET    /held-orders                   List held orders
    POST   /held-orders                   Hold the current cart
    POST   /held-orders/{id}/restore      Restore a held order into the cart
    DELETE /held-orders/{id}              Discard one held order
    DELETE /held-orders                   Discard all held orders
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from aymur.config import get_database, settings
from aymur.rbac import PermissionKey, require_permission
from aymur.tenant import require_shop_id
from aymur.utils import ConflictError, NotFoundError, success_response
from .repository import MongoCartRepository
from .schemas import (
    AddItemRequest,
    DiscountRequest,
    HoldOrderRequest,
    SetCustomerRequest,
    SetNotesRequest,
    UpdateQuantityRequest,
)
from .service import CartService

pos_router = APIRouter()


async def get_cart_service(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> CartService:
    """FastAPI dependency — cart service for the calling user in the current shop."""
    repository = MongoCartRepository(db, require_shop_id(request))
    return CartService(repository, request.state.user.get("sub"))


def _tax_rate(tax_rate: Optional[float] = Query(None, ge=0, le=100)) -> float:
    return settings.default_tax_rate if tax_rate is None else tax_rate


# ── Cart ─────────────────────────────────────────────────────────


@pos_router.get("/cart")
@require_permission(PermissionKey.SALES_CREATE)
async def get_cart(
    request: Request,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart = await svc.open()
    return success_response(data=svc.present(cart, tax_rate))


@pos_router.post("/cart/items")
@require_permission(PermissionKey.SALES_CREATE)
async def add_item(
    request: Request,
    body: AddItemRequest,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    """Add a catalog item. Adding an item already in the cart raises its quantity."""
    cart, line_id = await svc.apply(lambda c: c.add_item(body))
    return success_response(
        data={"line_id": line_id, "cart": svc.present(cart, tax_rate)},
        message="Item added",
        code=201,
    )


@pos_router.delete("/cart/items/{line_id}")
@require_permission(PermissionKey.SALES_CREATE)
async def remove_item(
    request: Request,
    line_id: str,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.remove_item(line_id))
    return success_response(data=svc.present(cart, tax_rate), message="Item removed")


@pos_router.put("/cart/items/{line_id}/quantity")
@require_permission(PermissionKey.SALES_CREATE)
async def update_quantity(
    request: Request,
    line_id: str,
    body: UpdateQuantityRequest,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.update_quantity(line_id, body.quantity))
    return success_response(data=svc.present(cart, tax_rate), message="Quantity updated")


@pos_router.put("/cart/items/{line_id}/discount")
@require_permission(PermissionKey.SALES_DISCOUNT)
async def set_item_discount(
    request: Request,
    line_id: str,
    body: DiscountRequest,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.set_item_discount(line_id, body.type, body.value))
    return success_response(data=svc.present(cart, tax_rate), message="Line discount updated")


@pos_router.put("/cart/discount")
@require_permission(PermissionKey.SALES_DISCOUNT)
async def set_order_discount(
    request: Request,
    body: DiscountRequest,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    """A null type or a zero value clears the order discount."""
    cart, _ = await svc.apply(lambda c: c.set_order_discount(body.type, body.value))
    return success_response(data=svc.present(cart, tax_rate), message="Order discount updated")


@pos_router.put("/cart/customer")
@require_permission(PermissionKey.SALES_CREATE)
async def set_customer(
    request: Request,
    body: SetCustomerRequest,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.set_customer(body.customer))
    return success_response(data=svc.present(cart, tax_rate), message="Customer updated")


@pos_router.put("/cart/notes")
@require_permission(PermissionKey.SALES_CREATE)
async def set_notes(
    request: Request,
    body: SetNotesRequest,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.set_notes(body.notes))
    return success_response(data=svc.present(cart, tax_rate), message="Notes updated")


@pos_router.delete("/cart")
@require_permission(PermissionKey.SALES_CREATE)
async def clear_cart(
    request: Request,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.clear_cart())
    return success_response(data=svc.present(cart, tax_rate), message="Cart cleared")


@pos_router.post("/cart/reset")
@require_permission(PermissionKey.SALES_CREATE)
async def reset_cart(
    request: Request,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.reset())
    return success_response(data=svc.present(cart, tax_rate), message="Cart reset")


@pos_router.get("/cart/checkout")
@require_permission(PermissionKey.SALES_CREATE)
async def checkout_payload(
    request: Request,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    """Sale body for the sale-creation endpoint, priced from the saved cart."""
    cart = await svc.open()
    if cart.is_empty:
        raise ConflictError("Cart is empty")
    return success_response(data=svc.to_sale_payload(cart, tax_rate))


# ── Held orders ──────────────────────────────────────────────────


@pos_router.get("/held-orders")
@require_permission(PermissionKey.SALES_CREATE)
async def list_held_orders(
    request: Request,
    svc: CartService = Depends(get_cart_service),
):
    cart = await svc.open()
    held = [o.model_dump(mode="json") for o in cart.held_orders]
    return success_response(data={"held_orders": held, "total": len(held)})


@pos_router.post("/held-orders")
@require_permission(PermissionKey.SALES_CREATE)
async def hold_order(
    request: Request,
    body: HoldOrderRequest,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    """Park the current cart under an optional label; the cart is cleared."""
    cart, held_id = await svc.apply(lambda c: c.hold_order(body.label))
    if held_id is None:
        raise ConflictError("Cannot hold an empty cart")
    return success_response(
        data={"held_order_id": held_id, "cart": svc.present(cart, tax_rate)},
        message="Order held",
        code=201,
    )


@pos_router.post("/held-orders/{held_id}/restore")
@require_permission(PermissionKey.SALES_CREATE)
async def restore_order(
    request: Request,
    held_id: str,
    tax_rate: float = Depends(_tax_rate),
    svc: CartService = Depends(get_cart_service),
):
    """Replace the current cart with a held order. Whatever was in the cart is discarded."""
    cart, restored = await svc.apply(lambda c: c.restore_order(held_id))
    if not restored:
        raise NotFoundError("Held order not found")
    return success_response(data=svc.present(cart, tax_rate), message="Order restored")


@pos_router.delete("/held-orders/{held_id}")
@require_permission(PermissionKey.SALES_CREATE)
async def delete_held_order(
    request: Request,
    held_id: str,
    svc: CartService = Depends(get_cart_service),
):
    cart, _ = await svc.apply(lambda c: c.delete_held_order(held_id))
    return success_response(
        data={"total": len(cart.held_orders)}, message="Held order deleted"
    )


@pos_router.delete("/held-orders")
@require_permission(PermissionKey.SALES_CREATE)
async def clear_held_orders(
    request: Request,
    svc: CartService = Depends(get_cart_service),
):
    await svc.apply(lambda c: c.clear_held_orders())
    return success_response(data={"total": 0}, message="Held orders cleared")
