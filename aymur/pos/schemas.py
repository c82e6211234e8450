"""
POS cart schemas: the active cart, its line items, and held orders.

Cart state is a chain of immutable snapshots: every mutation builds a
new CartState rather than editing one in place.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ────────────────────────────────────────────────────────


class DiscountTypeEnum(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"                 # Fixed currency amount


# ── Cart state ───────────────────────────────────────────────────


class CartItem(BaseModel):
    """One line in the cart. Name, price and attributes are snapshots."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Cart line id, generated on add")
    item_id: str = Field(..., description="Reference to inventory item")
    name: str
    sku: Optional[str] = None
    barcode: Optional[str] = None
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    weight: Optional[float] = Field(None, ge=0, description="Grams")
    metal_type: Optional[str] = None
    purity: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    discount_type: Optional[DiscountTypeEnum] = None
    discount_value: Optional[float] = None


class CartCustomer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    balance: Optional[float] = None


class OrderDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: DiscountTypeEnum
    value: float


class HeldOrder(BaseModel):
    """Cart parked for later; removed when restored."""
    model_config = ConfigDict(frozen=True)

    id: str
    items: List[CartItem]
    customer: Optional[CartCustomer] = None
    discount: Optional[OrderDiscount] = None
    notes: str = ""
    held_at: datetime
    label: Optional[str] = None


class CartState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: List[CartItem] = Field(default_factory=list)
    customer: Optional[CartCustomer] = None
    discount: Optional[OrderDiscount] = None
    notes: str = ""
    held_orders: List[HeldOrder] = Field(default_factory=list)


class CartTotals(BaseModel):
    """Derived amounts; recomputed on every read."""
    item_count: int
    unique_item_count: int
    subtotal: float
    line_discounts: float
    order_discount: float
    taxable_amount: float
    tax_rate: float
    tax_amount: float
    grand_total: float


# ── Request schemas ──────────────────────────────────────────────


class AddItemRequest(BaseModel):
    """POST /pos/cart/items — quantities are added onto an existing line."""
    item_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=100)
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    weight: Optional[float] = Field(None, ge=0)
    metal_type: Optional[str] = None
    purity: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    discount_type: Optional[DiscountTypeEnum] = None
    discount_value: Optional[float] = Field(None, ge=0)


class UpdateQuantityRequest(BaseModel):
    """PUT /pos/cart/items/{id}/quantity — below 1 removes the line."""
    quantity: int


class DiscountRequest(BaseModel):
    """Line or order discount; type=null clears it."""
    type: Optional[DiscountTypeEnum] = None
    value: float = Field(0, ge=0)


class SetCustomerRequest(BaseModel):
    customer: Optional[CartCustomer] = None


class SetNotesRequest(BaseModel):
    notes: str = Field("", max_length=500)


class HoldOrderRequest(BaseModel):
    label: Optional[str] = Field(None, max_length=100)
