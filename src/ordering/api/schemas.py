"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PaymentTypeLiteral = Literal["FullOnline", "CODAdvance"]
OrderStatusLiteral = Literal["Placed", "Processing", "Shipped", "Delivered", "Cancelled"]


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str | None = "India"


class OrderLineSchema(BaseModel):
    product_id: str
    name: str | None = None
    quantity: int
    unit_price: float


class TrackingSchema(BaseModel):
    carrier: str
    tracking_number: str
    estimated_delivery: str | None = None


class StatusChangeSchema(BaseModel):
    from_status: str | None = None
    to_status: str
    changed_by: str | None = None
    note: str | None = None
    changed_at: datetime


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class CheckoutIntentRequest(BaseModel):
    cart: dict[str, int]
    payment_type: PaymentTypeLiteral = "FullOnline"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart": {"prod-001": 2},
                    "payment_type": "CODAdvance",
                }
            ]
        }
    }


class CheckoutRequest(BaseModel):
    cart: dict[str, int]
    payment_type: PaymentTypeLiteral
    address: AddressSchema | None = None
    address_id: str | None = None
    gateway_order_id: str
    gateway_payment_id: str
    signature: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart": {"prod-001": 2},
                    "payment_type": "FullOnline",
                    "address": {
                        "full_name": "Asha Rao",
                        "line1": "12 Temple Street",
                        "city": "Mysuru",
                        "state": "Karnataka",
                        "postal_code": "570001",
                    },
                    "gateway_order_id": "order_Nx1",
                    "gateway_payment_id": "pay_Nx1",
                    "signature": "hex-hmac-sha256",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class UpdateStatusRequest(BaseModel):
    status: OrderStatusLiteral
    note: str | None = Field(default=None, max_length=500)


class AddTrackingRequest(BaseModel):
    carrier: str = Field(min_length=1)
    tracking_number: str = Field(min_length=1)
    estimated_delivery: str | None = Field(default=None, max_length=10)


class ReconciliationSweepRequest(BaseModel):
    page_size: int = Field(default=100, ge=1, le=1000)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CheckoutIntentResponse(BaseModel):
    gateway_order_id: str
    amount_minor_units: int
    currency: str
    payment_type: PaymentTypeLiteral
    subtotal: float
    tax_amount: float
    shipping_fee: float
    grand_total: float
    amount_due_now: float
    amount_due_on_delivery: float


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    status: OrderStatusLiteral
    payment_type: PaymentTypeLiteral
    settlement_status: str
    items: list[OrderLineSchema]
    address: AddressSchema | None = None
    currency: str
    subtotal: float
    tax_amount: float
    shipping_fee: float
    total_amount: float
    advance_paid: float
    remaining_amount: float
    is_paid: bool
    gateway_order_id: str | None = None
    gateway_payment_id: str
    tracking: TrackingSchema | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class OrderHistoryResponse(BaseModel):
    order_id: str
    history: list[StatusChangeSchema]


class ViolationSchema(BaseModel):
    order_id: str | None = None
    field: str
    detail: str


class ReconciliationSweepResponse(BaseModel):
    checked: int
    violations: list[ViolationSchema]


class ErrorResponse(BaseModel):
    error: str
    message: str
    reference: str | None = None
