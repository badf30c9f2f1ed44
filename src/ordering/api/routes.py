"""FastAPI routes for the Ordering context: checkout and orders.

The caller is identified by the ``X-User-Id`` header, set by the
authentication layer in front of this service.
"""

from fastapi import APIRouter, Header, Response
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddTrackingRequest,
    CheckoutIntentRequest,
    CheckoutIntentResponse,
    CheckoutRequest,
    ErrorResponse,
    OrderHistoryResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusLiteral,
    ReconciliationSweepRequest,
    ReconciliationSweepResponse,
    StatusChangeSchema,
    UpdateStatusRequest,
)
from ordering.checkout.service import CallbackData, create_checkout_intent, verify_and_place_order
from ordering.order.fulfillment import AddTracking, UpdateOrderStatus
from ordering.order.order import Order, PaymentType
from ordering.order.reconciliation import RunReconciliationSweep
from ordering.utils.logging import add_context

order_router = APIRouter(prefix="/orders", tags=["orders"])

_CHECKOUT_ERRORS = {
    400: {"model": ErrorResponse, "description": "Cart or address needs fixing"},
    402: {"model": ErrorResponse, "description": "Payment could not be verified"},
    409: {"model": ErrorResponse, "description": "Payment amount mismatch"},
    503: {"model": ErrorResponse, "description": "Payment gateway unavailable"},
}


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        status=order.status,
        payment_type=order.payment_type,
        settlement_status=order.settlement_status.value,
        items=[
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
            }
            for line in order.items
        ],
        address=order.address.to_dict() if order.address else None,
        currency=order.currency,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        shipping_fee=order.shipping_fee,
        total_amount=order.total_amount,
        advance_paid=order.advance_paid,
        remaining_amount=order.remaining_amount,
        is_paid=order.is_paid,
        gateway_order_id=order.gateway_order_id,
        gateway_payment_id=order.gateway_payment_id,
        tracking=order.tracking.to_dict() if order.tracking else None,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
@order_router.post(
    "/checkout/intent",
    status_code=201,
    response_model=CheckoutIntentResponse,
    responses=_CHECKOUT_ERRORS,
)
async def checkout_intent(
    body: CheckoutIntentRequest,
    x_user_id: str = Header(),
) -> CheckoutIntentResponse:
    """Price the cart and open a gateway intent for the amount due now."""
    add_context(customer_id=x_user_id)
    payment_type = PaymentType(body.payment_type)
    checkout = create_checkout_intent(body.cart, payment_type)
    return CheckoutIntentResponse(
        gateway_order_id=checkout.intent.gateway_order_id,
        amount_minor_units=checkout.intent.amount_minor_units,
        currency=checkout.intent.currency,
        payment_type=payment_type.value,
        subtotal=float(checkout.cart.subtotal),
        tax_amount=float(checkout.cart.tax_amount),
        shipping_fee=float(checkout.cart.shipping_fee),
        grand_total=float(checkout.cart.grand_total),
        amount_due_now=float(checkout.settlement.expected_payment),
        amount_due_on_delivery=float(checkout.settlement.remaining_amount),
    )


@order_router.post("/checkout", status_code=201, response_model=OrderResponse, responses=_CHECKOUT_ERRORS)
async def checkout(
    body: CheckoutRequest,
    response: Response,
    x_user_id: str = Header(),
) -> OrderResponse:
    """Verify the gateway callback and place the order.

    Replaying a callback that already produced an order returns that order
    with status 200.
    """
    add_context(customer_id=x_user_id, gateway_payment_id=body.gateway_payment_id)
    order, created = verify_and_place_order(
        customer_id=x_user_id,
        cart=body.cart,
        payment_type=PaymentType(body.payment_type),
        callback=CallbackData(
            gateway_order_id=body.gateway_order_id,
            gateway_payment_id=body.gateway_payment_id,
            signature=body.signature,
        ),
        address=body.address.model_dump() if body.address else None,
        address_id=body.address_id,
    )
    if not created:
        response.status_code = 200
    return _order_response(order)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.get("", response_model=OrderListResponse)
async def list_my_orders(x_user_id: str = Header()) -> OrderListResponse:
    orders = current_domain.repository_for(Order).find_by_customer(x_user_id)
    return OrderListResponse(orders=[_order_response(order) for order in orders])


@order_router.get("/all", response_model=OrderListResponse)
async def list_all_orders(status: OrderStatusLiteral | None = None) -> OrderListResponse:
    """Fulfillment queue: every customer's orders, newest first."""
    orders = current_domain.repository_for(Order).find_all(status=status)
    return OrderListResponse(orders=[_order_response(order) for order in orders])


@order_router.post("/reconciliation/sweep", response_model=ReconciliationSweepResponse)
async def reconciliation_sweep(body: ReconciliationSweepRequest | None = None) -> ReconciliationSweepResponse:
    """Re-check every stored order and report monetary inconsistencies."""
    command = RunReconciliationSweep(page_size=body.page_size if body else 100)
    result = current_domain.process(command, asynchronous=False)
    return ReconciliationSweepResponse(**result)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return _order_response(order)


@order_router.get("/{order_id}/history", response_model=OrderHistoryResponse)
async def get_order_history(order_id: str) -> OrderHistoryResponse:
    order = current_domain.repository_for(Order).get(order_id)
    history = sorted(order.status_history, key=lambda change: change.changed_at)
    return OrderHistoryResponse(
        order_id=str(order.id),
        history=[
            StatusChangeSchema(
                from_status=change.from_status,
                to_status=change.to_status,
                changed_by=change.changed_by,
                note=change.note,
                changed_at=change.changed_at,
            )
            for change in history
        ],
    )


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: UpdateStatusRequest,
    x_user_id: str | None = Header(default=None),
) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        changed_by=x_user_id,
        note=body.note,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(current_domain.repository_for(Order).get(order_id))


@order_router.put("/{order_id}/tracking", response_model=OrderResponse)
async def add_order_tracking(
    order_id: str,
    body: AddTrackingRequest,
    x_user_id: str | None = Header(default=None),
) -> OrderResponse:
    command = AddTracking(
        order_id=order_id,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        estimated_delivery=body.estimated_delivery,
        changed_by=x_user_id,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(current_domain.repository_for(Order).get(order_id))
