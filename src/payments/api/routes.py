"""FastAPI routes for the Payments context: intents and gateway health."""

from fastapi import APIRouter

from payments.api.schemas import CreateIntentRequest, GatewayHealthResponse, PaymentIntentResponse
from payments.gateway import get_gateway

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", status_code=201, response_model=PaymentIntentResponse)
async def create_intent(body: CreateIntentRequest) -> PaymentIntentResponse:
    """Register a payment intent for an arbitrary amount with the gateway."""
    intent = get_gateway().create_intent(body.amount, body.currency)
    return PaymentIntentResponse(
        gateway_order_id=intent.gateway_order_id,
        amount_minor_units=intent.amount_minor_units,
        currency=intent.currency,
    )


@payment_router.get("/health", response_model=GatewayHealthResponse)
async def gateway_health() -> GatewayHealthResponse:
    return GatewayHealthResponse(**get_gateway().health())
