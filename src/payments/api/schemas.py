"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer) between the storefront
client and the gateway adapter.
"""

from pydantic import BaseModel, Field


class CreateIntentRequest(BaseModel):
    amount: float = Field(gt=0)
    currency: str = "INR"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "amount": 1020.00,
                    "currency": "INR",
                }
            ]
        }
    }


class PaymentIntentResponse(BaseModel):
    gateway_order_id: str
    amount_minor_units: int
    currency: str


class GatewayHealthResponse(BaseModel):
    gateway: str
    configured: bool
    available: bool | None = None
    base_url: str | None = None
