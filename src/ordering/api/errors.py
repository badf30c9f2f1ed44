"""Mapping of exceptions to HTTP responses.

Cart and address problems are shown to the user verbatim because the user
can fix them. Payment, gateway and consistency failures get a generic
message with a reference id; the details stay in the logs.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from payments.gateway.port import GatewayError, GatewayUnavailableError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import (
    SUPPORT_MESSAGE,
    AddressRequiredError,
    CheckoutError,
    InvalidCartError,
    InvalidTransitionError,
    PaymentMismatchError,
    PaymentVerificationError,
    ReconciliationError,
    new_reference,
)

logger = structlog.get_logger(__name__)

_CHECKOUT_STATUS = {
    InvalidCartError: 400,
    AddressRequiredError: 400,
    PaymentVerificationError: 402,
    PaymentMismatchError: 409,
    ReconciliationError: 500,
}

_USER_FIXABLE = (InvalidCartError, AddressRequiredError)


def _error(status_code: int, error: str, message: str, reference: str | None = None) -> JSONResponse:
    content = {"error": error, "message": message}
    if reference:
        content["reference"] = reference
    return JSONResponse(status_code=status_code, content=content)


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in _CHECKOUT_STATUS.items() if isinstance(exc, error_type)),
        400,
    )
    if isinstance(exc, _USER_FIXABLE):
        return _error(status_code, type(exc).__name__, exc.message)

    logger.warning(
        "Checkout failed",
        error=type(exc).__name__,
        reference=exc.reference,
        detail=exc.message,
        path=request.url.path,
    )
    return _error(status_code, type(exc).__name__, exc.support_message, exc.reference)


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    reference = new_reference()
    status_code = 503 if isinstance(exc, GatewayUnavailableError) else 502
    logger.error(
        "Payment gateway error",
        reference=reference,
        detail=exc.message,
        gateway_status_code=exc.status_code,
        path=request.url.path,
    )
    return _error(status_code, type(exc).__name__, SUPPORT_MESSAGE.format(reference=reference), reference)


async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": "InvalidTransitionError", "messages": exc.messages})


def register_error_handlers(app: FastAPI) -> None:
    """Register checkout and gateway handlers on top of Protean's own.

    Protean maps ValidationError to 400 and ObjectNotFoundError to 404.
    """
    register_exception_handlers(app)
    app.add_exception_handler(CheckoutError, checkout_error_handler)
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(InvalidTransitionError, invalid_transition_handler)
