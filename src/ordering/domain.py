"""Ordering bounded context: checkout, orders and reconciliation.

Converts a client-held cart into a paid order once the payment gateway's
callback has been verified, drives the order through fulfillment, and keeps
every order's monetary fields consistent.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
