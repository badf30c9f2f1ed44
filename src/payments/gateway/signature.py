"""HMAC-SHA256 callback signatures.

The gateway signs ``"{order_id}|{payment_id}"`` with the merchant secret and
sends the hex digest back to the storefront together with the two ids.
"""

import hashlib
import hmac


def sign_callback(gateway_order_id: str, gateway_payment_id: str, shared_secret: str) -> str:
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(shared_secret.encode(), message, hashlib.sha256).hexdigest()


def verify_callback(
    gateway_order_id: str,
    gateway_payment_id: str,
    signature: str,
    shared_secret: str,
) -> bool:
    """Constant-time signature check. Malformed input yields False, never an exception."""
    if not all(isinstance(v, str) and v for v in (gateway_order_id, gateway_payment_id, signature, shared_secret)):
        return False

    expected = sign_callback(gateway_order_id, gateway_payment_id, shared_secret)
    try:
        return hmac.compare_digest(expected, signature.lower())
    except TypeError:
        # compare_digest rejects non-ASCII str input
        return False
