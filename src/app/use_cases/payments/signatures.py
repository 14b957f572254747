"""Gateway signature checks

HMAC-SHA256 hex digests compared in constant time.
"""

import hashlib
import hmac
from typing import Optional


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """Checkout callback signature: HMAC over "{order_id}|{payment_id}" with the key secret"""
    if not secret or not signature:
        return False
    expected = _hmac_hex(secret, f"{order_id}|{payment_id}".encode())
    return hmac.compare_digest(expected.encode(), signature.encode())


def verify_webhook_signature(raw_body: bytes, signature: Optional[str], secret: str) -> bool:
    """Webhook signature: HMAC over the raw request body with the webhook secret"""
    if not secret or not signature:
        return False
    return hmac.compare_digest(_hmac_hex(secret, raw_body).encode(), signature.encode())
