"""Paystack helpers: webhook signature check, references, ticket codes and charge amounts."""
import os
import hmac
import hashlib
import secrets
import string
import time
from typing import Optional

PAYSTACK_SECRET_KEY  = os.environ.get("PAYSTACK_SECRET_KEY", "")
PLATFORM_FEE_PERCENT = float(os.environ.get("PLATFORM_FEE_PERCENT", "8"))

_BASE36 = string.digits + string.ascii_lowercase


def _random_base36(length: int = 7) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def _now_ms() -> int:
    return int(time.time() * 1000)


def verify_signature(raw_body: bytes, signature: Optional[str], secret: Optional[str] = None) -> bool:
    """
    Compare x-paystack-signature with HMAC-SHA512 of the exact request bytes.
    Fails closed when the header or the secret is missing.
    """
    secret = PAYSTACK_SECRET_KEY if secret is None else secret
    if not secret or not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
    # Bytes on both sides; header text may carry non-ASCII characters
    received = signature.strip().lower().encode("utf-8", "surrogateescape")
    return hmac.compare_digest(expected.encode("ascii"), received)


def generate_payment_reference() -> str:
    """'TXN_1718000000000_k3j9x0a' — handed to the checkout popup before the charge."""
    return f"TXN_{_now_ms()}_{_random_base36()}"


def generate_ticket_code() -> str:
    """'TKT-1718000000000-K3J9X0A'. Uniqueness is backed by the column constraint."""
    return f"TKT-{_now_ms()}-{_random_base36().upper()}"


def compute_charge(ticket_price: float, fee_percent: float, fee_bearer: str) -> dict:
    """
    Split a ticket price into what the buyer is charged and the platform fee.
    When the buyer bears the fee it is added on top; otherwise the organizer
    absorbs it out of the ticket price.
    """
    platform_fee = round(ticket_price * fee_percent / 100, 2)
    total = ticket_price + platform_fee if fee_bearer == "buyer" else ticket_price
    return {
        "ticket_price": ticket_price,
        "platform_fee": platform_fee,
        "total":        round(total, 2),
        "amount_kobo":  int(round(total * 100)),
    }
