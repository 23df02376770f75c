"""Payment handshake rules for Razorpay orders.

Pure domain functions: price table lookup, checkout signature computation
and verification, order status transitions. No DB or network access.
"""

import hashlib
import hmac
from enum import StrEnum

from cofounder.domain.entitlement import PlanType


class Currency(StrEnum):
    INR = "INR"
    USD = "USD"


class OrderStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    FAILED = "failed"


# Amounts in minor units: paise for INR, cents for USD
PRICE_TABLE: dict[tuple[PlanType, Currency], int] = {
    (PlanType.MONTHLY, Currency.INR): 149900,
    (PlanType.YEARLY, Currency.INR): 1499900,
    (PlanType.MONTHLY, Currency.USD): 1799,
    (PlanType.YEARLY, Currency.USD): 17999,
}

# Only pending -> active is modeled; orders never move backward.
_ALLOWED_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.ACTIVE},
    OrderStatus.ACTIVE: set(),
    OrderStatus.FAILED: set(),
}


def amount_for(plan_type: PlanType | str, currency: Currency | str) -> int:
    """Return the order amount in minor units for a plan/currency pair.

    Raises ValueError for an unknown plan or currency.
    """
    return PRICE_TABLE[(PlanType(plan_type), Currency(currency))]


def compute_signature(secret: str, order_id: str, payment_id: str) -> str:
    """HMAC-SHA256(secret, "order_id|payment_id") as lowercase hex."""
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    """Return True if ``signature`` matches the expected checkout signature exactly."""
    expected = compute_signature(secret, order_id, payment_id)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def can_transition(current: OrderStatus | str, target: OrderStatus | str) -> bool:
    return OrderStatus(target) in _ALLOWED_TRANSITIONS[OrderStatus(current)]
