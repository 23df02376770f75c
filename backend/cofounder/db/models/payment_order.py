"""PaymentOrder model: Razorpay order lifecycle (pending -> active)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Uuid

from cofounder.db.base import Base


class PaymentOrder(Base):
    __tablename__ = "payment_orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)

    provider_order_id = Column(String(255), unique=True, nullable=False, index=True)
    provider_payment_id = Column(String(255), nullable=True)
    plan_type = Column(String(20), nullable=False)  # monthly, yearly
    amount = Column(Integer, nullable=False)  # minor units (paise / cents)
    currency = Column(String(3), nullable=False)  # INR, USD
    status = Column(String(20), nullable=False, default="pending")  # pending, active, failed

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
