"""Billing Pydantic schemas for the Razorpay order / verify handshake."""

from datetime import datetime

from pydantic import BaseModel

from cofounder.domain.entitlement import PlanType
from cofounder.domain.payments import Currency


class CreateOrderRequest(BaseModel):
    plan_type: PlanType
    currency: Currency


class CreateOrderResponse(BaseModel):
    order_id: str
    amount: int  # minor units
    currency: str
    key_id: str  # publishable key for the checkout widget


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    plan_type: PlanType


class SubscriptionPeriod(BaseModel):
    plan_type: str
    start_date: datetime
    end_date: datetime


class VerifyPaymentResponse(BaseModel):
    success: bool
    message: str
    subscription: SubscriptionPeriod


class SubscriptionStatusResponse(BaseModel):
    has_access: bool
    is_legacy_user: bool
    is_subscribed: bool
    subscription_plan: str | None
    subscription_end_date: datetime | None
    days_remaining: int | None  # negative once expired
