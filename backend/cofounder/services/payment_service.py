"""PaymentService: Razorpay order creation and checkout verification.

Verification activates the subscription: the order moves pending -> active
and the profile's subscription fields are set, both in one database
transaction. A signature mismatch mutates nothing.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.core.config import Settings, get_settings
from cofounder.core.exceptions import (
    PaymentOrderStateError,
    PaymentPlanMismatchError,
    PaymentSignatureError,
    SubscriptionActivationError,
)
from cofounder.db.models.payment_order import PaymentOrder
from cofounder.db.models.profile import Profile
from cofounder.domain.entitlement import PlanType, SubscriptionStatus, compute_end_date
from cofounder.domain.payments import Currency, OrderStatus, amount_for, can_transition, verify_signature
from cofounder.integrations.razorpay import RazorpayClient

logger = structlog.get_logger(__name__)


@dataclass
class CreatedOrder:
    order_id: str
    amount: int
    currency: str
    key_id: str


@dataclass
class ActivatedSubscription:
    plan_type: str
    start_date: datetime
    end_date: datetime


class PaymentService:
    """Orchestrates the payment handshake between Razorpay and the database."""

    def __init__(self, razorpay: RazorpayClient, settings: Settings | None = None):
        self.razorpay = razorpay
        self.settings = settings or get_settings()

    async def create_order(
        self,
        session: AsyncSession,
        user_id: str,
        plan_type: PlanType,
        currency: Currency,
        now: datetime | None = None,
    ) -> CreatedOrder:
        """Create a provider order and store it as a pending PaymentOrder.

        Raises:
            ConfigurationError: Razorpay credentials missing
            PaymentProviderError: the provider rejected the order
        """
        now = now or datetime.now(timezone.utc)
        amount = amount_for(plan_type, currency)
        key_id = self.razorpay.key_id

        logger.info("payment_order_creating", user_id=user_id, plan_type=plan_type, currency=currency, amount=amount)
        order = await self.razorpay.create_order(
            amount=amount,
            currency=Currency(currency).value,
            receipt=f"order_{user_id}_{int(now.timestamp() * 1000)}",
            notes={"user_id": user_id, "plan_type": PlanType(plan_type).value},
        )

        session.add(
            PaymentOrder(
                user_id=user_id,
                provider_order_id=order["id"],
                plan_type=PlanType(plan_type).value,
                amount=amount,
                currency=Currency(currency).value,
                status=OrderStatus.PENDING.value,
            )
        )
        await session.commit()

        logger.info("payment_order_created", user_id=user_id, order_id=order["id"])
        return CreatedOrder(
            order_id=order["id"],
            amount=order.get("amount", amount),
            currency=order.get("currency", Currency(currency).value),
            key_id=key_id,
        )

    async def verify_payment(
        self,
        session: AsyncSession,
        user_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
        plan_type: PlanType,
        now: datetime | None = None,
    ) -> ActivatedSubscription | None:
        """Verify a checkout signature and activate the subscription.

        Returns:
            ActivatedSubscription on success, None if the user has no such order (404 pattern)

        Raises:
            ConfigurationError: Razorpay secret missing
            PaymentSignatureError: signature mismatch (nothing is mutated)
            PaymentOrderStateError: order is not pending
            PaymentPlanMismatchError: plan_type differs from the order's plan (nothing is mutated)
            SubscriptionActivationError: profile could not be updated (transaction rolled back)
        """
        secret = self.settings.require("razorpay_key_secret")
        if not verify_signature(secret, order_id, payment_id, signature):
            logger.warning("payment_signature_invalid", user_id=user_id, order_id=order_id)
            raise PaymentSignatureError(order_id)

        result = await session.execute(
            select(PaymentOrder).where(
                PaymentOrder.provider_order_id == order_id,
                PaymentOrder.user_id == user_id,
            )
        )
        order = result.scalar_one_or_none()
        if order is None:
            logger.warning("payment_order_missing", user_id=user_id, order_id=order_id)
            return None

        if not can_transition(order.status, OrderStatus.ACTIVE):
            raise PaymentOrderStateError(order_id, order.status)

        # The signature does not cover the plan; the stored order is what was priced
        plan = PlanType(order.plan_type)
        if PlanType(plan_type) != plan:
            logger.warning(
                "payment_plan_mismatch",
                user_id=user_id,
                order_id=order_id,
                ordered_plan=plan.value,
                requested_plan=str(plan_type),
            )
            raise PaymentPlanMismatchError(order_id, plan.value, str(plan_type))

        now = now or datetime.now(timezone.utc)
        end_date = compute_end_date(plan, now)

        try:
            order.status = OrderStatus.ACTIVE.value
            order.provider_payment_id = payment_id

            result = await session.execute(select(Profile).where(Profile.user_id == user_id))
            profile = result.scalar_one_or_none()
            if profile is None:
                raise SubscriptionActivationError(user_id, order_id, "profile not found")

            profile.subscription_status = SubscriptionStatus.ACTIVE.value
            profile.subscription_plan = plan.value
            profile.subscription_id = order_id
            profile.subscription_start_date = now
            profile.subscription_end_date = end_date
            profile.razorpay_subscription_id = order_id

            await session.commit()
        except (SubscriptionActivationError, SQLAlchemyError) as exc:
            await session.rollback()
            logger.error(
                "subscription_activation_inconsistent",
                user_id=user_id,
                order_id=order_id,
                payment_id=payment_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            if isinstance(exc, SubscriptionActivationError):
                raise
            raise SubscriptionActivationError(user_id, order_id, str(exc)) from exc

        logger.info(
            "subscription_activated",
            user_id=user_id,
            order_id=order_id,
            plan_type=plan.value,
            end_date=end_date.isoformat(),
        )
        return ActivatedSubscription(plan_type=plan.value, start_date=now, end_date=end_date)
