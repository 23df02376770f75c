"""Billing routes: Razorpay order creation, checkout verification and subscription status."""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from cofounder.core.auth import AuthUser, get_subscription, require_auth
from cofounder.core.exceptions import (
    PaymentOrderStateError,
    PaymentPlanMismatchError,
    PaymentProviderError,
    PaymentSignatureError,
    SubscriptionActivationError,
)
from cofounder.db.base import session_scope
from cofounder.integrations.razorpay import RazorpayClient, get_razorpay_client
from cofounder.schemas.billing import (
    CreateOrderRequest,
    CreateOrderResponse,
    SubscriptionPeriod,
    SubscriptionStatusResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from cofounder.services.payment_service import PaymentService
from cofounder.services.subscription_service import SubscriptionSession

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/billing/orders", response_model=CreateOrderResponse)
async def create_order(
    request: CreateOrderRequest,
    user: AuthUser = Depends(require_auth),
    razorpay: RazorpayClient = Depends(get_razorpay_client),
) -> CreateOrderResponse:
    """Create a Razorpay order for a plan and store it as pending."""
    service = PaymentService(razorpay)
    async with session_scope() as session:
        try:
            order = await service.create_order(session, user.user_id, request.plan_type, request.currency)
        except PaymentProviderError as exc:
            raise HTTPException(status_code=500, detail="Failed to create order") from exc

    return CreateOrderResponse(
        order_id=order.order_id,
        amount=order.amount,
        currency=order.currency,
        key_id=order.key_id,
    )


@router.post("/billing/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    user: AuthUser = Depends(require_auth),
    razorpay: RazorpayClient = Depends(get_razorpay_client),
) -> VerifyPaymentResponse:
    """Verify the checkout signature and activate the subscription.

    A bad signature is a 400 and changes nothing.
    """
    service = PaymentService(razorpay)
    async with session_scope() as session:
        try:
            activated = await service.verify_payment(
                session,
                user.user_id,
                order_id=request.razorpay_order_id,
                payment_id=request.razorpay_payment_id,
                signature=request.razorpay_signature,
                plan_type=request.plan_type,
            )
        except PaymentSignatureError as exc:
            raise HTTPException(status_code=400, detail="Invalid payment signature") from exc
        except PaymentPlanMismatchError as exc:
            raise HTTPException(status_code=400, detail="Plan does not match the order") from exc
        except PaymentOrderStateError as exc:
            raise HTTPException(status_code=409, detail="Order has already been processed") from exc
        except SubscriptionActivationError as exc:
            raise HTTPException(status_code=500, detail="Failed to update subscription status") from exc

    if activated is None:
        raise HTTPException(status_code=404, detail="Order not found")

    return VerifyPaymentResponse(
        success=True,
        message="Payment verified successfully",
        subscription=SubscriptionPeriod(
            plan_type=activated.plan_type,
            start_date=activated.start_date,
            end_date=activated.end_date,
        ),
    )


@router.get("/subscription", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    subscription: SubscriptionSession = Depends(get_subscription),
) -> SubscriptionStatusResponse:
    """Entitlement as of now; recomputed on every call."""
    status = subscription.status()
    return SubscriptionStatusResponse(
        has_access=status.has_access,
        is_legacy_user=status.is_legacy_user,
        is_subscribed=status.is_subscribed,
        subscription_plan=status.subscription_plan,
        subscription_end_date=status.subscription_end_date,
        days_remaining=status.days_remaining,
    )
