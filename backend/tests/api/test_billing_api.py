"""Tests for the Razorpay order / verify endpoints and subscription status."""

import json

import httpx
import pytest

from cofounder.db.models.profile import Profile
from cofounder.domain.payments import compute_signature

pytestmark = pytest.mark.integration

USER_ID = "user-billing"
SECRET = "rzp_test_secret"


def razorpay_orders(order_id: str = "order_api_1", status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        if status_code != 200:
            return httpx.Response(status_code, json={"error": {"description": "rejected"}})
        body = json.loads(request.content)
        return httpx.Response(200, json={"id": order_id, "amount": body["amount"], "currency": body["currency"]})

    return handler


@pytest.fixture
async def billing_client(api_client, db_session, login, use_razorpay):
    db_session.add(Profile(user_id=USER_ID))
    await db_session.commit()
    login(USER_ID)
    use_razorpay(razorpay_orders())
    return api_client


def _verify_body(order_id="order_api_1", payment_id="pay_1", signature=None, plan_type="monthly"):
    return {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": signature or compute_signature(SECRET, order_id, payment_id),
        "plan_type": plan_type,
    }


class TestCreateOrder:
    def test_create_order(self, billing_client):
        response = billing_client.post("/api/billing/orders", json={"plan_type": "monthly", "currency": "USD"})

        assert response.status_code == 200
        assert response.json() == {
            "order_id": "order_api_1",
            "amount": 1799,
            "currency": "USD",
            "key_id": "rzp_test_key",
        }

    def test_unknown_plan_rejected(self, billing_client):
        response = billing_client.post("/api/billing/orders", json={"plan_type": "weekly", "currency": "USD"})

        assert response.status_code == 422

    def test_provider_failure(self, billing_client, use_razorpay):
        use_razorpay(razorpay_orders(status_code=401))

        response = billing_client.post("/api/billing/orders", json={"plan_type": "yearly", "currency": "INR"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to create order"


class TestVerifyPayment:
    def test_verify_activates_subscription(self, billing_client):
        billing_client.post("/api/billing/orders", json={"plan_type": "yearly", "currency": "INR"})

        response = billing_client.post("/api/billing/verify", json=_verify_body(plan_type="yearly"))

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["subscription"]["plan_type"] == "yearly"

        status = billing_client.get("/api/subscription").json()
        assert status["has_access"] is True
        assert status["is_subscribed"] is True
        assert status["subscription_plan"] == "yearly"
        assert status["days_remaining"] in (364, 365)

    def test_bad_signature_is_400_and_changes_nothing(self, billing_client):
        billing_client.post("/api/billing/orders", json={"plan_type": "monthly", "currency": "USD"})
        signature = compute_signature(SECRET, "order_api_1", "pay_1")
        flipped = ("1" if signature[0] == "0" else "0") + signature[1:]

        response = billing_client.post("/api/billing/verify", json=_verify_body(signature=flipped))

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid payment signature"
        assert billing_client.get("/api/subscription").json()["has_access"] is False

    def test_plan_other_than_ordered_is_400(self, billing_client):
        billing_client.post("/api/billing/orders", json={"plan_type": "monthly", "currency": "USD"})

        response = billing_client.post("/api/billing/verify", json=_verify_body(plan_type="yearly"))

        assert response.status_code == 400
        assert response.json()["detail"] == "Plan does not match the order"
        assert billing_client.get("/api/subscription").json()["has_access"] is False

    def test_unknown_order_is_404(self, billing_client):
        response = billing_client.post("/api/billing/verify", json=_verify_body(order_id="order_unknown"))

        assert response.status_code == 404

    def test_replay_is_409(self, billing_client):
        billing_client.post("/api/billing/orders", json={"plan_type": "monthly", "currency": "USD"})
        assert billing_client.post("/api/billing/verify", json=_verify_body()).status_code == 200

        response = billing_client.post("/api/billing/verify", json=_verify_body())

        assert response.status_code == 409

    def test_other_users_order_is_404(self, billing_client, login):
        billing_client.post("/api/billing/orders", json={"plan_type": "monthly", "currency": "USD"})
        login("someone-else")

        response = billing_client.post("/api/billing/verify", json=_verify_body())

        assert response.status_code == 404
