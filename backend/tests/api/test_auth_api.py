"""Tests for bearer-token authentication, profile provisioning and the paywall."""

import time
from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest

from cofounder.db.models.profile import Profile

pytestmark = pytest.mark.integration

SECRET = "test-jwt-secret-with-at-least-32-bytes!"


def make_token(sub: str | None = "user-auth", secret: str = SECRET, aud: str = "authenticated", **extra) -> str:
    claims = {"aud": aud, "exp": int(time.time()) + 3600, **extra}
    if sub is not None:
        claims["sub"] = sub
    return pyjwt.encode(claims, secret, algorithm="HS256")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestAuthentication:
    def test_missing_header(self, api_client):
        response = api_client.get("/api/subscription")

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing authorization header"
        assert "debug_id" in response.json()

    def test_bad_signature(self, api_client):
        response = api_client.get("/api/subscription", headers=bearer(make_token(secret="wrong-secret-wrong-secret-wrong!!")))

        assert response.status_code == 401

    def test_expired(self, api_client):
        token = make_token(exp=int(time.time()) - 60)

        response = api_client.get("/api/subscription", headers=bearer(token))

        assert response.status_code == 401
        assert response.json()["detail"] == "Token expired"

    def test_wrong_audience(self, api_client):
        response = api_client.get("/api/subscription", headers=bearer(make_token(aud="anon")))

        assert response.status_code == 401

    def test_missing_sub(self, api_client):
        response = api_client.get("/api/subscription", headers=bearer(make_token(sub=None)))

        assert response.status_code == 401

    def test_first_call_provisions_profile_without_access(self, api_client):
        token = make_token(user_metadata={"full_name": "Asha Rao"})

        response = api_client.get("/api/subscription", headers=bearer(token))

        assert response.status_code == 200
        assert response.json() == {
            "has_access": False,
            "is_legacy_user": False,
            "is_subscribed": False,
            "subscription_plan": None,
            "subscription_end_date": None,
            "days_remaining": None,
        }


class TestPaywall:
    def test_unsubscribed_user_gets_402(self, api_client):
        response = api_client.post(
            "/api/chat",
            json={"messages": [{"role": "user", "content": "hi"}]},
            headers=bearer(make_token()),
        )

        assert response.status_code == 402
        detail = response.json()["detail"]
        assert detail["code"] == "subscription_required"
        assert detail["upgrade_url"] == "/pricing"

    def test_ungated_routes_work_without_subscription(self, api_client):
        response = api_client.get("/api/ideas", headers=bearer(make_token()))

        assert response.status_code == 200
        assert response.json() == []

    async def test_legacy_user_passes(self, api_client, db_session, gateway_handler, use_gateway):
        db_session.add(Profile(user_id="user-legacy", is_legacy_user=True))
        await db_session.commit()
        use_gateway(gateway_handler("hello"))

        response = api_client.post(
            "/api/chat",
            json={"messages": [{"role": "user", "content": "hi"}]},
            headers=bearer(make_token(sub="user-legacy")),
        )

        assert response.status_code == 200

    async def test_expired_subscription_gets_402(self, api_client, db_session):
        db_session.add(
            Profile(
                user_id="user-expired",
                subscription_status="active",
                subscription_plan="monthly",
                subscription_end_date=datetime.now(timezone.utc) - timedelta(days=2),
            )
        )
        await db_session.commit()
        token = bearer(make_token(sub="user-expired"))

        assert api_client.post("/api/reviews", headers=token).status_code == 402

        status = api_client.get("/api/subscription", headers=token).json()
        assert status["has_access"] is False
        assert status["days_remaining"] <= -1
