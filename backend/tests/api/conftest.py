"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from cofounder.core.auth import AuthUser, require_auth, require_subscription
from cofounder.integrations.razorpay import RazorpayClient, get_razorpay_client
from cofounder.services.llm_gateway import LLMGatewayClient, get_llm_gateway


def override_auth(user: AuthUser):
    """Dependency override factory for require_auth / require_subscription."""

    async def _override():
        return user

    return _override


@pytest.fixture
def test_app(engine, db_url) -> FastAPI:
    """FastAPI app wired like the real one, with a lifespan bound to the test database.

    The engine fixture ensures tables exist before the TestClient starts.
    """
    import cofounder.core.auth as auth_mod
    from cofounder.api.routes import api_router
    from cofounder.db import close_db, init_db
    from cofounder.main import register_exception_handlers

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        """Initialize the DB in the TestClient's event loop."""
        import cofounder.db.base as db_mod

        db_mod._engine = None
        db_mod._session_factory = None
        await init_db(db_url)
        yield
        await close_db()

    auth_mod._provisioned_cache.clear()

    app = FastAPI(title="AI Co-Founder - Test Client", lifespan=test_lifespan)
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


@pytest.fixture
def api_client(test_app):
    with TestClient(test_app) as client:
        yield client


@pytest.fixture
def login(test_app):
    """Authenticate requests as ``user_id``; ``subscribed`` also bypasses the paywall."""

    def _login(user_id: str, subscribed: bool = True) -> AuthUser:
        user = AuthUser(user_id=user_id, claims={"sub": user_id})
        test_app.dependency_overrides[require_auth] = override_auth(user)
        if subscribed:
            test_app.dependency_overrides[require_subscription] = override_auth(user)
        else:
            test_app.dependency_overrides.pop(require_subscription, None)
        return user

    return _login


@pytest.fixture
def use_gateway(test_app):
    """Route LLM gateway calls to a MockTransport handler."""

    def _use(handler) -> None:
        test_app.dependency_overrides[get_llm_gateway] = lambda: LLMGatewayClient(
            transport=httpx.MockTransport(handler)
        )

    return _use


@pytest.fixture
def use_razorpay(test_app):
    """Route Razorpay calls to a MockTransport handler."""

    def _use(handler) -> None:
        test_app.dependency_overrides[get_razorpay_client] = lambda: RazorpayClient(
            transport=httpx.MockTransport(handler)
        )

    return _use
