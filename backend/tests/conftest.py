"""Shared test fixtures for all test groups."""

import os

# Env must be set before any cofounder module builds Settings (get_settings is cached)
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret-with-at-least-32-bytes!")
os.environ.setdefault("LLM_GATEWAY_API_KEY", "test-llm-key")
os.environ.setdefault("LLM_GATEWAY_URL", "https://gateway.test/v1/chat/completions")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("RAZORPAY_API_URL", "https://razorpay.test/v1")

import json

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from cofounder.db.base import Base


def sse_frame(content: str) -> str:
    """One gateway SSE frame carrying a text delta."""
    return f"data: {json.dumps({'choices': [{'delta': {'content': content}}]})}\n\n"


def sse_body(*deltas: str, done: bool = True) -> bytes:
    """A complete gateway SSE body for the given deltas."""
    body = "".join(sse_frame(delta) for delta in deltas)
    if done:
        body += "data: [DONE]\n\n"
    return body.encode("utf-8")


async def byte_chunks(*chunks: bytes):
    """Async byte stream yielding exactly the given network chunks."""
    for chunk in chunks:
        yield chunk


def streaming_gateway(*deltas: str, status_code: int = 200, error_body: str = ""):
    """MockTransport handler answering every request with an SSE stream (or an error status)."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if status_code != 200:
            return httpx.Response(status_code, text=error_body)
        return httpx.Response(200, content=sse_body(*deltas), headers={"content-type": "text/event-stream"})

    handler.requests = requests
    return handler


@pytest.fixture
def db_url(tmp_path) -> str:
    """File-backed SQLite URL so the API client's event loop sees the same data."""
    return f"sqlite+aiosqlite:///{tmp_path / 'cofounder_test.db'}"


@pytest.fixture
async def engine(db_url: str) -> AsyncEngine:
    """Create the SQLite test engine and set the global session factory.

    Services that open their own sessions via get_session_factory() use it.
    """
    import cofounder.db.base as db_mod
    import cofounder.db.models  # noqa: F401

    engine = create_async_engine(db_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    db_mod._engine = engine
    db_mod._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    yield engine

    db_mod._engine = None
    db_mod._session_factory = None
    await engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncSession:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_sse():
    return sse_body


@pytest.fixture
def make_frame():
    return sse_frame


@pytest.fixture
def chunked():
    return byte_chunks


@pytest.fixture
def gateway_handler():
    return streaming_gateway
