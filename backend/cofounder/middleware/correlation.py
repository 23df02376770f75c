"""Request correlation ids.

Every response carries ``X-Request-ID`` (echoed when the client sends one).
The same id is forwarded on outbound calls to the LLM gateway and Razorpay
so their logs can be matched to ours.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI

HEADER_NAME = "X-Request-ID"


def setup_correlation_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=HEADER_NAME,
        generator=lambda: str(uuid.uuid4()),
        validator=None,
        transformer=lambda a: a,
    )


def get_correlation_id() -> str | None:
    """Current request's correlation id, or None outside a request."""
    return correlation_id.get(None)


def outbound_headers() -> dict[str, str]:
    """Headers to attach to upstream requests made on behalf of the current request."""
    cid = get_correlation_id()
    return {HEADER_NAME: cid} if cid else {}
