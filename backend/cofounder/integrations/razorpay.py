"""Razorpay Integration: create checkout orders over the REST API.

Only the order endpoint is used; payment capture and signature checks happen
in the checkout widget and in ``cofounder.domain.payments``.
"""

import httpx
import structlog

from cofounder.core.config import Settings, get_settings
from cofounder.core.exceptions import PaymentProviderError
from cofounder.middleware.correlation import outbound_headers

logger = structlog.get_logger(__name__)


class RazorpayClient:
    """Client for the Razorpay Orders API (HTTP basic auth with key id/secret)."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def key_id(self) -> str:
        return self.settings.require("razorpay_key_id")

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str] | None = None,
    ) -> dict:
        """Create an order and return the provider's JSON payload.

        Args:
            amount: Amount in minor units (paise / cents)
            currency: ISO currency code
            receipt: Merchant receipt reference
            notes: Free-form key/value notes stored on the order

        Raises:
            ConfigurationError: key id or secret missing
            PaymentProviderError: provider answered non-2xx or without an order id
        """
        key_id = self.key_id
        key_secret = self.settings.require("razorpay_key_secret")

        async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
            response = await client.post(
                f"{self.settings.razorpay_api_url}/orders",
                auth=(key_id, key_secret),
                headers=outbound_headers(),
                json={
                    "amount": amount,
                    "currency": currency,
                    "receipt": receipt,
                    "notes": notes or {},
                },
            )

        if not response.is_success:
            logger.error(
                "razorpay_order_failed",
                status_code=response.status_code,
                body=response.text,
            )
            raise PaymentProviderError(f"Failed to create order: {response.status_code}")

        data = response.json()
        if not data.get("id"):
            raise PaymentProviderError("Payment provider returned no order id")
        return data


def get_razorpay_client() -> RazorpayClient:
    """FastAPI dependency; override in tests with a MockTransport-backed client."""
    return RazorpayClient()
