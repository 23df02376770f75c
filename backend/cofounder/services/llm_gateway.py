"""LLMGatewayClient: OpenAI-compatible chat completions over httpx.

The gateway is a straight pass-through: no retries, no token accounting.
Non-2xx answers raise ``LLMGatewayError`` carrying the upstream status and
body; ``gateway_error_status`` translates that into the status/message the
API returns (429 and 402 propagate, everything else becomes a 500).
"""

from collections.abc import AsyncIterator

import httpx
import structlog

from cofounder.core.config import Settings, get_settings
from cofounder.core.exceptions import LLMGatewayError
from cofounder.middleware.correlation import outbound_headers

logger = structlog.get_logger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again in a moment."
CREDITS_EXHAUSTED_MESSAGE = "AI credits exhausted. Please add credits to continue."
UNAVAILABLE_MESSAGE = "AI service temporarily unavailable"


def gateway_error_status(exc: LLMGatewayError) -> tuple[int, str]:
    """Map an upstream failure to the (status_code, message) returned to the caller."""
    if exc.status_code == 429:
        return 429, RATE_LIMIT_MESSAGE
    if exc.status_code == 402:
        return 402, CREDITS_EXHAUSTED_MESSAGE
    return 500, UNAVAILABLE_MESSAGE


class GatewayStream:
    """Open streamed gateway response; async-iterates raw body bytes.

    Iterating to the end, or calling ``aclose()``, releases the response and
    its client. Safe to close more than once.
    """

    def __init__(self, response: httpx.Response, client: httpx.AsyncClient) -> None:
        self.response = response
        self._client = client
        self._closed = False

    @property
    def media_type(self) -> str:
        return "text/event-stream"

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self.response.aiter_bytes():
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.response.aclose()
        await self._client.aclose()


class LLMGatewayClient:
    """Thin client for the hosted LLM gateway."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.llm_timeout_seconds,
            transport=self._transport,
        )

    def _headers(self) -> dict[str, str]:
        api_key = self._settings.require("llm_gateway_api_key")
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            **outbound_headers(),
        }

    def _payload(self, system_prompt: str, messages: list[dict], stream: bool) -> dict:
        payload = {
            "model": self._settings.llm_model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
        }
        if stream:
            payload["stream"] = True
        return payload

    async def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        body = (await response.aread()).decode("utf-8", errors="replace")
        logger.error(
            "llm_gateway_error",
            status_code=response.status_code,
            body=body,
        )
        raise LLMGatewayError(response.status_code, body)

    async def open_stream(self, system_prompt: str, messages: list[dict]) -> GatewayStream:
        """Request a streamed completion and return the open byte stream.

        The status is checked before any byte is relayed, so callers can still
        answer with an error status.

        Raises:
            ConfigurationError: gateway API key missing
            LLMGatewayError: upstream answered non-2xx
        """
        headers = self._headers()
        client = self._client()
        try:
            request = client.build_request(
                "POST",
                self._settings.llm_gateway_url,
                headers=headers,
                json=self._payload(system_prompt, messages, stream=True),
            )
            response = await client.send(request, stream=True)
        except BaseException:
            await client.aclose()
            raise

        try:
            await self._raise_for_status(response)
        except BaseException:
            await response.aclose()
            await client.aclose()
            raise

        logger.info("llm_stream_opened", model=self._settings.llm_model, message_count=len(messages))
        return GatewayStream(response, client)

    async def complete(self, system_prompt: str, messages: list[dict]) -> str:
        """Non-streamed completion; returns ``choices[0].message.content`` or ""."""
        headers = self._headers()
        async with self._client() as client:
            response = await client.post(
                self._settings.llm_gateway_url,
                headers=headers,
                json=self._payload(system_prompt, messages, stream=False),
            )
            await self._raise_for_status(response)
            data = response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return content if isinstance(content, str) else ""


def get_llm_gateway() -> LLMGatewayClient:
    """FastAPI dependency; override in tests with a MockTransport-backed client."""
    return LLMGatewayClient()
