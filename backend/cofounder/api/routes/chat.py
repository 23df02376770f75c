"""Chat API endpoints.

POST /api/chat            - Stateless relay: caller supplies messages and context
POST /api/chat/messages   - Persisted chat: server stores the turn and assembles context
GET  /api/chat/messages   - Stored history for one chat view
GET  /api/chat/context    - The assembled userContext / conversationContext
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from cofounder.core.auth import AuthUser, require_auth, require_subscription
from cofounder.db.base import session_scope
from cofounder.schemas.chat import (
    ChatContextResponse,
    ChatMessageResponse,
    ChatRelayRequest,
    SendMessageRequest,
)
from cofounder.services.chat_service import ChatService
from cofounder.services.context_assembler import ContextAssembler
from cofounder.services.llm_gateway import LLMGatewayClient, get_llm_gateway

router = APIRouter()

SSE_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}


@router.post("")
async def relay_chat(
    request: ChatRelayRequest,
    user: AuthUser = Depends(require_subscription),
    gateway: LLMGatewayClient = Depends(get_llm_gateway),
) -> StreamingResponse:
    """Forward a conversation to the LLM gateway and relay its SSE stream unmodified.

    Upstream 429/402 propagate; any other upstream failure is a 500.
    """
    service = ChatService(gateway)
    stream = await service.open_relay(
        [message.model_dump() for message in request.messages],
        request.user_context,
        request.conversation_context,
        request.context_type,
        user_country=request.user_country,
        current_date=request.current_date,
    )
    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(stream.aclose),
    )


@router.post("/messages")
async def send_message(
    request: SendMessageRequest,
    user: AuthUser = Depends(require_subscription),
    gateway: LLMGatewayClient = Depends(get_llm_gateway),
) -> StreamingResponse:
    """Store the user message and stream the assistant reply.

    The reply is relayed byte-for-byte and stored once the stream completes.
    """
    service = ChatService(gateway)
    async with session_scope() as session:
        stream, turn = await service.start_turn(
            session,
            user.user_id,
            request.content,
            context_type=request.context_type,
            context_id=request.context_id,
            user_country=request.user_country,
            current_date=request.current_date,
        )

    return StreamingResponse(
        service.relay_and_persist(
            stream,
            turn,
            user.user_id,
            context_type=request.context_type,
            context_id=request.context_id,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/messages", response_model=list[ChatMessageResponse])
async def list_messages(
    context_type: str = Query("general"),
    context_id: str | None = Query(None),
    user: AuthUser = Depends(require_auth),
) -> list[ChatMessageResponse]:
    """Up to 50 stored messages, oldest first."""
    service = ChatService()
    async with session_scope() as session:
        messages = await service.load_history(session, user.user_id, context_type, context_id)
        return [ChatMessageResponse.model_validate(message) for message in messages]


@router.get("/context", response_model=ChatContextResponse)
async def get_context(user: AuthUser = Depends(require_auth)) -> ChatContextResponse:
    async with session_scope() as session:
        user_context, conversation_context = await ContextAssembler().build(session, user.user_id)
    return ChatContextResponse(user_context=user_context, conversation_context=conversation_context)
