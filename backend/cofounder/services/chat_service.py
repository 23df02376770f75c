"""ChatService: streaming relay to the LLM gateway and persisted chat turns.

Two flows share the relay:

- ``open_relay``: the caller supplies messages and both context strings; the
  gateway's SSE bytes are returned unmodified.
- ``start_turn`` + ``relay_and_persist``: the server stores the user message,
  assembles context itself, relays the same unmodified bytes while
  reassembling a copy of the assistant text, and stores the assistant message
  once the stream completes with content.
"""

from collections.abc import AsyncIterator

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.db.base import session_scope
from cofounder.db.models.chat_message import ChatMessage
from cofounder.domain.conversation import ConversationTurn, Role
from cofounder.domain.prompts import ContextType, build_chat_system_prompt
from cofounder.services.context_assembler import ContextAssembler
from cofounder.services.llm_gateway import GatewayStream, LLMGatewayClient
from cofounder.services.stream_reassembler import StreamReassembler, collect_text

logger = structlog.get_logger(__name__)

HISTORY_LIMIT = 50


class ChatService:
    def __init__(self, gateway: LLMGatewayClient | None = None, assembler: ContextAssembler | None = None):
        self.gateway = gateway
        self.assembler = assembler or ContextAssembler()

    async def open_relay(
        self,
        messages: list[dict[str, str]],
        user_context: str | None,
        conversation_context: str | None,
        context_type: ContextType | str = ContextType.GENERAL,
        user_country: str | None = None,
        current_date: str | None = None,
    ) -> GatewayStream:
        """Build the system prompt and open a streamed completion.

        Raises:
            ConfigurationError: gateway key missing
            LLMGatewayError: upstream answered non-2xx (nothing has been relayed yet)
        """
        system_prompt = build_chat_system_prompt(
            user_context,
            conversation_context,
            context_type,
            user_country=user_country,
            current_date=current_date,
        )
        return await self.gateway.open_stream(system_prompt, messages)

    async def generate(self, prompt: str, context_type: ContextType | str) -> str:
        """One-shot task prompt through the streaming relay; returns the reassembled text.

        Task prompts carry no stored context, so the template defaults apply.
        """
        stream = await self.open_relay([{"role": Role.USER.value, "content": prompt}], "", "", context_type)
        return await collect_text(stream)

    async def load_history(
        self,
        session: AsyncSession,
        user_id: str,
        context_type: ContextType | str = ContextType.GENERAL,
        context_id: str | None = None,
        limit: int = HISTORY_LIMIT,
    ) -> list[ChatMessage]:
        """The latest ``limit`` stored messages for one chat view, oldest first.

        ``general`` shows every message; other context types filter on
        context_type, and on context_id when given.
        """
        query = select(ChatMessage).where(ChatMessage.user_id == user_id)
        if context_type != ContextType.GENERAL:
            query = query.where(ChatMessage.context_type == str(context_type))
        if context_id:
            query = query.where(ChatMessage.context_id == context_id)
        result = await session.execute(query.order_by(ChatMessage.created_at.desc()).limit(limit))
        newest_first = result.scalars().all()
        return list(reversed(newest_first))

    async def start_turn(
        self,
        session: AsyncSession,
        user_id: str,
        content: str,
        context_type: ContextType | str = ContextType.GENERAL,
        context_id: str | None = None,
        user_country: str | None = None,
        current_date: str | None = None,
    ) -> tuple[GatewayStream, ConversationTurn]:
        """Store the user message, assemble context and open the gateway stream."""
        history = await self.load_history(session, user_id, context_type, context_id)
        turn = ConversationTurn(messages=[{"role": m.role, "content": m.content} for m in history])
        turn.add_user_message(content)

        session.add(
            ChatMessage(
                user_id=user_id,
                role=Role.USER.value,
                content=content,
                context_type=str(context_type),
                context_id=context_id,
            )
        )
        await session.commit()

        user_context, conversation_context = await self.assembler.build(session, user_id)
        stream = await self.open_relay(
            turn.messages,
            user_context,
            conversation_context,
            context_type,
            user_country=user_country,
            current_date=current_date,
        )
        return stream, turn

    async def relay_and_persist(
        self,
        stream: AsyncIterator[bytes],
        turn: ConversationTurn,
        user_id: str,
        context_type: ContextType | str = ContextType.GENERAL,
        context_id: str | None = None,
    ) -> AsyncIterator[bytes]:
        """Yield the gateway bytes unmodified; store the assistant reply at the end.

        If the caller disconnects, the generator is closed, the upstream
        response is released and nothing is stored.
        """
        reassembler = StreamReassembler()
        text = ""
        try:
            async for chunk in stream:
                for delta in reassembler.feed(chunk):
                    text += delta
                    turn.apply_assistant_text(text)
                yield chunk
            for delta in reassembler.finish():
                text += delta
                turn.apply_assistant_text(text)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        assistant_text = turn.freeze()
        if not assistant_text:
            logger.info("chat_stream_empty", user_id=user_id, context_type=str(context_type))
            return

        async with session_scope() as session:
            session.add(
                ChatMessage(
                    user_id=user_id,
                    role=Role.ASSISTANT.value,
                    content=assistant_text,
                    context_type=str(context_type),
                    context_id=context_id,
                )
            )
            await session.commit()
        logger.info("chat_reply_stored", user_id=user_id, chars=len(assistant_text))
