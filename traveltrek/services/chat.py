"""Chat concierge conversations."""

import json
from collections.abc import AsyncIterator

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.models import ChatMessage, ChatRole, DestinationStatus, User
from traveltrek.services import destinations as destination_catalog
from traveltrek.services.ai import ConciergeAI

logger = structlog.get_logger()

HISTORY_LIMIT = 50


def sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


class ChatService:
    def __init__(self, db: AsyncSession, ai: ConciergeAI | None = None):
        self.db = db
        self.ai = ai or ConciergeAI()

    async def _save(self, user_id: str, role: ChatRole, content: str) -> ChatMessage:
        message = ChatMessage(user_id=user_id, role=role, content=content)
        self.db.add(message)
        await self.db.commit()
        return message

    async def converse(self, user: User, message: str) -> AsyncIterator[str]:
        """
        Persist the question and stream the answer as server-sent events.

        The assistant reply is stored once the stream is exhausted; the final
        event carries its id.
        """
        await self._save(user.id, ChatRole.USER, message)

        destinations = await destination_catalog.list_destinations(
            self.db, status=DestinationStatus.AVAILABLE
        )
        membership = user.membership

        chunks: list[str] = []
        async for chunk in self.ai.stream_reply(message, user, membership, destinations):
            chunks.append(chunk)
            yield sse_event({"chunk": chunk})

        reply = await self._save(user.id, ChatRole.ASSISTANT, "".join(chunks))
        logger.info("Chat reply sent", user_id=user.id, message_id=reply.id, chunks=len(chunks))
        yield sse_event({"done": True, "message_id": reply.id})

    async def history(self, user_id: str) -> list[ChatMessage]:
        """The most recent messages, oldest first."""
        result = await self.db.execute(
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(HISTORY_LIMIT)
        )
        return list(reversed(result.scalars().all()))

    async def clear(self, user_id: str) -> int:
        result = await self.db.execute(delete(ChatMessage).where(ChatMessage.user_id == user_id))
        await self.db.commit()
        logger.info("Chat history cleared", user_id=user_id, deleted=result.rowcount)
        return result.rowcount
