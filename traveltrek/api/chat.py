"""Chat concierge endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from traveltrek.api.deps import get_chat, get_current_user, get_rate_limiter
from traveltrek.errors import RateLimitedError
from traveltrek.models import User
from traveltrek.schemas.chat import ChatHistoryResponse, ChatMessageResponse, ChatRequest
from traveltrek.schemas.membership import MessageResponse
from traveltrek.services.chat import ChatService
from traveltrek.services.stores import RateLimiter

router = APIRouter(prefix="/chat")


@router.post("")
async def send_message(
    request: ChatRequest,
    user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
    chat: ChatService = Depends(get_chat),
) -> StreamingResponse:
    """
    Ask the concierge a question.

    The reply streams as server-sent events: `{"chunk": ...}` per piece of
    text, then `{"done": true, "message_id": ...}`.
    """
    decision = limiter.check(user.id)
    if not decision.allowed:
        wait = limiter.retry_after(decision)
        raise RateLimitedError(
            "Rate limit exceeded",
            detail=f"Please wait {wait} seconds before sending another message",
            remaining=decision.remaining,
            reset_at=decision.reset_at.isoformat(),
            retry_after_seconds=wait,
        )

    return StreamingResponse(
        chat.converse(user, request.message),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.get("/history", response_model=ChatHistoryResponse)
async def get_history(
    user: User = Depends(get_current_user),
    chat: ChatService = Depends(get_chat),
) -> ChatHistoryResponse:
    messages = await chat.history(user.id)
    return ChatHistoryResponse(messages=[ChatMessageResponse.model_validate(m) for m in messages])


@router.delete("/history", response_model=MessageResponse)
async def clear_history(
    user: User = Depends(get_current_user),
    chat: ChatService = Depends(get_chat),
) -> MessageResponse:
    await chat.clear(user.id)
    return MessageResponse(message="Chat history cleared successfully")
