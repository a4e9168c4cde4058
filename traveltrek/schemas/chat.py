"""Chat concierge Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from traveltrek.models.enums import ChatRole


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)


class ChatMessageResponse(BaseModel):
    id: str
    role: ChatRole
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ChatHistoryResponse(BaseModel):
    messages: list[ChatMessageResponse]
