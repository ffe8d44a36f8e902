# Standard library imports
from datetime import datetime

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    message: str = Field(..., max_length=4000)


class QuickActionRequest(BaseModel):
    action_id: str


class PrefillRequest(BaseModel):
    conversation_id: str
    query: str = Field(..., min_length=1, max_length=4000)


class ChatMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    role: str
    content: str
    status: str
    timestamp: datetime


class QuickActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    label: str
    query: str
    category: str


class ChatErrorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: str
    message: str


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    state: str
    messages: list[ChatMessageResponse]
    error: ChatErrorResponse | None = None
    quick_actions: list[QuickActionResponse]
    draft: str | None = None
