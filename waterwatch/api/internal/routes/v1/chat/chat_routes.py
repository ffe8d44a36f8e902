"""
Chat assistant conversations.

A conversation lives in memory for as long as the server runs. Sending a
message waits for the reply; a failed send marks the user message ``error``
and puts the conversation in the error state until ``retry``.
"""

# Third-party imports
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.api.internal.utils.serializers import conversation_response
from waterwatch.core.db import get_async_session
from waterwatch.core.events import CHAT_PREFILL_TOPIC, EventChannel
from waterwatch.dependancies.common import get_conversations, get_current_user_optional, get_event_channel
from waterwatch.models.auth.user import User
from waterwatch.schemas.chat.chat_schemas import (
    ConversationResponse,
    PrefillRequest,
    QuickActionRequest,
    SendMessageRequest,
)
from waterwatch.schemas.common import BaseResponse
from waterwatch.services.chat.assistant import ChatAssistant
from waterwatch.services.chat.quick_actions import load_quick_actions
from waterwatch.services.chat.registry import ConversationRegistry
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult

router = APIRouter(prefix="/chat/conversations", tags=["Chat"])


def _not_found() -> None:
    ServiceResult.failure(ServiceError.Chat.CONVERSATION_NOT_FOUND).unwrap()


async def get_conversation(
    conversation_id: str,
    current_user: User | None = Depends(get_current_user_optional),
    conversations: ConversationRegistry = Depends(get_conversations),
) -> ChatAssistant:
    assistant = conversations.get(conversation_id, current_user.id if current_user else None)
    if assistant is None:
        _not_found()
    return assistant  # type: ignore[return-value]


@router.post("", response_model=BaseResponse[ConversationResponse], status_code=201)
async def start_conversation(
    current_user: User | None = Depends(get_current_user_optional),
    conversations: ConversationRegistry = Depends(get_conversations),
    db: AsyncSession = Depends(get_async_session),
) -> BaseResponse[ConversationResponse]:
    """Open a conversation; quick actions are personalized from the caller's recent reports."""
    user_id = current_user.id if current_user else None
    assistant = conversations.create(user_id, await load_quick_actions(db, user_id))
    await assistant.initialize()
    return BaseResponse.success(conversation_response(assistant))


@router.get("/{conversation_id}", response_model=BaseResponse[ConversationResponse])
async def get_conversation_state(
    assistant: ChatAssistant = Depends(get_conversation),
) -> BaseResponse[ConversationResponse]:
    return BaseResponse.success(conversation_response(assistant))


@router.post("/{conversation_id}/messages", response_model=BaseResponse[ConversationResponse])
async def send_message(
    payload: SendMessageRequest,
    assistant: ChatAssistant = Depends(get_conversation),
) -> BaseResponse[ConversationResponse]:
    """Blank messages and messages sent while a reply is pending are ignored."""
    await assistant.send(payload.message)
    return BaseResponse.success(conversation_response(assistant))


@router.post("/{conversation_id}/retry", response_model=BaseResponse[ConversationResponse])
async def retry_conversation(
    assistant: ChatAssistant = Depends(get_conversation),
) -> BaseResponse[ConversationResponse]:
    await assistant.retry()
    return BaseResponse.success(conversation_response(assistant))


@router.post("/{conversation_id}/quick-actions", response_model=BaseResponse[ConversationResponse])
async def run_quick_action(
    payload: QuickActionRequest,
    assistant: ChatAssistant = Depends(get_conversation),
) -> BaseResponse[ConversationResponse]:
    await assistant.run_quick_action(payload.action_id)
    return BaseResponse.success(conversation_response(assistant))


@router.post("/prefill", response_model=BaseResponse[dict])
async def prefill_conversation(
    payload: PrefillRequest,
    current_user: User | None = Depends(get_current_user_optional),
    conversations: ConversationRegistry = Depends(get_conversations),
    events: EventChannel = Depends(get_event_channel),
) -> BaseResponse[dict]:
    """Put a query into the conversation's input without sending it."""
    if conversations.get(payload.conversation_id, current_user.id if current_user else None) is None:
        _not_found()
    delivered = events.publish(CHAT_PREFILL_TOPIC, {"conversation_id": payload.conversation_id, "query": payload.query})
    return BaseResponse.success({"conversation_id": payload.conversation_id, "delivered": delivered})


@router.delete("/{conversation_id}", response_model=BaseResponse[dict])
async def close_conversation(
    assistant: ChatAssistant = Depends(get_conversation),
    conversations: ConversationRegistry = Depends(get_conversations),
) -> BaseResponse[dict]:
    """Drop the conversation and its history."""
    conversations.discard(assistant.id)
    return BaseResponse.success({"conversation_id": assistant.id, "closed": True})
