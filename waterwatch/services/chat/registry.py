# Standard library imports
from collections.abc import Callable
from typing import Any
from uuid import UUID

# Local application imports
from waterwatch.core.events import CHAT_PREFILL_TOPIC, EventChannel
from waterwatch.core.monitoring import get_logger
from waterwatch.services.chat.assistant import ChatAssistant
from waterwatch.services.chat.model_client import ChatModel
from waterwatch.services.chat.quick_actions import QuickAction

logger = get_logger(__name__)


class ConversationRegistry:
    """In-memory conversations; listens for prefill requests on the event channel."""

    def __init__(self, model: ChatModel, events: EventChannel):
        self._model = model
        self._conversations: dict[str, ChatAssistant] = {}
        self._unsubscribe: Callable[[], None] = events.subscribe(CHAT_PREFILL_TOPIC, self._on_prefill)

    def create(self, user_id: UUID | None = None, quick_actions: list[QuickAction] | None = None) -> ChatAssistant:
        assistant = ChatAssistant(self._model, quick_actions=quick_actions, user_id=user_id)
        self._conversations[assistant.id] = assistant
        return assistant

    def get(self, conversation_id: str, user_id: UUID | None = None) -> ChatAssistant | None:
        assistant = self._conversations.get(conversation_id)
        if assistant is None:
            return None
        if assistant.user_id is not None and assistant.user_id != user_id:
            return None
        return assistant

    def discard(self, conversation_id: str) -> bool:
        return self._conversations.pop(conversation_id, None) is not None

    def _on_prefill(self, payload: Any) -> None:
        conversation_id = payload.get("conversation_id") if isinstance(payload, dict) else None
        query = payload.get("query") if isinstance(payload, dict) else None
        assistant = self._conversations.get(conversation_id or "")
        if assistant is None or not query:
            logger.warning(f"Ignoring prefill for unknown conversation {conversation_id!r}")
            return
        assistant.prefill(query)

    def close(self) -> None:
        self._unsubscribe()
        self._conversations.clear()
