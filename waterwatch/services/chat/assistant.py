"""
Conversation state for one chat widget.

    idle -> initializing -> ready <-> sending
    any -> error, and error --retry()--> initializing

History lives in memory only and goes away with the conversation.
"""

# Standard library imports
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Literal
import uuid

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger
from waterwatch.services.chat.errors import ChatError, classify
from waterwatch.services.chat.model_client import ChatModel, ChatTurn, ChatUnavailable, ModelCallError
from waterwatch.services.chat.quick_actions import DEFAULT_QUICK_ACTIONS, QuickAction


class ChatState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    READY = "ready"
    SENDING = "sending"
    ERROR = "error"


class MessageStatus(str, Enum):
    SENDING = "sending"
    SENT = "sent"
    ERROR = "error"


@dataclass
class ChatMessage:
    role: Literal["user", "assistant"]
    content: str
    status: MessageStatus
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class ChatAssistant:
    def __init__(
        self,
        model: ChatModel,
        quick_actions: list[QuickAction] | None = None,
        conversation_id: str | None = None,
        user_id: uuid.UUID | None = None,
    ):
        self.id = conversation_id or str(uuid.uuid4())
        self.user_id = user_id
        self._model = model
        self.state = ChatState.IDLE
        self.messages: list[ChatMessage] = []
        self.error: ChatError | None = None
        self.quick_actions = list(quick_actions or DEFAULT_QUICK_ACTIONS)
        self.draft: str | None = None
        self.logger = get_contextual_logger(__name__, conversation_id=self.id, user_id=user_id)

    @property
    def is_busy(self) -> bool:
        return self.state in (ChatState.INITIALIZING, ChatState.SENDING)

    async def initialize(self) -> bool:
        if self.state not in (ChatState.IDLE, ChatState.ERROR):
            return self.state == ChatState.READY

        self.state = ChatState.INITIALIZING
        try:
            await self._model.prepare()
        except (ChatUnavailable, ModelCallError) as e:
            self._fail(e, "Failed to initialize chat")
            return False

        self.error = None
        self.state = ChatState.READY
        return True

    async def retry(self) -> bool:
        """Manual recovery from the error state."""
        if self.state != ChatState.ERROR:
            return self.state == ChatState.READY
        self.error = None
        return await self.initialize()

    def _fail(self, error: Exception, default_message: str) -> None:
        self.error = classify(error, default_message)
        self.state = ChatState.ERROR
        self.logger.warning(f"{default_message}: {error} ({self.error.kind.value})")

    def _history(self) -> list[ChatTurn]:
        return [
            ChatTurn(role=message.role, content=message.content)
            for message in self.messages
            if message.status == MessageStatus.SENT
        ]

    async def send(self, text: str) -> ChatMessage | None:
        """
        Send ``text`` and wait for the reply. Blank input and input while busy
        are ignored (returns None). On failure the user message is marked
        ``error`` and the returned value is that message.
        """
        content = (text or "").strip()
        if not content or self.is_busy:
            return None

        if self.state != ChatState.READY and not await self.initialize():
            return None

        history = self._history()
        user_message = ChatMessage(role="user", content=content, status=MessageStatus.SENDING)
        self.messages.append(user_message)
        self.state = ChatState.SENDING
        self.error = None
        self.draft = None

        try:
            reply = await self._model.generate(history, content)
        except (ChatUnavailable, ModelCallError) as e:
            user_message.status = MessageStatus.ERROR
            self._fail(e, "Error generating response")
            return user_message

        assistant_message = ChatMessage(role="assistant", content=reply, status=MessageStatus.SENT)
        self.messages.append(assistant_message)
        user_message.status = MessageStatus.SENT
        self.state = ChatState.READY
        return assistant_message

    async def run_quick_action(self, action_id: str) -> ChatMessage | None:
        action = next((action for action in self.quick_actions if action.id == action_id), None)
        if action is None:
            return None
        return await self.send(action.query)

    def prefill(self, query: str) -> None:
        self.draft = query.strip() or None
