# Standard library imports
from dataclasses import dataclass
from enum import Enum

# Local application imports
from waterwatch.services.chat.model_client import ChatUnavailable, ModelCallError


class ChatErrorKind(str, Enum):
    OFFLINE = "offline"
    MODEL_UNAVAILABLE = "model_unavailable"
    RATE_LIMITED = "rate_limited"
    SERVICE_ERROR = "service_error"
    GENERIC = "generic"


MESSAGES = {
    ChatErrorKind.OFFLINE: "No internet connection. Please check your network and try again.",
    ChatErrorKind.MODEL_UNAVAILABLE: "The AI model is temporarily unavailable. Please try again in a moment.",
    ChatErrorKind.RATE_LIMITED: "Too many requests. Please wait a moment before trying again.",
    ChatErrorKind.SERVICE_ERROR: "The AI service is experiencing issues. Please try again later.",
}


@dataclass(frozen=True)
class ChatError:
    kind: ChatErrorKind
    message: str


def classify(error: Exception, default_message: str = "Error generating response") -> ChatError:
    """Map a chat failure onto a kind and a message the user can act on."""
    if isinstance(error, ChatUnavailable):
        return ChatError(ChatErrorKind.GENERIC, str(error))

    if isinstance(error, ModelCallError):
        if error.offline:
            return ChatError(ChatErrorKind.OFFLINE, MESSAGES[ChatErrorKind.OFFLINE])
        status_code = error.status_code
    else:
        status_code = None

    text = str(error)
    if status_code == 404 or (status_code is None and "404" in text):
        kind = ChatErrorKind.MODEL_UNAVAILABLE
    elif status_code == 429 or (status_code is None and "429" in text):
        kind = ChatErrorKind.RATE_LIMITED
    elif (status_code is not None and status_code >= 500) or (status_code is None and "500" in text):
        kind = ChatErrorKind.SERVICE_ERROR
    else:
        return ChatError(ChatErrorKind.GENERIC, default_message)
    return ChatError(kind, MESSAGES[kind])
