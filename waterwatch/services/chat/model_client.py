"""
Gemini chat client.

The ordered model list is tried front to back; when every model fails, the
whole sequence is retried up to ``max_retries`` times with a growing delay
(``retry_delay * attempt``).
"""

# Standard library imports
import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

# Third-party imports
from google.api_core import exceptions as google_exceptions
import google.generativeai as genai

# Local application imports
from waterwatch.core.monitoring import get_logger
from waterwatch.settings import settings

logger = get_logger(__name__)

CHAT_CONTEXT = (
    "You are a helpful assistant focused on water-related issues in the community. "
    "Your role is to help users report water problems, provide information about water quality, "
    "and offer guidance on water conservation. Always prioritize user safety and direct them "
    "to emergency services when appropriate."
)


class ChatUnavailable(Exception):
    """The assistant cannot run at all, e.g. no API key. The message is user-facing."""


class ModelCallError(Exception):
    def __init__(self, message: str, status_code: int | None = None, offline: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.offline = offline


@dataclass(frozen=True)
class ChatTurn:
    role: Literal["user", "assistant"]
    content: str


class ChatModel(Protocol):
    async def prepare(self) -> None: ...

    async def generate(self, history: Sequence[ChatTurn], prompt: str) -> str: ...


def _is_offline(error: BaseException) -> bool:
    cause: BaseException | None = error
    while cause is not None:
        if isinstance(cause, OSError) and not isinstance(cause, TimeoutError):
            return True
        cause = cause.__cause__ or cause.__context__
    return False


class GenerativeModelClient:
    def __init__(
        self,
        api_key: str | None = None,
        models: Sequence[str] | None = None,
        max_output_tokens: int | None = None,
        temperature: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        system_instruction: str = CHAT_CONTEXT,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.models = list(models or settings.GEMINI_MODELS)
        self.max_output_tokens = max_output_tokens or settings.GEMINI_MAX_OUTPUT_TOKENS
        self.temperature = settings.GEMINI_TEMPERATURE if temperature is None else temperature
        self.max_retries = settings.GEMINI_MAX_RETRIES if max_retries is None else max_retries
        self.retry_delay = settings.GEMINI_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        self.system_instruction = system_instruction
        self._configured = False

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def prepare(self) -> None:
        if not self.api_key:
            raise ChatUnavailable("Gemini API key is missing. The assistant is unavailable.")
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True

    def _model(self, model_name: str) -> genai.GenerativeModel:
        return genai.GenerativeModel(
            model_name,
            system_instruction=self.system_instruction,
            generation_config=genai.GenerationConfig(
                max_output_tokens=self.max_output_tokens,
                temperature=self.temperature,
            ),
        )

    async def _generate_with(self, model_name: str, history: Sequence[ChatTurn], prompt: str) -> str:
        chat = self._model(model_name).start_chat(
            history=[
                {"role": "model" if turn.role == "assistant" else "user", "parts": [turn.content]}
                for turn in history
            ]
        )
        response = await chat.send_message_async(prompt)
        return response.text

    async def generate(self, history: Sequence[ChatTurn], prompt: str) -> str:
        await self.prepare()

        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            for model_name in self.models:
                try:
                    return await self._generate_with(model_name, history, prompt)
                except (google_exceptions.GoogleAPIError, OSError, ValueError) as e:
                    last_error = e
                    logger.warning(f"Model {model_name} failed: {e}")

            if attempt < self.max_retries:
                delay = self.retry_delay * (attempt + 1)
                logger.info(f"Retrying model sequence (attempt {attempt + 1}/{self.max_retries}) in {delay}s")
                await asyncio.sleep(delay)

        status_code = getattr(last_error, "code", None)
        raise ModelCallError(
            f"All model attempts failed: {last_error}",
            status_code=status_code if isinstance(status_code, int) else None,
            offline=last_error is not None and _is_offline(last_error),
        ) from last_error
