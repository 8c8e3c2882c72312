from __future__ import annotations

import logging
import uuid
from typing import Callable, Sequence

from lecture_pilot.core.errors import GenerationError
from lecture_pilot.schemas import ChatMessage
from lecture_pilot.services.generators import truncate
from lecture_pilot.services.llm import prompts
from lecture_pilot.services.llm.client import LLMClient

logger = logging.getLogger(__name__)

TUTOR_TRANSCRIPT_MAX_CHARS = 20_000
GREETING = (
    "Hi! I am your AI Tutor. I have analyzed the lecture. "
    "Ask me anything about the concepts or specific doubts!"
)


def greeting_message() -> ChatMessage:
    return ChatMessage(id="welcome", sender="assistant", text=GREETING)


def build_tutor_messages(
    transcript: str,
    history: Sequence[ChatMessage],
    text: str,
) -> list[dict[str, str]]:
    """System prompt with the transcript prefix, prior turns, then the new question."""
    messages = [
        {
            "role": "system",
            "content": prompts.TUTOR_SYSTEM_TEMPLATE.format(
                transcript=truncate(transcript, TUTOR_TRANSCRIPT_MAX_CHARS)
            ),
        }
    ]
    for m in history:
        messages.append({"role": m.sender, "content": m.text})
    messages.append({"role": "user", "content": text})
    return messages


class TutorSession:
    """
    Append-only chat over one lecture. A failed turn is dropped without a reply;
    only the `composing` flag tells the caller something was in flight.
    """

    def __init__(
        self,
        llm: LLMClient,
        transcript: str,
        messages: Sequence[ChatMessage] | None = None,
        on_change: Callable[["TutorSession"], None] | None = None,
    ) -> None:
        self.llm = llm
        self.transcript = transcript
        self.messages: tuple[ChatMessage, ...] = tuple(messages or (greeting_message(),))
        self.composing = False
        self._on_change = on_change

    def _append(self, message: ChatMessage) -> None:
        self.messages = (*self.messages, message)
        if self._on_change is not None:
            self._on_change(self)

    async def send(self, text: str) -> ChatMessage | None:
        text = (text or "").strip()
        if not text:
            return None

        history = self.messages
        # observers of the user message already see the reply as pending
        self.composing = True
        try:
            self._append(ChatMessage(id=uuid.uuid4().hex, sender="user", text=text))
            reply = await self.llm.chat(build_tutor_messages(self.transcript, history, text))
        except GenerationError as e:
            logger.warning("Tutor reply failed, dropping turn: %s", e)
            return None
        finally:
            self.composing = False

        answer = ChatMessage(id=uuid.uuid4().hex, sender="assistant", text=reply)
        self._append(answer)
        return answer
