"""
Study assistant chat session.

No server-side session exists: every turn resends the whole conversation.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

import httpx

from clients.chat_stream_client import stream_chat
from models.study_models import ChatMessage, ChatRole
from utils.exceptions import StudyPlanError

logger = logging.getLogger(__name__)

DeltaCallback = Callable[[str, str], None]


class ChatState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    ERRORED = "errored"


class ChatSession:
    """Holds one visible transcript and streams assistant replies into it."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
        history: Optional[List[ChatMessage]] = None
    ):
        self.url = url
        self.api_key = api_key
        self.http_client = http_client
        self.messages: List[ChatMessage] = list(history or [])
        self.state = ChatState.IDLE
        self.error_message: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self.state in (ChatState.SENDING, ChatState.STREAMING)

    def send(self, text: str, on_delta: Optional[DeltaCallback] = None) -> Optional[ChatMessage]:
        """
        Submit a user message and stream the assistant reply.

        Returns None without doing anything when the input is blank or a reply
        is already in flight. On failure the whole turn is removed from the
        transcript, error_message is set, and the error is re-raised.
        """
        assistant: Optional[ChatMessage] = None
        for delta, assistant in self._run_turn(text):
            if on_delta:
                on_delta(delta, assistant.content)
        return assistant

    def stream_reply(self, text: str) -> Iterator[str]:
        """Generator form of send: yields assistant deltas as they arrive."""
        turn = self._run_turn(text)
        try:
            for delta, _ in turn:
                yield delta
        finally:
            turn.close()

    def _run_turn(self, text: str) -> Iterator[Tuple[str, ChatMessage]]:
        with self._lock:
            if self.busy or not text or not text.strip():
                logger.info(f"Ignoring chat submit (state={self.state.value}, blank={not (text or '').strip()})")
                return
            turn_start = len(self.messages)
            self.messages.append(ChatMessage(role=ChatRole.USER, content=text))
            self.state = ChatState.SENDING
            self.error_message = None

        payload = [m.to_payload() for m in self.messages]
        assistant: Optional[ChatMessage] = None
        try:
            for delta in stream_chat(payload, url=self.url, api_key=self.api_key, http_client=self.http_client):
                if assistant is None:
                    assistant = ChatMessage(role=ChatRole.ASSISTANT, content="")
                    self.messages.append(assistant)
                    self.state = ChatState.STREAMING
                assistant.content += delta
                yield delta, assistant
        except GeneratorExit:
            # reader went away mid-reply
            del self.messages[turn_start:]
            self.state = ChatState.IDLE
            logger.info("Chat turn abandoned by the reader, discarded")
            raise
        except Exception as e:
            self._fail_turn(turn_start, e)
            raise

        self.state = ChatState.IDLE
        logger.info(f"Chat turn complete: {len(assistant.content) if assistant else 0} characters")

    def _fail_turn(self, turn_start: int, error: Exception) -> None:
        del self.messages[turn_start:]
        self.state = ChatState.ERRORED
        if isinstance(error, StudyPlanError):
            self.error_message = error.message
        else:
            self.error_message = "Failed to get response"
        logger.error(f"Chat turn failed, discarded: {error}")

    def reset(self) -> None:
        """Clear the transcript, e.g. when the assistant view is closed."""
        with self._lock:
            if self.busy:
                return
            self.messages = []
            self.state = ChatState.IDLE
            self.error_message = None
