"""In-memory chat sessions with streamed model replies."""

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Dict, Iterator, List, Optional

from reggenie.agents.chat.prompts import ERROR_NOTICE, GREETING, SYSTEM_PROMPT
from reggenie.agents.llm.client import stream_chat
from reggenie.database.local_store import LocalStorage, get_local_storage
from reggenie.models.records import ChatMessage, ChatRole, GenieFeedback, current_timestamp, record_id

logger = logging.getLogger(__name__)

FEEDBACK_KEY = "aide_genie_feedback"

_API_ROLES = {ChatRole.USER: "user", ChatRole.MODEL: "assistant"}


class ChatSession:
    """Ordered message list for one conversation. Never persisted."""

    def __init__(self, session_id: Optional[str] = None):
        self.id = session_id or uuid.uuid4().hex
        self.messages: List[ChatMessage] = [
            ChatMessage(id="init", role=ChatRole.MODEL, text=GREETING, timestamp=current_timestamp())
        ]

    def _history(self) -> List[Dict[str, str]]:
        history = [{"role": "system", "content": SYSTEM_PROMPT}]
        for message in self.messages:
            history.append({"role": _API_ROLES[message.role], "content": message.text})
        return history

    def send_message(self, text: str) -> Iterator[str]:
        """Append the user turn and a placeholder reply, then stream into the placeholder.

        Yields each chunk as it arrives. On failure the placeholder text is
        replaced with an error notice, which is yielded as the final chunk.
        """
        if not text or not text.strip():
            raise ValueError("Message must not be empty")

        now = current_timestamp()
        user_message = ChatMessage(id=str(now), role=ChatRole.USER, text=text, timestamp=now)
        history = self._history()
        history.append({"role": "user", "content": text})

        placeholder = ChatMessage(id=str(now + 1), role=ChatRole.MODEL, text="", timestamp=now)
        self.messages.extend([user_message, placeholder])

        full_text = ""
        try:
            for chunk in stream_chat(history):
                full_text += chunk
                placeholder.text = full_text
                yield chunk
        except Exception as e:
            logger.error(f"Chat error in session {self.id}: {e}")
            placeholder.text = ERROR_NOTICE
            yield ERROR_NOTICE


# Process-wide session registry, least recently used first
MAX_SESSIONS = 256

_sessions: "OrderedDict[str, ChatSession]" = OrderedDict()
_sessions_lock = threading.Lock()


def get_session(session_id: Optional[str] = None) -> ChatSession:
    """Return the session for an id, creating it when unknown.

    The registry keeps at most MAX_SESSIONS conversations; the least
    recently used one is dropped when a new session pushes past the cap.
    """
    with _sessions_lock:
        if session_id and session_id in _sessions:
            _sessions.move_to_end(session_id)
            return _sessions[session_id]
        session = ChatSession(session_id)
        _sessions[session.id] = session
        while len(_sessions) > MAX_SESSIONS:
            evicted, _ = _sessions.popitem(last=False)
            logger.info(f"Chat session {evicted} evicted")
        return session


def find_session(session_id: str) -> Optional[ChatSession]:
    """Existing session for an id, or None. Never creates one."""
    with _sessions_lock:
        session = _sessions.get(session_id)
        if session is not None:
            _sessions.move_to_end(session_id)
        return session


def clear_sessions() -> None:
    with _sessions_lock:
        _sessions.clear()


def submit_feedback(
    rating: int,
    comment: str = "",
    query_snippet: Optional[str] = None,
    response_snippet: Optional[str] = None,
    topic: Optional[str] = None,
    storage: Optional[LocalStorage] = None,
) -> GenieFeedback:
    storage = storage or get_local_storage()

    now = current_timestamp()
    feedback = GenieFeedback(
        id=record_id("FB", now),
        rating=rating,
        comment=comment,
        timestamp=now,
        query_snippet=query_snippet,
        response_snippet=response_snippet,
        topic=topic,
    )

    def prepend(existing):
        return [feedback.model_dump(mode="json")] + (existing if isinstance(existing, list) else [])

    storage.update_json(FEEDBACK_KEY, prepend, [])

    logger.info(f"Assistant feedback recorded: rating={rating}")
    return feedback


def get_feedback(storage: Optional[LocalStorage] = None) -> List[GenieFeedback]:
    storage = storage or get_local_storage()
    return [GenieFeedback(**f) for f in storage.get_json(FEEDBACK_KEY, []) or []]
