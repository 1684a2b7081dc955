"""
Manages per-session conversation memory used to give providers short-term context.

Each session id owns an ordered list of conversation turns held in process memory.
The list is bounded: once it grows past the configured cap the oldest turns are
dropped first. Nothing is persisted, so a restart clears every session.

Sessions are fully isolated. Every lookup is keyed by session id, and each session
has its own lock so concurrent appends to one session are serialized while appends
to different sessions never contend with each other.
"""

import logging
import threading
import uuid
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Tuple

from shared.models import ConversationTurn

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 20
DEFAULT_CONTEXT_CHARS = 200


def generate_interaction_id() -> str:
    """
    Generates a unique interaction ID using UUID4.

    Used to correlate the log lines of one request through the pipeline.

    Returns:
        str: A UUID4 string (e.g., "a1b2c3d4-e5f6-7890-abcd-ef1234567890")
    """
    return str(uuid.uuid4())


class SessionMemory:
    """
    Bounded, per-session ordered turn log.

    Args:
        max_turns (int): Maximum number of turns kept per session (FIFO eviction).
        context_chars (int): Character budget per turn when turns are read back
            for prompt context.
    """

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS, context_chars: int = DEFAULT_CONTEXT_CHARS):
        if max_turns < 2:
            raise ValueError("max_turns must allow at least one exchange")
        self.max_turns = max_turns
        self.context_chars = context_chars
        self._sessions: Dict[str, Deque[ConversationTurn]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _session_for(self, session_id: str) -> Tuple[threading.Lock, Deque[ConversationTurn]]:
        # The registry lock is only held long enough to create a session lazily.
        with self._registry_lock:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = self._locks[session_id] = threading.Lock()
                self._sessions[session_id] = deque(maxlen=self.max_turns)
            return lock, self._sessions[session_id]

    def _existing(self, session_id: str) -> Optional[Tuple[threading.Lock, Deque[ConversationTurn]]]:
        with self._registry_lock:
            lock = self._locks.get(session_id)
            if lock is None:
                return None
            return lock, self._sessions[session_id]

    def append(self, session_id: str, turn: ConversationTurn) -> None:
        """Append one turn, evicting the oldest when the session is full."""
        lock, turns = self._session_for(session_id)
        with lock:
            turns.append(turn)

    def append_exchange(self, session_id: str, question: str, answer: str) -> None:
        """
        Record a user question and the final assistant answer as one atomic pair.

        Both turns are appended under the session lock, so a concurrent reader or
        writer of the same session never observes half of an exchange.
        """
        lock, turns = self._session_for(session_id)
        with lock:
            turns.append(ConversationTurn(role="user", content=question))
            turns.append(ConversationTurn(role="assistant", content=answer))
        logger.debug("Stored exchange for session %s (%d turns)", session_id, self.size(session_id))

    def recent(self, session_id: str, n: int) -> List[ConversationTurn]:
        """
        Return at most the last `n` turns of a session, oldest first.

        Turn content is truncated to `context_chars` to bound prompt size. The returned
        turns are copies; the stored history is never modified by readers. Reading an
        unknown session returns an empty list and does not create it.
        """
        if n <= 0:
            return []
        session = self._existing(session_id)
        if session is None:
            return []
        lock, stored = session
        with lock:
            turns = list(stored)[-n:]
        return [
            ConversationTurn(role=turn.role, content=turn.content[:self.context_chars], timestamp=turn.timestamp)
            for turn in turns
        ]

    def topics(self, session_id: str, categorize: Callable[[str], str], n: Optional[int] = None) -> List[str]:
        """
        Distinct topic categories of the user turns in a session, in first-seen order.

        Args:
            session_id (str): Session to inspect.
            categorize (Callable[[str], str]): Maps a question to its category.
            n (Optional[int]): Only consider the last `n` turns; all turns when None.
        """
        turns = self.recent(session_id, n if n is not None else self.max_turns)
        seen: List[str] = []
        for turn in turns:
            if turn.role != "user":
                continue
            category = categorize(turn.content)
            if category not in seen:
                seen.append(category)
        return seen

    def size(self, session_id: str) -> int:
        with self._registry_lock:
            turns = self._sessions.get(session_id)
            return len(turns) if turns is not None else 0

    def clear(self, session_id: str) -> bool:
        """
        Forget a session entirely.

        Returns:
            bool: True if the session existed and was removed, False otherwise.
        """
        with self._registry_lock:
            lock = self._locks.pop(session_id, None)
            turns = self._sessions.pop(session_id, None)
        if lock is None:
            return False
        # A writer that fetched the session before removal appends to the detached deque.
        with lock:
            turns.clear()
        logger.info("Cleared conversation memory for session %s", session_id)
        return True
