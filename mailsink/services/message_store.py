"""
Message Store

Bounded, newest-first collection of captured messages.

The SMTP controller runs its own event loop in a background thread while
the HTTP app runs on uvicorn's loop, so every access goes through one lock.
"""

import threading
from collections import deque
from typing import Deque, List, Tuple

from mailsink.core.logging import get_logger
from mailsink.core.metrics import record_evictions, record_store_cleared, record_store_size
from mailsink.schemas.message import Message

logger = get_logger(__name__)


class MessageStore:
    """In-memory message buffer with oldest-first eviction."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Store capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._messages: Deque[Message] = deque()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def insert_front(self, message: Message) -> List[Message]:
        """
        Store a message as the most recent one.

        Args:
            message: Decoded message

        Returns:
            list: Messages evicted to stay within capacity, oldest last
        """
        with self._lock:
            self._messages.appendleft(message)
            evicted = self._evict_overflow_locked()
            size = len(self._messages)

        record_store_size(size)
        record_evictions(len(evicted))
        if evicted:
            logger.debug(f"Evicted {len(evicted)} message(s), {size} stored")
        return evicted

    def evict_overflow(self) -> List[Message]:
        """Drop messages from the back until the store is within capacity."""
        with self._lock:
            evicted = self._evict_overflow_locked()
            size = len(self._messages)

        record_store_size(size)
        record_evictions(len(evicted))
        return evicted

    def _evict_overflow_locked(self) -> List[Message]:
        evicted = []
        while len(self._messages) > self._capacity:
            evicted.append(self._messages.pop())
        return evicted

    def snapshot(self) -> Tuple[Message, ...]:
        """Point-in-time copy of the stored messages, newest first."""
        with self._lock:
            return tuple(self._messages)

    def clear(self) -> int:
        """
        Remove every stored message.

        Returns:
            int: Number of messages removed
        """
        with self._lock:
            removed = len(self._messages)
            self._messages.clear()

        record_store_cleared()
        logger.info(f"Message store cleared ({removed} removed)")
        return removed
