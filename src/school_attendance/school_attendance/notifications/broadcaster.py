from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Dict, Iterator, Mapping, Optional, Set

from ..core.constants import DEFAULT_NOTIFY_QUEUE_SIZE

logger = logging.getLogger(__name__)


class Subscription:
    """One listener's mailbox on one topic."""

    def __init__(self, broadcaster: "AttendanceBroadcaster", topic: str, maxsize: int):
        self.topic = topic
        self._broadcaster = broadcaster
        self._queue: "queue.Queue[Mapping[str, Any]]" = queue.Queue(maxsize=maxsize)
        self.closed = False

    def offer(self, payload: Mapping[str, Any]) -> bool:
        try:
            self._queue.put_nowait(payload)
            return True
        except queue.Full:
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[Mapping[str, Any]]:
        """Next message, or None if nothing arrived within ``timeout``."""

        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def messages(self, *, timeout: float) -> Iterator[Optional[Mapping[str, Any]]]:
        # Yields None on idle timeouts so callers can send keep-alives.
        while not self.closed:
            yield self.get(timeout=timeout)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._broadcaster.unsubscribe(self)


class AttendanceBroadcaster:
    """In-process pub/sub used to push attendance updates to open sessions.

    Each listener gets every message at most once; a full mailbox drops the message.
    """

    def __init__(self, *, queue_size: int = DEFAULT_NOTIFY_QUEUE_SIZE):
        self._queue_size = int(queue_size)
        self._lock = threading.Lock()
        self._subscribers: Dict[str, Set[Subscription]] = {}

    def subscribe(self, topic: str) -> Subscription:
        sub = Subscription(self, topic, self._queue_size)
        with self._lock:
            self._subscribers.setdefault(topic, set()).add(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subscribers.get(sub.topic)
            if subs is None:
                return
            subs.discard(sub)
            if not subs:
                del self._subscribers[sub.topic]

    def listener_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, ()))

    def notify(self, topic: str, payload: Mapping[str, Any]) -> None:
        with self._lock:
            targets = list(self._subscribers.get(topic, ()))
        for sub in targets:
            if not sub.offer(payload):
                logger.warning("Dropped update for a slow listener on %s", topic)
