"""Transfer event notification"""

import itertools
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict
import logging

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Published event types"""
    REGISTERED = "registered"
    CHUNK_READ = "chunk-read"
    CHUNK_ACKNOWLEDGED = "chunk-acknowledged"


@dataclass(frozen=True)
class TransferEvent:
    """
    Event record without payload
    Subscribers re-read the store for current state
    """
    key: str
    kind: EventKind


Subscriber = Callable[[TransferEvent], object]


class EventBus:
    """
    Synchronous observer list
    Each publish iterates an immutable snapshot of the subscribers, so
    unsubscribing during delivery only affects later publishes
    """

    def __init__(self):
        self._subscribers: Dict[int, Subscriber] = {}
        self._handles = itertools.count()
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback, returns a function that removes it"""
        with self._lock:
            handle = next(self._handles)
            self._subscribers[handle] = callback

        def unsubscribe():
            with self._lock:
                self._subscribers.pop(handle, None)

        return unsubscribe

    def publish(self, event: TransferEvent):
        """Deliver event to every subscriber in subscription order"""
        with self._lock:
            snapshot = tuple(self._subscribers.values())

        for callback in snapshot:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Subscriber failed on {event.kind.value} for {event.key}: {e}",
                             exc_info=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)
