"""Live transfer state for display"""

import time
from collections import deque
from typing import Callable, Deque, Dict, Optional
import logging

from ..errors import NoSuchSource
from .events import EventKind, TransferEvent
from .store import TransferStore

logger = logging.getLogger(__name__)


class TransferMonitor:
    """
    Keeps the most recent events and logs progress, throttled per source
    Reads the store on each event since events carry no payload
    """

    def __init__(self, store: TransferStore, history: int = 5,
                 interval: float = 0.2):
        self.store = store
        self.interval = interval
        self.events: Deque[TransferEvent] = deque(maxlen=history)
        self._last_logged: Dict[str, float] = {}
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self) -> Callable[[], None]:
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_event)
        return self.detach

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_event(self, event: TransferEvent):
        self.events.append(event)

        if event.kind is not EventKind.CHUNK_ACKNOWLEDGED:
            return

        try:
            window = self.store.get_window(event.key)
        except NoSuchSource:
            return

        now = time.monotonic()
        last = self._last_logged.get(event.key)
        if window.is_terminal or last is None or now - last >= self.interval:
            self._last_logged[event.key] = now
            logger.info(f"{event.key}: {window.chunks_acknowledged}/{window.total_chunks} "
                        f"chunks ({window.left}/{window.total_length} bytes)")
        if window.is_terminal:
            self._last_logged.pop(event.key, None)

    def report(self) -> dict:
        """Current state of all windows plus recent events"""
        return {
            'state': self.store.snapshot(),
            'events': [
                {'key': e.key, 'kind': e.kind.value} for e in self.events
            ]
        }
