"""Registry of in-flight transfer windows"""

import itertools
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional
import logging

from ..io.source import ByteSource
from ..errors import EndOfData, NoSuchSource, SourceReadFailure
from .events import EventBus, EventKind, Subscriber, TransferEvent
from .window import TransferWindow

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 16 * 1024  # 16KB


class TransferStore:
    """
    Pull-based chunk transfer protocol
    Chunks are pulled instead of pushed: the next chunk only becomes
    readable once the current one has been acknowledged
    """

    def __init__(self, source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.source = source
        self.chunk_size = chunk_size
        self.events = EventBus()

        self._windows: Dict[str, TransferWindow] = {}
        self._registry_lock = threading.Lock()
        self._sequence = itertools.count(1)

    def _new_key(self, source_id: str) -> str:
        # Counter suffix keeps keys unique within one millisecond
        name = Path(source_id).name or source_id
        return f"{name}-{int(time.time() * 1000)}-{next(self._sequence)}"

    def _window(self, key: str) -> TransferWindow:
        with self._registry_lock:
            window = self._windows.get(key)
        if window is None:
            raise NoSuchSource(key)
        return window

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Listen for every published event, returns the unsubscribe handle"""
        return self.events.subscribe(callback)

    def register(self, source_id: str, total_length: Optional[int] = None) -> str:
        """
        Create a window for a new source and notify subscribers
        @emits registered
        """
        if total_length is None:
            total_length = self.source.size(source_id)

        window = TransferWindow.create(source_id, total_length, self.chunk_size)
        with self._registry_lock:
            key = self._new_key(source_id)
            self._windows[key] = window

        logger.info(f"Registered {source_id} as {key} ({total_length} bytes, "
                    f"{window.total_chunks} chunks)")
        self.events.publish(TransferEvent(key, EventKind.REGISTERED))
        return key

    def has_next(self, key: str) -> bool:
        with self._registry_lock:
            window = self._windows.get(key)
        if window is None:
            return False
        with window.lock:
            return not window.is_terminal

    async def read_chunk(self, key: str) -> bytes:
        """
        Read the bytes inside the current window without moving it
        @raises NoSuchSource, EndOfData, SourceReadFailure
        @emits chunk-read
        """
        window = self._window(key)
        with window.lock:
            if window.is_terminal:
                raise EndOfData(key)
            left, right = window.bounds

        try:
            chunk = await self.source.read(window.source_id, left, right)
        except (SourceReadFailure, OSError) as e:
            raise SourceReadFailure(key, f"Read of {key} [{left}, {right}) failed: {e}") from e

        if not chunk or not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise SourceReadFailure(key, f"No usable chunk for {key} [{left}, {right})")
        chunk = bytes(chunk)
        if len(chunk) != right - left:
            raise SourceReadFailure(
                key, f"Partial chunk for {key}: {len(chunk)} of {right - left} bytes"
            )

        logger.debug(f"Read {key} [{left}, {right})")
        self.events.publish(TransferEvent(key, EventKind.CHUNK_READ))
        return chunk

    def acknowledge_chunk(self, key: str):
        """
        Confirm receipt of the current chunk and move the window to the next one
        Must be called at most once per delivered chunk
        The event is published after the window lock is released, so subscribers
        may call back into the store. Acknowledgements from one task publish in
        advance order; concurrent threads acknowledging the same key may not.
        @raises NoSuchSource, EndOfData
        @emits chunk-acknowledged
        """
        window = self._window(key)
        with window.lock:
            if window.is_terminal:
                raise EndOfData(key)
            window.advance()
            left, right = window.bounds

        logger.debug(f"Acknowledged {key}, window now [{left}, {right})")
        self.events.publish(TransferEvent(key, EventKind.CHUNK_ACKNOWLEDGED))

    def get_window(self, key: str) -> TransferWindow:
        """Detached copy of the window state"""
        return self._window(key).copy()

    def keys(self) -> List[str]:
        with self._registry_lock:
            return list(self._windows.keys())

    def snapshot(self) -> Dict[str, dict]:
        """Window state of every registered source, for rendering"""
        with self._registry_lock:
            windows = dict(self._windows)
        return {key: window.to_dict() for key, window in windows.items()}

    def discard(self, key: str) -> bool:
        """Forget a window; returns False if the key was unknown"""
        with self._registry_lock:
            removed = self._windows.pop(key, None)
        if removed is not None:
            logger.debug(f"Discarded {key}")
        return removed is not None
