"""Transfer driver: pulls chunks from the store into a sink"""

import asyncio
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Set
import logging

from ..errors import NoSuchSource
from ..io.sink import ChunkSink
from .events import EventKind, TransferEvent
from .store import TransferStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_FAILURES = 3


class TransferStatus(Enum):
    COMPLETED = "completed"
    ABANDONED = "abandoned"


@dataclass
class TransferResult:
    """Outcome of driving one registration"""
    key: str
    status: TransferStatus
    chunks_delivered: int
    chunks_remaining: int
    bytes_written: int
    failures: int
    digest: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data['status'] = self.status.value
        return data


class TransferDriver:
    """
    Drives each registered source to exhaustion through a sink
    One chunk in flight per source: read, write, acknowledge, repeat.
    Gives up after max_failures consecutive failed steps.
    """

    def __init__(self, store: TransferStore, sink: ChunkSink,
                 max_failures: int = DEFAULT_MAX_FAILURES):
        if max_failures <= 0:
            raise ValueError(f"max_failures must be positive, got {max_failures}")

        self.store = store
        self.sink = sink
        self.max_failures = max_failures

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._tasks: Set[asyncio.Task] = set()
        self._finished: List[TransferResult] = []

    def attach(self) -> Callable[[], None]:
        """
        Start reacting to registrations
        Must be called from a coroutine; transfers run on that loop
        """
        if self._unsubscribe is None:
            self._loop = asyncio.get_running_loop()
            self._unsubscribe = self.store.subscribe(self._on_event)
        return self.detach

    def detach(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_event(self, event: TransferEvent):
        if event.kind is not EventKind.REGISTERED:
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._schedule(event.key)
        else:
            # Registered from another thread (e.g. the directory watcher)
            self._loop.call_soon_threadsafe(self._schedule, event.key)

    def _schedule(self, key: str):
        task = self._loop.create_task(self._run(key))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, key: str):
        try:
            result = await self.drive(key)
        except Exception as e:
            logger.error(f"Transfer {key} could not run: {e}", exc_info=True)
            return
        self._finished.append(result)

    async def join(self) -> List[TransferResult]:
        """Wait for every scheduled transfer and collect finished results"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

        results, self._finished = self._finished, []
        return results

    async def drive(self, key: str) -> TransferResult:
        """Transfer one registered source, releasing the sink session on every path"""
        initial = self.store.get_window(key)
        suggested_name = Path(initial.source_id).name or key

        session = await self.sink.open(suggested_name)
        failures = 0
        delivered = 0
        bytes_written = 0

        try:
            while self.store.has_next(key) and failures < self.max_failures:
                try:
                    chunk = await self.store.read_chunk(key)
                    await session.write(chunk)
                    self.store.acknowledge_chunk(key)
                except Exception as e:
                    failures += 1
                    logger.warning(f"Transfer {key} failed step "
                                   f"({failures}/{self.max_failures}): {e}")
                    continue

                failures = 0
                delivered += 1
                bytes_written += len(chunk)
        finally:
            await session.close()

        try:
            window = self.store.get_window(key)
        except NoSuchSource:
            # Discarded while in flight: remaining work is unknown to the store
            logger.error(f"Transfer {key} was discarded after {delivered} chunks")
            remaining = max(initial.remaining_chunks - delivered, 0)
            status = TransferStatus.ABANDONED
        else:
            remaining = window.remaining_chunks
            if window.is_terminal:
                status = TransferStatus.COMPLETED
                logger.info(f"Transfer {key} completed: {delivered} chunks, {bytes_written} bytes")
            else:
                status = TransferStatus.ABANDONED
                logger.error(f"Transfer {key} abandoned at offset {window.left} "
                             f"after {failures} consecutive failures")

        return TransferResult(
            key=key,
            status=status,
            chunks_delivered=delivered,
            chunks_remaining=remaining,
            bytes_written=bytes_written,
            failures=failures,
            digest=getattr(session, 'digest', None)
        )
