"""Per-source transfer window"""

import threading
from dataclasses import dataclass, field
from typing import Tuple


@dataclass
class TransferWindow:
    """
    Half-open byte range [left, right) currently eligible for delivery
    Never wider than one chunk; only advance() moves it
    """
    source_id: str
    total_length: int
    chunk_size: int
    left: int = 0
    right: int = 0
    chunks_acknowledged: int = 0
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @classmethod
    def create(cls, source_id: str, total_length: int,
               chunk_size: int) -> 'TransferWindow':
        """Initial window covering the first chunk (empty for empty sources)"""
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if total_length < 0:
            raise ValueError(f"total_length must be non-negative, got {total_length}")

        return cls(
            source_id=source_id,
            total_length=total_length,
            chunk_size=chunk_size,
            left=0,
            right=min(chunk_size, total_length)
        )

    @property
    def is_terminal(self) -> bool:
        return self.left == self.right

    @property
    def bounds(self) -> Tuple[int, int]:
        return self.left, self.right

    @property
    def total_chunks(self) -> int:
        return -(-self.total_length // self.chunk_size)

    @property
    def remaining_chunks(self) -> int:
        return self.total_chunks - self.chunks_acknowledged

    def advance(self):
        """
        Slide past the current chunk
        Caller must hold the lock and have checked is_terminal
        """
        self.left = self.right
        self.right = min(self.right + self.chunk_size, self.total_length)
        self.chunks_acknowledged += 1

    def copy(self) -> 'TransferWindow':
        """Detached copy for inspection"""
        with self.lock:
            return TransferWindow(
                source_id=self.source_id,
                total_length=self.total_length,
                chunk_size=self.chunk_size,
                left=self.left,
                right=self.right,
                chunks_acknowledged=self.chunks_acknowledged
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON rendering"""
        with self.lock:
            return {
                'source_id': self.source_id,
                'left': self.left,
                'right': self.right,
                'total_length': self.total_length,
                'chunks_acknowledged': self.chunks_acknowledged,
                'total_chunks': self.total_chunks
            }
