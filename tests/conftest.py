"""Pytest configuration and fixtures"""

import pytest
import tempfile
import shutil
from pathlib import Path

from pullchunk.errors import SourceReadFailure
from pullchunk.io.sink import ChunkSink, SinkSession
from pullchunk.io.source import ByteSource
from pullchunk.transfer.store import TransferStore


class MemoryByteSource(ByteSource):
    """In-memory sources with failure injection, records every read"""

    def __init__(self):
        self.blobs = {}
        self.reads = []
        self.fail_offsets = set()
        self.return_text = False

    def add(self, source_id: str, data: bytes) -> str:
        self.blobs[source_id] = data
        return source_id

    def size(self, source_id: str) -> int:
        return len(self.blobs[source_id])

    async def read(self, source_id: str, start: int, end: int) -> bytes:
        self.reads.append((source_id, start, end))
        if start in self.fail_offsets:
            raise SourceReadFailure(source_id, f"injected failure at {start}")
        if self.return_text:
            return "text instead of bytes"
        return self.blobs[source_id][start:end]


class RecordingSession(SinkSession):
    def __init__(self, name: str, fail_writes: int = 0):
        self.name = name
        self.chunks = []
        self.close_count = 0
        self.fail_writes = fail_writes

    async def write(self, data: bytes):
        if self.fail_writes:
            self.fail_writes -= 1
            raise OSError("injected write failure")
        self.chunks.append(data)

    async def close(self):
        self.close_count += 1

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)


class RecordingSink(ChunkSink):
    def __init__(self):
        self.sessions = []
        self.fail_writes = 0

    async def open(self, suggested_name: str) -> RecordingSession:
        session = RecordingSession(suggested_name, fail_writes=self.fail_writes)
        self.sessions.append(session)
        return session


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def memory_source():
    return MemoryByteSource()


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def make_store(memory_source):
    """Store over the in-memory source with a chosen chunk size"""
    def factory(chunk_size: int = 16 * 1024) -> TransferStore:
        return TransferStore(memory_source, chunk_size=chunk_size)
    return factory
