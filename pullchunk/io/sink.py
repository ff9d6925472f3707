"""Chunk sinks: scoped sequential write sessions"""

from pathlib import Path
from typing import Optional
import logging

import aiofiles
from cryptography.hazmat.primitives import hashes

logger = logging.getLogger(__name__)


class SinkSession:
    """
    One sequential write session per transfer
    close() must be called exactly once; further calls are no-ops
    """

    async def write(self, data: bytes):
        raise NotImplementedError

    async def close(self):
        raise NotImplementedError


class ChunkSink:
    """Factory for write sessions"""

    async def open(self, suggested_name: str) -> SinkSession:
        raise NotImplementedError


class FileSinkSession(SinkSession):
    """Writes chunks to a file and tracks a SHA-256 digest of what was written"""

    def __init__(self, path: Path, handle):
        self.path = path
        self._handle = handle
        self._hasher = hashes.Hash(hashes.SHA256())
        self.bytes_written = 0
        self.digest: Optional[str] = None
        self.closed = False

    async def write(self, data: bytes):
        if self.closed:
            raise ValueError(f"Session for {self.path} is closed")

        await self._handle.write(data)
        self._hasher.update(data)
        self.bytes_written += len(data)

    async def close(self):
        if self.closed:
            return
        self.closed = True

        try:
            await self._handle.close()
        finally:
            self.digest = self._hasher.finalize().hex()
            logger.debug(f"Closed {self.path} ({self.bytes_written} bytes, sha256 {self.digest})")


class FileChunkSink(ChunkSink):
    """Opens one output file per transfer inside output_dir"""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    async def open(self, suggested_name: str) -> FileSinkSession:
        """
        Create a new output file: name, name.1, name.2, ...
        Exclusive create, so concurrent transfers never share a file
        """
        name = Path(suggested_name).name or "transfer"
        counter = 0

        while True:
            path = self.output_dir / (f"{name}.{counter}" if counter else name)
            try:
                handle = await aiofiles.open(path, 'xb')
            except FileExistsError:
                counter += 1
                continue
            break

        logger.info(f"Opened sink {path}")
        return FileSinkSession(path, handle)
