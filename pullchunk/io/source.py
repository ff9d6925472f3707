"""Byte-range sources"""

import os
from pathlib import Path
import logging

import aiofiles

from ..errors import SourceReadFailure

logger = logging.getLogger(__name__)


class ByteSource:
    """
    Capability to read half-open byte ranges out of a source
    Implementations raise SourceReadFailure on any underlying I/O problem
    """

    def size(self, source_id: str) -> int:
        raise NotImplementedError

    async def read(self, source_id: str, start: int, end: int) -> bytes:
        raise NotImplementedError


class FileByteSource(ByteSource):
    """Reads ranges of local files, source_id is the file path"""

    def size(self, source_id: str) -> int:
        try:
            return os.stat(source_id).st_size
        except OSError as e:
            raise SourceReadFailure(source_id, f"Cannot stat {source_id}: {e}") from e

    async def read(self, source_id: str, start: int, end: int) -> bytes:
        path = Path(source_id)
        try:
            async with aiofiles.open(path, 'rb') as f:
                await f.seek(start)
                data = await f.read(end - start)
        except OSError as e:
            logger.error(f"Failed to read {path} [{start}, {end}): {e}")
            raise SourceReadFailure(source_id, f"Cannot read {path}: {e}") from e

        if len(data) != end - start:
            raise SourceReadFailure(
                source_id,
                f"Short read from {path}: got {len(data)} of {end - start} bytes"
            )

        return data
