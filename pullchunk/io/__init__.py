from .source import ByteSource, FileByteSource
from .sink import ChunkSink, SinkSession, FileChunkSink, FileSinkSession

__all__ = [
    'ByteSource',
    'FileByteSource',
    'ChunkSink',
    'SinkSession',
    'FileChunkSink',
    'FileSinkSession'
]
