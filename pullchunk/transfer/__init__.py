from ..errors import (
    TransferError, TransferErrorKind, NoSuchSource, EndOfData, SourceReadFailure
)
from .events import EventBus, EventKind, TransferEvent
from .window import TransferWindow
from .store import TransferStore, DEFAULT_CHUNK_SIZE
from .driver import TransferDriver, TransferResult, TransferStatus, DEFAULT_MAX_FAILURES
from .monitor import TransferMonitor

__all__ = [
    'TransferError',
    'TransferErrorKind',
    'NoSuchSource',
    'EndOfData',
    'SourceReadFailure',
    'EventBus',
    'EventKind',
    'TransferEvent',
    'TransferWindow',
    'TransferStore',
    'DEFAULT_CHUNK_SIZE',
    'TransferDriver',
    'TransferResult',
    'TransferStatus',
    'DEFAULT_MAX_FAILURES',
    'TransferMonitor'
]
