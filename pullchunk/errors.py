"""Transfer error taxonomy"""

from enum import Enum
from typing import Optional


class TransferErrorKind(Enum):
    """Closed set of transfer failure kinds"""
    NO_SUCH_SOURCE = "no-such-source"  # unknown or discarded key
    END_OF_DATA = "end-of-data"  # window is terminal
    SOURCE_READ_FAILURE = "source-read-failure"  # byte source gave no usable bytes


class TransferError(Exception):
    """Base class for errors raised by the transfer store"""

    kind: TransferErrorKind

    def __init__(self, key: Optional[str] = None, message: str = ""):
        self.key = key
        super().__init__(message or f"{self.kind.value}: {key}")


class NoSuchSource(TransferError):
    kind = TransferErrorKind.NO_SUCH_SOURCE


class EndOfData(TransferError):
    kind = TransferErrorKind.END_OF_DATA


class SourceReadFailure(TransferError):
    kind = TransferErrorKind.SOURCE_READ_FAILURE


class ConfigError(ValueError):
    """Invalid configuration value or file"""
