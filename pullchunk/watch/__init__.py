from .watcher import SourceWatcher, SourceEventHandler

__all__ = [
    'SourceWatcher',
    'SourceEventHandler'
]
