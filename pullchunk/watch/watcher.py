"""Directory watcher that registers new files as transfer sources"""

import asyncio
from pathlib import Path
from typing import Optional
import logging

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..transfer.store import TransferStore

logger = logging.getLogger(__name__)


class SourceEventHandler(FileSystemEventHandler):
    """
    Forwards finished files in the watched directory to the store
    A file counts as finished when a writer closes it or it is moved in;
    creation alone is ignored since the size is not final yet.
    Watchdog calls this from its observer thread; registration is handed to
    the event loop so drivers are scheduled on their own loop.
    Close events need inotify (Linux); elsewhere, move finished files in.
    """

    def __init__(self, store: TransferStore, loop: asyncio.AbstractEventLoop):
        super().__init__()
        self.store = store
        self.loop = loop

    def _submit(self, path: str):
        if Path(path).name.startswith('.'):
            return
        self.loop.call_soon_threadsafe(self._register, path)

    def _register(self, path: str):
        try:
            self.store.register(path)
        except Exception as e:
            logger.error(f"Could not register {path}: {e}")

    def on_closed(self, event: FileSystemEvent):
        if not event.is_directory:
            self._submit(event.src_path)

    def on_moved(self, event: FileSystemEvent):
        if not event.is_directory:
            self._submit(event.dest_path)


class SourceWatcher:
    """Watches one directory (non-recursive) while the event loop runs"""

    def __init__(self, store: TransferStore, watch_dir: Path):
        self.store = store
        self.watch_dir = Path(watch_dir)
        self.watch_dir.mkdir(parents=True, exist_ok=True)
        self.observer: Optional[Observer] = None

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        loop = loop or asyncio.get_running_loop()
        handler = SourceEventHandler(self.store, loop)

        self.observer = Observer()
        self.observer.schedule(handler, str(self.watch_dir), recursive=False)
        self.observer.start()
        logger.info(f"Watching {self.watch_dir} for new sources")

    def stop(self):
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join()
        self.observer = None
        logger.info(f"Stopped watching {self.watch_dir}")
