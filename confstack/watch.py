from __future__ import annotations

"""
File-change notification for a single configuration file.

A watch session is set up synchronously: if the file is missing or the
observer cannot be started, FileWatchError is raised to the caller and no
thread is left behind. Once running, a single worker thread owns the
watchdog observer and waits on the caller's shutdown event; events flow to
the caller through an unbounded queue wrapped by WatchChannel.
"""

import logging
import os
import queue
import threading
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exceptions import FileWatchError

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass(frozen=True)
class FileEvent:
    """One observed change of the watched file."""

    kind: str
    path: str
    dest_path: Optional[str] = None


WatchItem = Union[FileEvent, FileWatchError]


class WatchChannel:
    """
    Receiving end of a watch session.

    Iterating yields FileEvent (or FileWatchError) items in the order the
    observer reported them and stops once the session has shut down.
    Leaving a ``with`` block requests shutdown.
    """

    def __init__(self, path: str, shutdown: threading.Event):
        self.path = path
        self._shutdown = shutdown
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._drained = False
        self._worker: Optional[threading.Thread] = None

    def _put(self, item: WatchItem) -> None:
        self._queue.put(item)

    def _close(self) -> None:
        self._queue.put(_CLOSED)

    def get(self, timeout: Optional[float] = None) -> Optional[WatchItem]:
        """
        Return the next item, or None on timeout or once the channel is closed.
        """
        if self._drained:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._drained = True
            return None
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[WatchItem]:
        while True:
            item = self.get()
            if item is None:
                return
            yield item

    @property
    def closed(self) -> bool:
        """True once the consumer has seen the end of the stream."""
        return self._drained

    def close(self) -> None:
        """Request shutdown of the session, same as setting the shutdown event."""
        self._shutdown.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to finish; returns True if it has."""
        if self._worker is None:
            return True
        self._worker.join(timeout)
        return not self._worker.is_alive()

    def __enter__(self) -> "WatchChannel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class _ForwardingHandler(FileSystemEventHandler):
    def __init__(self, target: str, channel: WatchChannel):
        super().__init__()
        self._target = target
        self._channel = channel

    def _matches(self, path: object) -> bool:
        if not path:
            return False
        return os.path.realpath(os.fsdecode(path)) == self._target

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        dest = getattr(event, "dest_path", None) or None
        if not (self._matches(event.src_path) or self._matches(dest)):
            return
        self._channel._put(
            FileEvent(
                kind=event.event_type,
                path=os.fsdecode(event.src_path),
                dest_path=os.fsdecode(dest) if dest else None,
            )
        )


def _run_session(
    observer: Observer,
    channel: WatchChannel,
    shutdown: threading.Event,
    poll_interval: float,
) -> None:
    try:
        while not shutdown.wait(poll_interval):
            if not observer.is_alive():
                logger.warning("File observer for %s stopped unexpectedly", channel.path)
                channel._put(FileWatchError(f"observer for {channel.path} stopped"))
                break
    finally:
        observer.stop()
        observer.join()
        channel._close()
        logger.info("File watcher shutting down: %s", channel.path)


def watch_file(
    path: Union[str, "os.PathLike[str]"],
    shutdown: threading.Event,
    *,
    poll_interval: float = 0.1,
) -> WatchChannel:
    """
    Start watching `path` until `shutdown` is set.

    :param path: File to watch. Must exist.
    :param shutdown: One-shot signal; setting it ends the session.
    :param poll_interval: How often the worker checks that the observer is alive.
    :returns: The channel the events are delivered on.
    :raises FileWatchError: if the file is missing or the watch cannot start.
    """
    target = os.path.realpath(os.fspath(path))
    if not os.path.isfile(target):
        raise FileWatchError(f"No such file: {os.fspath(path)}")

    channel = WatchChannel(target, shutdown)
    observer = Observer()
    try:
        observer.schedule(
            _ForwardingHandler(target, channel),
            os.path.dirname(target),
            recursive=False,
        )
        observer.start()
    except OSError as exc:
        raise FileWatchError(str(exc)) from exc

    worker = threading.Thread(
        target=_run_session,
        args=(observer, channel, shutdown, poll_interval),
        name=f"confstack-watch:{target}",
        daemon=True,
    )
    channel._worker = worker
    worker.start()
    logger.info("Watching file: %s", target)
    return channel
