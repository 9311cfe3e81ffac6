"""
Event Pipeline - Bridges a blocking input source into the render loop.

The input thread blocks on the next raw event and posts immutable values to
two mailboxes: one for "quit requested", one for the latest terminal size.
The render loop drains both without blocking once per tick. Neither side
touches the other's state, so no locks are needed.
"""

import logging
import queue
import threading
from typing import Generic, Optional, Tuple, TypeVar

from .config import RESIZE_QUIESCENCE
from .errors import ErrorCategory, InputReadError, handle_error
from .models import EventKind, ResizeEvent
from .terminal import TerminalInput

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Mailbox(Generic[T]):
    """
    Single-producer, single-consumer slot.

    Values arrive in order; drain() hands the consumer only the most recent
    one, so a burst of posts between drains collapses into one delivery.
    """

    def __init__(self):
        self._queue: "queue.SimpleQueue[T]" = queue.SimpleQueue()

    def post(self, value: T):
        self._queue.put(value)

    def drain(self) -> Optional[T]:
        """Latest value posted since the previous drain, or None."""
        latest = None
        while True:
            try:
                latest = self._queue.get_nowait()
            except queue.Empty:
                return latest

    def empty(self) -> bool:
        return self._queue.empty()


def coalesce_resize(first: ResizeEvent, source: TerminalInput,
                    quiescence: float = RESIZE_QUIESCENCE,
                    quit_box: Optional[Mailbox] = None) -> Tuple[int, int]:
    """
    Swallow the rest of a resize burst and return the final size.

    Keeps reading while events arrive less than `quiescence` seconds apart.
    Key presses seen during the burst still request quit.
    """
    last = first
    while True:
        event = source.read_event(quiescence)
        if event is None:
            break
        if event.kind == EventKind.RESIZE:
            last = event
        elif event.kind == EventKind.KEY and quit_box is not None:
            quit_box.post(True)
    return last.size


class EventPipeline:
    """
    Input thread feeding the quit and resize mailboxes.

    The thread is a daemon: it is never joined, and process exit reclaims
    it. A failing read ends the thread; the render loop just stops seeing
    new events.
    """

    def __init__(self, source: TerminalInput,
                 quit_box: Optional[Mailbox] = None,
                 resize_box: Optional[Mailbox] = None,
                 quiescence: float = RESIZE_QUIESCENCE):
        self.source = source
        self.quit_box: Mailbox[bool] = quit_box if quit_box is not None else Mailbox()
        self.resize_box: Mailbox[Tuple[int, int]] = resize_box if resize_box is not None else Mailbox()
        self.quiescence = quiescence
        self.failure = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name='rain-input', daemon=True)
        self._thread.start()
        logger.debug("Input pipeline started")

    def stop(self):
        """Ask the thread to exit after its current read."""
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self):
        try:
            while not self._stop_event.is_set():
                self.pump()
        except (InputReadError, OSError) as e:
            self.failure = handle_error(e, "reading terminal input", ErrorCategory.INPUT)
        logger.debug("Input pipeline stopped")

    def pump(self):
        """Block for one event and route it. One iteration of the thread."""
        event = self.source.read_event(None)
        if event is None:
            return
        if event.kind == EventKind.KEY:
            logger.debug("Key pressed, requesting quit")
            self.quit_box.post(True)
        elif event.kind == EventKind.RESIZE:
            size = coalesce_resize(event, self.source, self.quiescence, self.quit_box)
            logger.debug(f"Resize burst settled at {size[0]}x{size[1]}")
            self.resize_box.post(size)
