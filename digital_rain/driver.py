"""
Render Loop - The fixed-period scheduler.

Each tick:
    1. gather pending events (quit, coalesced resize)
    2. quit   -> TERMINATED, nothing more is drawn
    3. resize -> reset the grid and screen, no simulation this tick
       else   -> advance and draw every streak
    4. flush

Events are gathered either from the input thread's mailboxes (never
blocks) or by polling the terminal with a bounded timeout.
"""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional, Tuple

from .config import RESIZE_QUIESCENCE, RainConfig, Scheduling
from .errors import ErrorCategory, InputReadError, handle_error
from .events import Mailbox, coalesce_resize
from .grid import Grid
from .models import EventKind
from .terminal import TerminalInput, TerminalOutput

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


class DriverState(Enum):
    """Render loop states."""
    RUNNING = "running"
    TERMINATED = "terminated"


class EventGatherer(ABC):
    """Collects what happened since the previous tick."""

    @abstractmethod
    def poll(self, timeout: Optional[float]) -> Tuple[bool, Optional[Size]]:
        """
        Returns:
            (quit requested, latest resize or None)
        """
        pass


class MailboxEvents(EventGatherer):
    """Non-blocking drains of the input thread's mailboxes. Ignores timeout."""

    def __init__(self, quit_box: Mailbox, resize_box: Mailbox):
        self.quit_box = quit_box
        self.resize_box = resize_box

    def poll(self, timeout: Optional[float]) -> Tuple[bool, Optional[Size]]:
        quit_requested = self.quit_box.drain() is not None
        return quit_requested, self.resize_box.drain()


class PolledEvents(EventGatherer):
    """
    Waits up to `timeout` for one event from the terminal itself.

    A resize swallows the rest of its burst before returning, so a window
    drag resets the grid once.
    """

    def __init__(self, source: TerminalInput, quiescence: float = RESIZE_QUIESCENCE):
        self.source = source
        self.quiescence = quiescence

    def poll(self, timeout: Optional[float]) -> Tuple[bool, Optional[Size]]:
        try:
            event = self.source.read_event(timeout)
            if event is None:
                return False, None
            if event.kind == EventKind.KEY:
                return True, None
            if event.kind == EventKind.RESIZE:
                quit_box = Mailbox()
                size = coalesce_resize(event, self.source, self.quiescence, quit_box)
                return quit_box.drain() is not None, size
        except InputReadError as e:
            handle_error(e, "polling terminal input", ErrorCategory.INPUT)
        return False, None


class Driver:
    """
    Two-state render loop.

    All Grid mutation happens here, on the thread that calls step()/run().
    """

    def __init__(self, grid: Grid, output: TerminalOutput, events: EventGatherer,
                 config: RainConfig, sleep: Callable[[float], None] = time.sleep):
        self.grid = grid
        self.output = output
        self.events = events
        self.config = config
        self.state = DriverState.RUNNING
        self.ticks = 0
        self._sleep = sleep

    @property
    def running(self) -> bool:
        return self.state == DriverState.RUNNING

    def step(self, timeout: Optional[float] = None) -> DriverState:
        """
        Run exactly one tick.

        Args:
            timeout: How long the event poll may wait (cooperative loop only)

        Returns:
            The state after the tick
        """
        if not self.running:
            return self.state

        quit_requested, resize = self.events.poll(timeout)
        if quit_requested:
            logger.info(f"Quit requested after {self.ticks} ticks")
            self.state = DriverState.TERMINATED
            return self.state

        if resize is not None:
            width, height = resize
            logger.info(f"Terminal resized to {width}x{height}")
            self.grid.resize(width, height)
            self.output.resize(width, height)
        else:
            self.grid.tick(self.output)

        self.output.flush()
        self.ticks += 1
        return self.state

    def run(self, max_ticks: Optional[int] = None) -> DriverState:
        """Tick until quit (or until `max_ticks` ticks have run)."""
        cooperative = self.config.scheduling == Scheduling.COOPERATIVE
        timeout = self.config.poll_timeout if cooperative else None
        while self.running:
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            self.step(timeout)
            if self.running and not cooperative:
                self._sleep(self.config.tick_interval)
        return self.state
