"""
Terminal Interfaces

Defines the three capabilities the animation consumes from a terminal:

    TerminalOutput  queued drawing commands plus an atomic flush
    TerminalInput   discrete key / resize events, blocking or with a timeout
    TerminalMode    enter/leave alternate screen, raw input, hidden cursor

Usage:
    from digital_rain.terminal import TerminalOutput

    class MyOutput(TerminalOutput):
        def move_to(self, x, y): ...
        # ... implement other methods

RecordingTerminal and ScriptedInput are in-memory implementations used when
no real terminal is attached (tests, headless runs).
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Tuple, Union

from .errors import InputReadError
from .models import InputEvent, Rgb


class TerminalOutput(ABC):
    """
    Sink for drawing commands.

    Nothing is visible until flush() is called; implementations are free to
    buffer everything in between.
    """

    @abstractmethod
    def move_to(self, x: int, y: int):
        """Move the cursor to column x, row y (0-based)."""
        pass

    @abstractmethod
    def set_foreground(self, color: Rgb):
        """Set the colour used by subsequent print_char() calls."""
        pass

    def set_background(self, color: Rgb):
        """Set the background colour (optional)."""
        pass

    @abstractmethod
    def reset_color(self):
        """Return to the terminal's default colours."""
        pass

    @abstractmethod
    def print_char(self, ch: str):
        """Print one character at the cursor and advance it one cell."""
        pass

    @abstractmethod
    def clear(self):
        """Blank the whole screen."""
        pass

    @abstractmethod
    def flush(self):
        """Commit all queued commands to the screen."""
        pass

    @abstractmethod
    def size(self) -> Tuple[int, int]:
        """Return the current (width, height) in cells."""
        pass

    def resize(self, width: int, height: int):
        """Adopt a new screen size. Clears the screen by default."""
        self.clear()


class TerminalInput(ABC):
    """Source of discrete input events."""

    @abstractmethod
    def read_event(self, timeout: Optional[float] = None) -> Optional[InputEvent]:
        """
        Wait for the next input event.

        Args:
            timeout: Seconds to wait, or None to block until an event arrives

        Returns:
            The event, or None if the timeout elapsed first

        Raises:
            InputReadError: if the underlying device can no longer be read
        """
        pass


class TerminalMode(ABC):
    """Terminal mode transitions, invoked once at startup and once at exit."""

    @abstractmethod
    def enter(self):
        """Enter alternate screen, raw input mode, hide cursor."""
        pass

    @abstractmethod
    def leave(self):
        """Undo enter(). Must be safe to call more than once."""
        pass


Cell = Tuple[str, Optional[Rgb], Optional[Rgb]]


class RecordingTerminal(TerminalOutput, TerminalMode):
    """
    In-memory terminal.

    Keeps both the raw command log (for ordering assertions) and the
    resulting screen contents (for "what is visible" assertions). Queued
    commands only reach `screen` on flush(), like a real terminal.
    """

    def __init__(self, width: int = 80, height: int = 24):
        self.width = width
        self.height = height
        self.commands: List[Tuple] = []
        self.screen: Dict[Tuple[int, int], Cell] = {}
        self.flush_count = 0
        self.clear_count = 0
        self.entered = False
        self.left = False
        self._pending: List[Tuple] = []
        self._cursor = (0, 0)
        self._fg: Optional[Rgb] = None
        self._bg: Optional[Rgb] = None

    def _queue(self, *command):
        self.commands.append(command)
        self._pending.append(command)

    def move_to(self, x: int, y: int):
        self._queue('move_to', x, y)

    def set_foreground(self, color: Rgb):
        self._queue('set_foreground', color)

    def set_background(self, color: Rgb):
        self._queue('set_background', color)

    def reset_color(self):
        self._queue('reset_color')

    def print_char(self, ch: str):
        self._queue('print_char', ch)

    def clear(self):
        self._queue('clear')

    def flush(self):
        for command in self._pending:
            self._apply(command)
        self._pending = []
        self.flush_count += 1

    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def resize(self, width: int, height: int):
        self.width = width
        self.height = height
        self.clear()

    def _apply(self, command: Tuple):
        name = command[0]
        if name == 'move_to':
            self._cursor = (command[1], command[2])
        elif name == 'set_foreground':
            self._fg = command[1]
        elif name == 'set_background':
            self._bg = command[1]
        elif name == 'reset_color':
            self._fg = None
            self._bg = None
        elif name == 'print_char':
            x, y = self._cursor
            if 0 <= x < self.width and 0 <= y < self.height:
                if command[1] == ' ' and self._fg is None and self._bg is None:
                    self.screen.pop((x, y), None)
                else:
                    self.screen[(x, y)] = (command[1], self._fg, self._bg)
            self._cursor = (x + 1, y)
        elif name == 'clear':
            self.screen.clear()
            self.clear_count += 1

    # Inspection helpers

    def char_at(self, x: int, y: int) -> str:
        """Visible character at (x, y); space when blank."""
        cell = self.screen.get((x, y))
        return cell[0] if cell else ' '

    def column_text(self, x: int) -> str:
        """Visible characters of column x, top to bottom."""
        return ''.join(self.char_at(x, y) for y in range(self.height))

    def drawn_cells(self) -> int:
        """Number of non-blank cells on screen."""
        return len(self.screen)

    def pending_commands(self) -> List[Tuple]:
        """Commands queued since the last flush."""
        return list(self._pending)

    def enter(self):
        self.entered = True

    def leave(self):
        self.left = True


class ScriptedInput(TerminalInput):
    """
    Replays a fixed script of input.

    Script items:
        an event        returned as-is
        None            a timeout with nothing read
        an exception    raised from read_event()

    Once the script runs out, timed reads return None and a blocking read
    raises InputReadError (there is nothing left that could ever arrive).
    """

    def __init__(self, script: Iterable[Union[InputEvent, None, BaseException]] = ()):
        self._script: Deque = deque(script)
        self.reads = 0
        self.timeouts: List[Optional[float]] = []

    def feed(self, *items):
        self._script.extend(items)

    @property
    def exhausted(self) -> bool:
        return not self._script

    def read_event(self, timeout: Optional[float] = None) -> Optional[InputEvent]:
        self.reads += 1
        self.timeouts.append(timeout)
        if not self._script:
            if timeout is None:
                raise InputReadError("input script exhausted")
            return None
        item = self._script.popleft()
        if isinstance(item, BaseException):
            raise item
        return item


__all__ = [
    "TerminalOutput",
    "TerminalInput",
    "TerminalMode",
    "RecordingTerminal",
    "ScriptedInput",
]
