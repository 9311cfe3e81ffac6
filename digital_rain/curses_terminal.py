"""
Curses Terminal - Terminal output, input and mode control over curses.

curses.initscr() switches to the alternate screen, so entering and leaving
the animation leaves the user's scrollback untouched.
"""

import logging
from typing import Optional, Tuple

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False

from .colors import CursesPalette
from .errors import InputReadError, TerminalError
from .models import InputEvent, KeyEvent, OtherEvent, ResizeEvent, Rgb
from .terminal import TerminalInput, TerminalMode, TerminalOutput

logger = logging.getLogger(__name__)


class CursesTerminal(TerminalOutput, TerminalInput, TerminalMode):
    """
    Curses implementation of all three terminal capabilities.

    Drawing goes to the stdscr buffer and reaches the screen on flush()
    (a single refresh). read_event() is only used by the cooperative loop;
    the threaded loop reads stdin through RawInputSource instead, since
    curses must not be driven from two threads.
    """

    def __init__(self):
        if not CURSES_AVAILABLE:
            raise TerminalError("curses library not available (on Windows: pip install windows-curses)")
        self.screen = None
        self.palette = CursesPalette()
        self._active = False
        self._cursor = (0, 0)
        self._fg: Optional[Rgb] = None
        self._bg: Optional[Rgb] = None

    @property
    def active(self) -> bool:
        return self._active

    # TerminalMode

    def enter(self):
        """Enter alternate screen, raw mode, hide cursor."""
        if self._active:
            return
        try:
            self.screen = curses.initscr()
            self._active = True
            curses.noecho()
            curses.raw()
            self.screen.keypad(True)
            self.palette.init()
            self.screen.erase()
            self.screen.refresh()
        except curses.error as e:
            raise TerminalError(f"Failed to enter curses mode: {e}") from e
        try:
            curses.curs_set(0)  # Hide cursor
        except curses.error:
            logger.debug("Terminal cannot hide the cursor")
        width, height = self.size()
        logger.info(f"Entered curses mode ({width}x{height}, "
                    f"{'custom' if self.palette.true_color else 'fixed'} colours)")

    def leave(self):
        """Restore the terminal. Every step is attempted even if one fails."""
        if not self._active:
            return
        self._active = False
        failure: Optional[Exception] = None
        try:
            curses.curs_set(1)
        except curses.error:
            pass  # Terminals without cursor control never hid it
        for step in (lambda: self.screen.keypad(False), curses.noraw, curses.echo, curses.endwin):
            try:
                step()
            except curses.error as e:
                failure = failure or e
        if failure is not None:
            raise TerminalError(f"Failed to restore terminal: {failure}") from failure
        logger.info("Left curses mode")

    # TerminalOutput

    def move_to(self, x: int, y: int):
        self._cursor = (x, y)

    def set_foreground(self, color: Rgb):
        self._fg = color

    def set_background(self, color: Rgb):
        self._bg = color

    def reset_color(self):
        self._fg = None
        self._bg = None

    def print_char(self, ch: str):
        x, y = self._cursor
        self._cursor = (x + 1, y)
        try:
            self.screen.addstr(y, x, ch, self.palette.attr(self._fg, self._bg))
        except curses.error:
            # Writing the bottom-right cell moves the cursor off screen
            pass

    def clear(self):
        self.screen.erase()

    def flush(self):
        try:
            self.screen.refresh()
        except curses.error as e:
            raise TerminalError(f"Failed to flush screen: {e}") from e

    def size(self) -> Tuple[int, int]:
        height, width = self.screen.getmaxyx()
        return width, height

    def resize(self, width: int, height: int):
        """Tell curses about a size change it did not detect itself."""
        if (width, height) != self.size():
            try:
                curses.resizeterm(height, width)
            except curses.error as e:
                logger.debug(f"resizeterm({height}, {width}) failed: {e}")
        self.screen.erase()

    # TerminalInput

    def read_event(self, timeout: Optional[float] = None) -> Optional[InputEvent]:
        """Poll getch() for at most `timeout` seconds (block if None)."""
        try:
            self.screen.timeout(-1 if timeout is None else max(0, int(timeout * 1000)))
            key = self.screen.getch()
        except curses.error as e:
            raise InputReadError(f"getch failed: {e}") from e
        if key == -1:
            return None
        if key == curses.KEY_RESIZE:
            width, height = self.size()
            return ResizeEvent(width, height)
        if key == curses.KEY_MOUSE:
            return OtherEvent("mouse")
        return KeyEvent(key)
