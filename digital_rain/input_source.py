"""
Raw input source for the input thread.

Blocks on stdin and on a self-pipe fed by the SIGWINCH handler, so a single
select() call waits for either a key press or a terminal resize. Unix only.
"""

import logging
import os
import select
import shutil
import signal
import sys
from typing import Optional, Tuple

from .errors import InputReadError
from .models import InputEvent, KeyEvent, ResizeEvent
from .terminal import TerminalInput

logger = logging.getLogger(__name__)

READ_CHUNK = 1024


def terminal_size(fd: Optional[int] = None) -> Tuple[int, int]:
    """Current (width, height) of the controlling terminal."""
    try:
        size = os.get_terminal_size(sys.__stdout__.fileno() if fd is None else fd)
    except (OSError, ValueError, AttributeError):
        size = shutil.get_terminal_size()
    return size.columns, size.lines


class RawInputSource(TerminalInput):
    """
    Reads key presses straight from stdin and resize notifications from
    SIGWINCH.

    install() must be called from the main thread (Python only delivers
    signals there); read_event() may then be called from any one thread.
    """

    def __init__(self, fd: Optional[int] = None):
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_r, False)
        os.set_blocking(self._wake_w, False)
        self._previous_handler = None
        self._installed = False
        self._closed = False

    def install(self):
        """Route SIGWINCH into this source."""
        if self._installed or not hasattr(signal, 'SIGWINCH'):
            return
        self._previous_handler = signal.signal(signal.SIGWINCH, self._on_winch)
        self._installed = True

    def uninstall(self):
        if not self._installed:
            return
        signal.signal(signal.SIGWINCH, self._previous_handler or signal.SIG_DFL)
        self._installed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Release the self-pipe. A reader blocked in read_event() raises InputReadError."""
        self.uninstall()
        if self._closed:
            return
        self._closed = True
        self._on_winch(None, None)
        for fd in (self._wake_r, self._wake_w):
            try:
                os.close(fd)
            except OSError:
                pass

    def _on_winch(self, signum, frame):
        try:
            os.write(self._wake_w, b'\0')
        except OSError:
            pass  # Pipe full: a wake-up is already pending

    def _drain_wakeups(self):
        try:
            while os.read(self._wake_r, READ_CHUNK):
                pass
        except BlockingIOError:
            pass

    def read_event(self, timeout: Optional[float] = None) -> Optional[InputEvent]:
        if self._closed:
            raise InputReadError("input source closed")
        try:
            ready, _, _ = select.select([self._fd, self._wake_r], [], [], timeout)
        except (OSError, ValueError) as e:
            raise InputReadError(f"select on stdin failed: {e}") from e

        if self._closed:
            raise InputReadError("input source closed")
        if not ready:
            return None

        if self._wake_r in ready:
            self._drain_wakeups()
            width, height = terminal_size()
            return ResizeEvent(width, height)

        try:
            data = os.read(self._fd, READ_CHUNK)
        except OSError as e:
            raise InputReadError(f"read from stdin failed: {e}") from e
        if not data:
            raise InputReadError("stdin closed")
        return KeyEvent(data[0])
