"""
Digital Rain - Terminal entry point.

Usage:
    digital-rain          # classic: fast streaks, threaded input, 75ms ticks
    digital-rain-tight    # tight: one row per tick, polled input, tail erase

Press any key to quit.
"""

import logging
import random
import signal
import sys
import threading
from typing import Optional

from . import __version__
from .config import CLASSIC, TIGHT, RainConfig, Scheduling
from .curses_terminal import CursesTerminal
from .driver import Driver, MailboxEvents, PolledEvents
from .errors import ErrorCategory, TerminalError, handle_error
from .events import EventPipeline
from .grid import Grid
from .input_source import RawInputSource
from .log_setup import configure_logging
from .terminal import TerminalInput, TerminalMode, TerminalOutput

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TERMINAL_ERROR = 1


def _raise_system_exit(signum, frame):
    raise SystemExit(128 + signum)


class TerminalSession:
    """
    Holds the terminal in animation mode for the duration of a `with` block.

    leave() runs on every exit path: normal quit, exceptions, Ctrl-C and
    SIGTERM (converted to SystemExit so the block unwinds).
    """

    def __init__(self, mode: TerminalMode):
        self.mode = mode
        self._previous_sigterm = None

    def __enter__(self) -> "TerminalSession":
        if hasattr(signal, 'SIGTERM') and threading.current_thread() is threading.main_thread():
            self._previous_sigterm = signal.signal(signal.SIGTERM, _raise_system_exit)
        try:
            self.mode.enter()
        except BaseException:
            self._leave(None)
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self._leave(exc)
        return False

    def _leave(self, pending: Optional[BaseException]):
        try:
            self.mode.leave()
        except TerminalError as e:
            handle_error(e, "restoring terminal mode", ErrorCategory.TERMINAL_IO)
            if pending is None:
                raise
        finally:
            if self._previous_sigterm is not None:
                signal.signal(signal.SIGTERM, self._previous_sigterm)
                self._previous_sigterm = None


def run_rain(config: RainConfig = CLASSIC,
             terminal: Optional[TerminalOutput] = None,
             input_source: Optional[TerminalInput] = None,
             rng: Optional[random.Random] = None,
             max_ticks: Optional[int] = None) -> int:
    """
    Run the animation until a key is pressed.

    Args:
        config: Animation preset
        terminal: Output + mode implementation (curses by default)
        input_source: Event source (stdin reader or the terminal by default)
        rng: Random source for spawns and glyphs
        max_ticks: Stop after this many ticks even without a key press

    Returns:
        Process exit code
    """
    try:
        terminal = terminal or CursesTerminal()
    except TerminalError as e:
        handle_error(e, "opening terminal", ErrorCategory.TERMINAL_IO)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_TERMINAL_ERROR
    rng = rng or random.Random()

    try:
        with TerminalSession(terminal):
            width, height = terminal.size()
            grid = Grid(width, height, rng, config)
            logger.info(f"Starting rain on {width}x{height} ({config.scheduling.value}, "
                        f"{config.refresh_strategy.display_name})")

            pipeline = None
            if config.scheduling == Scheduling.THREADED:
                source = input_source or RawInputSource()
                if isinstance(source, RawInputSource):
                    source.install()
                pipeline = EventPipeline(source, quiescence=config.resize_quiescence)
                pipeline.start()
                events = MailboxEvents(pipeline.quit_box, pipeline.resize_box)
            else:
                events = PolledEvents(input_source or terminal, config.resize_quiescence)

            driver = Driver(grid, terminal, events, config)
            try:
                driver.run(max_ticks)
            finally:
                if pipeline is not None:
                    pipeline.stop()
                    if isinstance(pipeline.source, RawInputSource):
                        # Unblocks the input thread
                        pipeline.source.close()
            logger.info(f"Rain stopped after {driver.ticks} ticks")
    except TerminalError as e:
        handle_error(e, "running animation", ErrorCategory.TERMINAL_IO)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_TERMINAL_ERROR
    except KeyboardInterrupt as e:
        handle_error(e, "running animation", ErrorCategory.SIGNAL)
    except SystemExit as e:
        handle_error(e, "running animation", ErrorCategory.SIGNAL)
        raise

    return EXIT_OK


def _parse_args(description: str, argv=None):
    import argparse

    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv=None):
    """CLI entry point for the digital-rain command."""
    _parse_args("Digital rain in your terminal. Press any key to quit.", argv)
    configure_logging()
    sys.exit(run_rain(CLASSIC))


def main_tight(argv=None):
    """CLI entry point for the digital-rain-tight command."""
    _parse_args("Digital rain, one row per tick with polled input. Press any key to quit.", argv)
    configure_logging()
    sys.exit(run_rain(TIGHT))


if __name__ == "__main__":
    main()
