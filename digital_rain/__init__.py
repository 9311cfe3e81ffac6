"""
Digital Rain - Falling glyph animation for the terminal

Columns of fading glyphs fall down the screen, spawning and disappearing at
random, until a key is pressed.

Basic Usage:
    from digital_rain import run_rain
    run_rain()

Headless (tests, recordings):
    import random
    from digital_rain import Grid, RecordingTerminal, CLASSIC

    term = RecordingTerminal(80, 24)
    grid = Grid(80, 24, random.Random(7), CLASSIC)
    grid.tick(term)
    term.flush()
"""

import logging

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Configuration
from .config import (
    CLASSIC,
    TIGHT,
    RainConfig,
    RefreshStrategy,
    Scheduling,
)

# Data models
from .models import (
    Rgb,
    EventKind,
    KeyEvent,
    ResizeEvent,
    OtherEvent,
)

# Core
from .rain import Rain
from .grid import Grid
from .events import Mailbox, EventPipeline, coalesce_resize
from .driver import Driver, DriverState, MailboxEvents, PolledEvents

# Terminal
from .terminal import (
    TerminalOutput,
    TerminalInput,
    TerminalMode,
    RecordingTerminal,
    ScriptedInput,
)
from .errors import RainError, TerminalError, InputReadError

from .app import TerminalSession, run_rain, main

__all__ = [
    # Version
    "__version__",
    # Configuration
    "CLASSIC",
    "TIGHT",
    "RainConfig",
    "RefreshStrategy",
    "Scheduling",
    # Models
    "Rgb",
    "EventKind",
    "KeyEvent",
    "ResizeEvent",
    "OtherEvent",
    # Core
    "Rain",
    "Grid",
    "Mailbox",
    "EventPipeline",
    "coalesce_resize",
    "Driver",
    "DriverState",
    "MailboxEvents",
    "PolledEvents",
    # Terminal
    "TerminalOutput",
    "TerminalInput",
    "TerminalMode",
    "RecordingTerminal",
    "ScriptedInput",
    # Errors
    "RainError",
    "TerminalError",
    "InputReadError",
    # Entry points
    "TerminalSession",
    "run_rain",
    "main",
]
