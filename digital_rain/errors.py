"""
Error Handling for Digital Rain

Error taxonomy:
1. Terminal I/O failures (write, flush, mode switch) - fatal. The session
   restores the terminal and exits non-zero.
2. Input read failures - non-fatal. Treated as "no event this cycle"; a
   failing input thread simply stops producing events.
3. Simulation errors - none. Rain and Grid arithmetic is total.

USAGE:
    from digital_rain.errors import ErrorCategory, handle_error

    try:
        terminal.flush()
    except TerminalError as e:
        handle_error(e, "flush", ErrorCategory.TERMINAL_IO)
        raise
"""

import logging
import threading
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class RainError(Exception):
    """Base class for digital rain errors."""


class TerminalError(RainError):
    """Terminal output or mode switch failed. Fatal."""


class InputReadError(RainError):
    """Reading the next input event failed. Non-fatal."""


class ErrorCategory(Enum):
    """Categories of errors for logging and exit decisions."""
    # Writing to or switching mode of the terminal
    TERMINAL_IO = "terminal_io"

    # Reading keys / resize notifications
    INPUT = "input"

    # Process signals (SIGINT, SIGTERM)
    SIGNAL = "signal"

    # Unknown/uncategorized
    UNKNOWN = "unknown"

    @property
    def fatal(self) -> bool:
        return self in (ErrorCategory.TERMINAL_IO, ErrorCategory.UNKNOWN)


@dataclass
class ErrorContext:
    """Detailed context information for an error."""
    error: BaseException
    category: ErrorCategory
    operation: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)
    stack_trace: str = ""

    def __post_init__(self):
        if not self.stack_trace:
            self.stack_trace = traceback.format_exc()

    @property
    def fatal(self) -> bool:
        return self.category.fatal

    def format_log_message(self) -> str:
        """Format a detailed log message."""
        severity = "FATAL" if self.fatal else "RECOVERABLE"
        lines = [
            f"ERROR [{severity}] in {self.operation}",
            f"  Category: {self.category.value}",
            f"  Type: {type(self.error).__name__}",
            f"  Message: {self.error}",
            f"  Thread: {self.thread_name}",
            f"  Timestamp: {self.timestamp}",
        ]

        # format_exc() yields "NoneType: None" outside an except block
        if self.stack_trace and not self.stack_trace.startswith("NoneType: None"):
            lines.append("  Stack Trace:")
            for line in self.stack_trace.split('\n'):
                if line.strip():
                    lines.append(f"    {line}")

        return '\n'.join(lines)


def handle_error(
    error: BaseException,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
) -> ErrorContext:
    """
    Log an error with context.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error

    Returns:
        ErrorContext with full error details
    """
    context = ErrorContext(error=error, category=category, operation=operation)

    level = logging.ERROR if context.fatal else logging.WARNING
    logger.log(level, context.format_log_message())

    return context
