"""
Rain Data Models - Colour and input event value types.

Events are immutable so the input thread can hand them to the render loop
without sharing any mutable state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Union


class Rgb(NamedTuple):
    """24-bit colour, one byte per channel."""
    r: int
    g: int
    b: int


class EventKind(Enum):
    """Kinds of raw terminal input events."""
    KEY = "key"
    RESIZE = "resize"
    OTHER = "other"


@dataclass(frozen=True)
class KeyEvent:
    """Any key press. The animation quits on the first one."""
    code: int = 0

    kind = EventKind.KEY


@dataclass(frozen=True)
class ResizeEvent:
    """Terminal size change, in character cells."""
    width: int
    height: int

    kind = EventKind.RESIZE

    @property
    def size(self):
        return self.width, self.height


@dataclass(frozen=True)
class OtherEvent:
    """Mouse, focus and anything else the animation ignores."""
    detail: str = ""

    kind = EventKind.OTHER


InputEvent = Union[KeyEvent, ResizeEvent, OtherEvent]
