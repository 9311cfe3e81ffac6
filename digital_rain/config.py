"""
Rain Configuration - Build-time tunables and animation presets.

All tunables are fixed module constants. The two presets describe the two
ways the animation can be driven:

    CLASSIC  fast streaks, green background glow, full-screen clear each
             tick, input read on a separate thread, fixed 75ms period.
    TIGHT    one row per tick, no background, only vacated tails erased,
             input polled on the render thread with a short timeout.
"""

from dataclasses import dataclass, replace
from enum import Enum

# Cells a streak falls per tick
SPEED = 5
# Per-column, per-tick spawn probability
P = 0.05
# Tick period in seconds
DURATION_TIME = 0.075
# Shortest glyph run a streak can carry
CHARS_MIN_LEN = 10

# Printable ASCII range, space excluded
GLYPH_MIN = 33
GLYPH_MAX = 126

# Resize bursts closer together than this are coalesced (seconds)
RESIZE_QUIESCENCE = 0.05
# Input poll timeout for the cooperative loop (seconds)
POLL_TIMEOUT = 0.03


class RefreshStrategy(Enum):
    """How stale glyphs are removed between ticks."""
    FULL_CLEAR = "full_clear"  # Clear whole screen, redraw every streak
    TAIL_ERASE = "tail_erase"  # Blank only the rows a streak just vacated

    @property
    def display_name(self) -> str:
        """Get display name for the strategy."""
        return {
            RefreshStrategy.FULL_CLEAR: "Full clear",
            RefreshStrategy.TAIL_ERASE: "Tail erase",
        }.get(self, self.value.title())


class Scheduling(Enum):
    """Where input is read relative to the render loop."""
    THREADED = "threaded"        # Input thread + mailboxes, loop sleeps
    COOPERATIVE = "cooperative"  # Loop polls input with a timeout


@dataclass(frozen=True)
class RainConfig:
    """Immutable animation parameters shared by Grid, Rain and Driver."""
    speed: int = SPEED
    spawn_probability: float = P
    tick_interval: float = DURATION_TIME
    chars_min_len: int = CHARS_MIN_LEN
    spawn_start_row: int = 0
    draw_background: bool = True
    refresh_strategy: RefreshStrategy = RefreshStrategy.FULL_CLEAR
    scheduling: Scheduling = Scheduling.THREADED
    resize_quiescence: float = RESIZE_QUIESCENCE
    poll_timeout: float = POLL_TIMEOUT

    def __post_init__(self):
        if self.speed < 1:
            raise ValueError(f"speed must be a positive integer, got {self.speed}")
        if not 0.0 <= self.spawn_probability <= 1.0:
            raise ValueError(f"spawn_probability must be within [0, 1], got {self.spawn_probability}")
        if self.chars_min_len < 1:
            raise ValueError(f"chars_min_len must be at least 1, got {self.chars_min_len}")
        if self.spawn_start_row < 0:
            raise ValueError(f"spawn_start_row must not be negative, got {self.spawn_start_row}")

    @property
    def erases_tails(self) -> bool:
        return self.refresh_strategy == RefreshStrategy.TAIL_ERASE

    def with_(self, **changes) -> "RainConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


CLASSIC = RainConfig()

TIGHT = RainConfig(
    speed=1,
    spawn_start_row=1,
    draw_background=False,
    refresh_strategy=RefreshStrategy.TAIL_ERASE,
    scheduling=Scheduling.COOPERATIVE,
)
