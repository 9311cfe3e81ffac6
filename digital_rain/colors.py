"""
Rain Colors - Brightness gradient and curses colour pair management.

A streak fades from white at its head to green at its tail. Brightness b is
rendered as Rgb(b, 255, b); the optional background glow as Rgb(0, g, 0).
Curses cannot print arbitrary RGB, so CursesPalette quantises the gradient
onto custom colours when the terminal allows redefining them, and onto a
handful of fixed green pairs otherwise.
"""

from typing import Dict, Optional, Tuple

# Handle curses import for Windows compatibility
try:
    import curses
    CURSES_AVAILABLE = True
except ImportError:
    curses = None
    CURSES_AVAILABLE = False

from .models import Rgb

MAX_BRIGHTNESS = 255


def gradient_step(length: int) -> int:
    """Brightness lost per glyph for a streak of the given length."""
    if length <= 0:
        return MAX_BRIGHTNESS
    return MAX_BRIGHTNESS // length


def brightness_at(offset: int, step: int) -> int:
    """Brightness of the glyph `offset` places behind the brightest one."""
    return max(0, MAX_BRIGHTNESS - step * offset)


def glyph_color(brightness: int) -> Rgb:
    return Rgb(brightness, MAX_BRIGHTNESS, brightness)


def background_color(brightness: int, step: int) -> Rgb:
    return Rgb(0, max(0, brightness - step), 0)


def _scale(channel: int) -> int:
    """0-255 channel to curses' 0-1000 range."""
    return channel * 1000 // MAX_BRIGHTNESS


class Colors:
    """Color pairs for curses."""
    NORMAL = 0
    MATRIX_BRIGHT = 1   # White head
    MATRIX_DIM = 2      # Green body
    MATRIX_DARK = 3     # Dark green tail
    # Pairs from here on are allocated on demand by CursesPalette
    FIRST_DYNAMIC = 16

    @staticmethod
    def init_colors():
        """Initialize curses color pairs."""
        if not CURSES_AVAILABLE or curses is None:
            return
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(Colors.MATRIX_BRIGHT, curses.COLOR_WHITE, -1)
        curses.init_pair(Colors.MATRIX_DIM, curses.COLOR_GREEN, -1)
        # Dark green for rain tails - try to use custom dark green if terminal supports it
        try:
            if curses.can_change_color() and curses.COLORS >= 256:
                # RGB values scaled 0-1000
                curses.init_color(100, 0, 300, 0)
                curses.init_pair(Colors.MATRIX_DARK, 100, -1)
            else:
                # Fallback: use normal green, will apply A_DIM when rendering
                curses.init_pair(Colors.MATRIX_DARK, curses.COLOR_GREEN, -1)
        except curses.error:
            curses.init_pair(Colors.MATRIX_DARK, curses.COLOR_GREEN, -1)


class CursesPalette:
    """Maps gradient colours to curses attributes."""

    # Quantisation levels per gradient
    LEVELS = 16
    # First redefinable colour slot, above the 16 ANSI colours
    FIRST_COLOR = 16

    def __init__(self):
        self.true_color = False
        self._pairs: Dict[Tuple[int, Optional[int]], int] = {}
        self._next_pair = Colors.FIRST_DYNAMIC
        self._max_pairs = 0

    def init(self):
        """Set up colour pairs. Call once after curses.initscr()."""
        if not CURSES_AVAILABLE or curses is None:
            return
        Colors.init_colors()
        self._max_pairs = curses.COLOR_PAIRS
        needed = self.FIRST_COLOR + 2 * self.LEVELS
        try:
            self.true_color = curses.can_change_color() and curses.COLORS >= needed
        except curses.error:
            self.true_color = False
        if not self.true_color:
            return
        for level in range(self.LEVELS):
            value = _scale(self._level_value(level))
            # Foreground: white (level max) to pure green (level 0)
            curses.init_color(self.FIRST_COLOR + level, value, 1000, value)
            # Background: black (level 0) to green
            curses.init_color(self.FIRST_COLOR + self.LEVELS + level, 0, value, 0)

    def _level(self, channel: int) -> int:
        return round(channel * (self.LEVELS - 1) / MAX_BRIGHTNESS)

    def _level_value(self, level: int) -> int:
        return level * MAX_BRIGHTNESS // (self.LEVELS - 1)

    def attr(self, fg: Optional[Rgb], bg: Optional[Rgb] = None) -> int:
        """Curses attribute for drawing with the given colours."""
        if fg is None and bg is None:
            return curses.color_pair(Colors.NORMAL)
        if self.true_color:
            pair = self._gradient_pair(fg, bg)
            if pair is not None:
                return curses.color_pair(pair)
        return self._band_attr(fg)

    def _gradient_pair(self, fg: Optional[Rgb], bg: Optional[Rgb]) -> Optional[int]:
        fg_level = self._level(min(fg.r, fg.b)) if fg is not None else self.LEVELS - 1
        bg_level = self._level(bg.g) if bg is not None else None
        key = (fg_level, bg_level)
        pair = self._pairs.get(key)
        if pair is not None:
            return pair
        if self._next_pair >= self._max_pairs:
            return None
        pair = self._next_pair
        bg_color = self.FIRST_COLOR + self.LEVELS + bg_level if bg_level is not None else -1
        try:
            curses.init_pair(pair, self.FIRST_COLOR + fg_level, bg_color)
        except curses.error:
            return None
        self._next_pair += 1
        self._pairs[key] = pair
        return pair

    def _band_attr(self, fg: Optional[Rgb]) -> int:
        """Nearest fixed pair when custom colours are unavailable."""
        brightness = min(fg.r, fg.b) if fg is not None else MAX_BRIGHTNESS
        if brightness >= 224:
            return curses.color_pair(Colors.MATRIX_BRIGHT) | curses.A_BOLD
        if brightness >= 128:
            return curses.color_pair(Colors.MATRIX_DIM) | curses.A_BOLD
        if brightness >= 64:
            return curses.color_pair(Colors.MATRIX_DIM)
        return curses.color_pair(Colors.MATRIX_DARK) | curses.A_DIM
