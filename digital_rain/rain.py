"""
Rain Streak - One falling column of fading glyphs.

A streak's glyphs are fixed at spawn. Its head falls `speed` rows per tick
until it reaches the bottom row; from then on every tick retires glyphs off
the top of the visible segment instead, so the tail keeps moving at the
same pace after the head has stopped. The streak dies once every glyph has
been retired.

    row 0   .
            .          revealed glyphs are gone
    top ->  g[L-1]     dimmest
            ...
    head -> g[revealed] brightest
"""

import random
from typing import Optional, Tuple

from .colors import background_color, brightness_at, glyph_color, gradient_step
from .config import GLYPH_MAX, GLYPH_MIN, RainConfig
from .terminal import TerminalOutput


class Rain:
    """A single streak, owned by exactly one Grid slot."""

    __slots__ = ('column', 'glyphs', 'head_row', 'revealed', 'config', '_drawn')

    def __init__(self, column: int, glyphs, config: RainConfig, head_row: int = 0):
        self.column = column
        self.glyphs = tuple(glyphs)
        self.head_row = head_row
        self.revealed = 0
        self.config = config
        # (top, bottom) rows written by the last render
        self._drawn: Optional[Tuple[int, int]] = None

    @classmethod
    def spawn(cls, column: int, height: int, rng: random.Random, config: RainConfig) -> "Rain":
        """Create a streak at the top of `column` with freshly drawn glyphs."""
        spread = height // 5
        length = (rng.randrange(spread) if spread > 0 else 0) + config.chars_min_len
        glyphs = [rng.randint(GLYPH_MIN, GLYPH_MAX) for _ in range(length)]
        head_row = min(config.spawn_start_row, max(0, height - 1))
        return cls(column, glyphs, config, head_row)

    def __repr__(self) -> str:
        return (f"Rain(column={self.column}, head_row={self.head_row}, "
                f"revealed={self.revealed}, length={self.length})")

    @property
    def length(self) -> int:
        return len(self.glyphs)

    @property
    def alive(self) -> bool:
        return self.revealed < self.length

    @property
    def text(self) -> str:
        return ''.join(chr(code) for code in self.glyphs)

    @property
    def segment_top(self) -> int:
        """Row of the dimmest visible glyph; negative while still above the screen."""
        return self.head_row - (self.length - 1 - self.revealed)

    def advance(self, height: int) -> bool:
        """
        Move one simulation step on a grid `height` rows tall.

        Movement that would carry the head past the bottom row is credited
        to retiring glyphs instead.

        Returns:
            True while the streak is alive
        """
        speed = self.config.speed
        if self.head_row + speed < height:
            self.head_row += speed
        else:
            overshoot = speed - (height - 1 - self.head_row)
            self.head_row = height - 1
            self.revealed = min(self.length, self.revealed + overshoot)
        return self.alive

    def render(self, out: TerminalOutput):
        """Queue the visible segment, brightest at the head."""
        step = gradient_step(self.length)
        row = self.head_row
        for offset, index in enumerate(range(self.revealed, self.length)):
            if row < 0:
                break
            brightness = brightness_at(offset, step)
            out.move_to(self.column, row)
            out.set_foreground(glyph_color(brightness))
            if self.config.draw_background:
                out.set_background(background_color(brightness, step))
            out.print_char(chr(self.glyphs[index]))
            out.reset_color()
            row -= 1

        if self.alive:
            self._drawn = (max(0, self.segment_top), self.head_row)

        if self.config.erases_tails:
            self._erase_tail(out)

    def _erase_tail(self, out: TerminalOutput):
        """Blank the rows vacated above the segment since the last tick."""
        top = self.segment_top
        # Nothing has scrolled into view above the tail yet
        if self.head_row + self.revealed < self.length:
            return
        for row in range(max(0, top - self.config.speed), top):
            self._blank(out, row)

    def erase(self, out: TerminalOutput):
        """Blank every row written by the last render."""
        if self._drawn is None:
            return
        top, bottom = self._drawn
        for row in range(top, bottom + 1):
            self._blank(out, row)
        self._drawn = None

    def _blank(self, out: TerminalOutput, row: int):
        out.move_to(self.column, row)
        out.reset_color()
        out.print_char(' ')
