"""
Rain Grid - One optional streak slot per terminal column.
"""

import logging
import random
from typing import Iterator, List, Optional, Tuple

from .config import RainConfig, RefreshStrategy
from .rain import Rain
from .terminal import TerminalOutput

logger = logging.getLogger(__name__)


class Grid:
    """
    The animation surface.

    `columns[x]` holds the streak falling in column x, or None. Spawning is
    a fresh Bernoulli trial per empty column per tick, with no memory of
    earlier ticks.
    """

    def __init__(self, width: int, height: int, rng: random.Random, config: RainConfig):
        self.width = width
        self.height = height
        self.rng = rng
        self.config = config
        self.columns: List[Optional[Rain]] = [None] * width
        self.ticks = 0

    def resize(self, width: int, height: int):
        """Adopt new dimensions. Every in-flight streak is discarded."""
        discarded = self.live_count()
        self.width = width
        self.height = height
        self.columns = [None] * width
        logger.debug(f"Grid resized to {width}x{height}, discarded {discarded} streaks")

    def spawn_at(self, column: int) -> Rain:
        """Start a streak in `column`, replacing whatever was there."""
        rain = Rain.spawn(column, self.height, self.rng, self.config)
        self.columns[column] = rain
        return rain

    def tick(self, out: TerminalOutput):
        """Advance and draw every streak, then roll spawns for empty columns."""
        self.ticks += 1
        if self.config.refresh_strategy == RefreshStrategy.FULL_CLEAR:
            out.clear()

        for i, rain in enumerate(self.columns):
            if rain is None:
                if self.rng.random() < self.config.spawn_probability:
                    self.spawn_at(i)
                continue

            if rain.advance(self.height):
                rain.render(out)
            else:
                if self.config.erases_tails:
                    rain.erase(out)
                self.columns[i] = None

    def live(self) -> Iterator[Tuple[int, Rain]]:
        """(column, streak) for every occupied slot."""
        for i, rain in enumerate(self.columns):
            if rain is not None:
                yield i, rain

    def live_count(self) -> int:
        return sum(1 for rain in self.columns if rain is not None)
