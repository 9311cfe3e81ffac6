"""
Tests for the Grid.

Tests resize resets, per-column lifecycle, spawn statistics and the
end-to-end single streak scenario.
"""

import os
import random
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from digital_rain.config import RainConfig, RefreshStrategy
from digital_rain.grid import Grid
from digital_rain.rain import Rain
from digital_rain.terminal import RecordingTerminal


def make_grid(width=10, height=24, seed=1, **config):
    return Grid(width, height, random.Random(seed), RainConfig(**config))


# ===========================================================================
# Grid Initialization Tests
# ===========================================================================

class TestGridInit:
    def test_one_slot_per_column(self):
        grid = make_grid(width=80)
        assert len(grid.columns) == 80
        assert all(slot is None for slot in grid.columns)

    def test_dimensions(self):
        grid = make_grid(width=80, height=24)
        assert grid.width == 80
        assert grid.height == 24
        assert grid.live_count() == 0


# ===========================================================================
# Resize Tests
# ===========================================================================

class TestGridResize:
    def test_resize_replaces_slots(self):
        grid = make_grid(width=10)
        grid.resize(25, 40)
        assert len(grid.columns) == 25
        assert grid.width == 25
        assert grid.height == 40

    def test_resize_discards_live_streaks(self):
        grid = make_grid(width=10, spawn_probability=1.0)
        grid.tick(RecordingTerminal(10, 24))
        assert grid.live_count() == 10
        grid.resize(10, 24)
        assert grid.live_count() == 0
        assert all(slot is None for slot in grid.columns)

    def test_resize_shrink(self):
        grid = make_grid(width=10, spawn_probability=1.0)
        grid.tick(RecordingTerminal(10, 24))
        grid.resize(3, 5)
        assert grid.columns == [None, None, None]

    def test_resize_to_zero_width(self):
        grid = make_grid(width=10)
        grid.resize(0, 0)
        assert grid.columns == []
        grid.tick(RecordingTerminal(0, 0))


# ===========================================================================
# Tick Tests
# ===========================================================================

class TestGridTick:
    def test_spawn_with_certain_probability(self):
        grid = make_grid(width=5, spawn_probability=1.0)
        grid.tick(RecordingTerminal(5, 24))
        assert grid.live_count() == 5
        for i, rain in grid.live():
            assert rain.column == i

    def test_no_spawn_with_zero_probability(self):
        grid = make_grid(width=5, spawn_probability=0.0)
        for _ in range(50):
            grid.tick(RecordingTerminal(5, 24))
        assert grid.live_count() == 0

    def test_new_streak_not_drawn_on_spawn_tick(self):
        term = RecordingTerminal(5, 24)
        grid = make_grid(width=5, spawn_probability=1.0)
        grid.tick(term)
        assert not any(c[0] == 'print_char' for c in term.commands)

    def test_live_streak_advanced_and_drawn(self):
        term = RecordingTerminal(5, 24)
        grid = make_grid(width=5, spawn_probability=0.0, speed=2)
        rain = grid.spawn_at(3)
        grid.tick(term)
        term.flush()
        assert rain.head_row == 2
        assert term.char_at(3, 2) == chr(rain.glyphs[0])

    def test_dead_streak_removed(self):
        grid = make_grid(width=3, height=10, spawn_probability=0.0, speed=1)
        grid.columns[1] = Rain(1, [65, 66], grid.config, head_row=9)
        grid.columns[1].revealed = 1
        grid.tick(RecordingTerminal(3, 10))
        assert grid.columns[1] is None

    def test_full_clear_queued_before_drawing(self):
        term = RecordingTerminal(5, 24)
        grid = make_grid(width=5, spawn_probability=0.0,
                         refresh_strategy=RefreshStrategy.FULL_CLEAR)
        grid.spawn_at(0)
        grid.tick(term)
        assert term.commands[0] == ('clear',)

    def test_tail_erase_never_clears(self):
        term = RecordingTerminal(5, 24)
        grid = make_grid(width=5, spawn_probability=0.5,
                         refresh_strategy=RefreshStrategy.TAIL_ERASE)
        for _ in range(100):
            grid.tick(term)
        assert ('clear',) not in term.commands

    def test_dying_streak_erased_under_tail_erase(self):
        term = RecordingTerminal(3, 10)
        grid = make_grid(width=3, height=10, spawn_probability=0.0, speed=1,
                         refresh_strategy=RefreshStrategy.TAIL_ERASE)
        grid.spawn_at(1)
        while grid.columns[1] is not None:
            grid.tick(term)
            term.flush()
        assert term.drawn_cells() == 0

    def test_tail_erase_screen_matches_live_streaks(self):
        """Without full clears the screen still shows only live segments."""
        term = RecordingTerminal(8, 12)
        grid = make_grid(width=8, height=12, seed=5, spawn_probability=0.2, speed=2,
                         refresh_strategy=RefreshStrategy.TAIL_ERASE)
        for _ in range(200):
            grid.tick(term)
            term.flush()
            expected = set()
            for x, rain in grid.live():
                # Streaks spawned this tick are not drawn yet
                if rain.head_row == grid.config.spawn_start_row and rain.revealed == 0:
                    continue
                expected |= {(x, y) for y in range(max(0, rain.segment_top), rain.head_row + 1)}
            assert set(term.screen) == expected

    def test_ticks_counted(self):
        grid = make_grid()
        for _ in range(3):
            grid.tick(RecordingTerminal())
        assert grid.ticks == 3


# ===========================================================================
# Spawn Statistics Tests
# ===========================================================================

class TestSpawnStatistics:
    def test_empirical_spawn_rate_converges(self):
        """An always-empty column spawns at rate P, independent of history."""
        grid = make_grid(width=1, seed=2024, spawn_probability=0.05)
        term = RecordingTerminal(1, 24)
        trials = 20000
        spawns = 0
        for _ in range(trials):
            grid.tick(term)
            if grid.columns[0] is not None:
                spawns += 1
                grid.columns[0] = None
        assert abs(spawns / trials - 0.05) < 0.01

    def test_columns_spawn_independently(self):
        grid = make_grid(width=200, seed=11, spawn_probability=0.5)
        grid.tick(RecordingTerminal(200, 24))
        # Neither all nor none of 200 fair coin flips
        assert 50 < grid.live_count() < 150


# ===========================================================================
# End-to-End Tests
# ===========================================================================

class TestSingleStreakLifetime:
    def test_streak_lifetime_at_speed_one(self):
        """h=24, s=1, P=0, CHARS_MIN_LEN=10: dies after exactly 23 + L ticks."""
        grid = make_grid(width=4, height=24, seed=42, speed=1,
                         spawn_probability=0.0, chars_min_len=10)
        rain = grid.spawn_at(0)
        length = rain.length
        assert 10 <= length <= 13

        term = RecordingTerminal(4, 24)
        ticks = 0
        while grid.columns[0] is not None:
            grid.tick(term)
            ticks += 1
            assert ticks <= 37

        assert ticks == 23 + length

    def test_seeded_length_is_reproducible(self):
        a = make_grid(seed=42, chars_min_len=10).spawn_at(0)
        b = make_grid(seed=42, chars_min_len=10).spawn_at(0)
        assert a.length == b.length
