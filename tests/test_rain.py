"""
Tests for the Rain streak.

Tests spawning, the advance/retire hand-off, gradient rendering and tail
erasure.
"""

import math
import os
import random
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from digital_rain.config import RainConfig, RefreshStrategy
from digital_rain.models import Rgb
from digital_rain.rain import Rain
from digital_rain.terminal import RecordingTerminal


def make_rain(length=5, speed=1, head_row=0, column=0, **config):
    cfg = RainConfig(speed=speed, **config)
    return Rain(column, [ord('A') + i for i in range(length)], cfg, head_row=head_row)


# ===========================================================================
# Spawn Tests
# ===========================================================================

class TestRainSpawn:
    def test_spawn_length_within_range(self):
        cfg = RainConfig(chars_min_len=10)
        for seed in range(200):
            rain = Rain.spawn(0, 24, random.Random(seed), cfg)
            # 24 // 5 == 4 extra glyphs at most (exclusive)
            assert 10 <= rain.length < 14

    def test_spawn_glyphs_are_visible_ascii(self):
        rain = Rain.spawn(0, 100, random.Random(1), RainConfig())
        assert all(33 <= code <= 126 for code in rain.glyphs)
        assert ' ' not in rain.text

    def test_spawn_initial_state(self):
        rain = Rain.spawn(7, 24, random.Random(1), RainConfig())
        assert rain.column == 7
        assert rain.head_row == 0
        assert rain.revealed == 0
        assert rain.alive is True

    def test_spawn_start_row_offset(self):
        rain = Rain.spawn(0, 24, random.Random(1), RainConfig(spawn_start_row=1))
        assert rain.head_row == 1

    def test_spawn_start_row_clamped_to_grid(self):
        rain = Rain.spawn(0, 1, random.Random(1), RainConfig(spawn_start_row=1))
        assert rain.head_row == 0

    def test_short_terminal_uses_minimum_length(self):
        """Heights under 5 leave no room for the random extra length."""
        cfg = RainConfig(chars_min_len=10)
        for height in range(1, 5):
            rain = Rain.spawn(0, height, random.Random(3), cfg)
            assert rain.length == 10

    def test_same_seed_same_streak(self):
        a = Rain.spawn(0, 40, random.Random(99), RainConfig())
        b = Rain.spawn(0, 40, random.Random(99), RainConfig())
        assert a.glyphs == b.glyphs


# ===========================================================================
# Advance Tests
# ===========================================================================

class TestRainAdvance:
    def test_head_moves_by_speed(self):
        rain = make_rain(speed=3)
        assert rain.advance(24) is True
        assert rain.head_row == 3
        assert rain.revealed == 0

    def test_head_clamps_and_credits_overshoot(self):
        """Movement past the bottom edge retires glyphs instead."""
        rain = make_rain(length=10, speed=5, head_row=20)
        rain.advance(24)
        assert rain.head_row == 23
        # 3 rows to the bottom, 2 left over
        assert rain.revealed == 2

    def test_head_at_bottom_retires_full_speed(self):
        rain = make_rain(length=10, speed=4, head_row=23)
        rain.advance(24)
        assert rain.head_row == 23
        assert rain.revealed == 4

    def test_exact_landing_on_bottom_row(self):
        rain = make_rain(length=10, speed=3, head_row=20)
        rain.advance(24)
        assert rain.head_row == 23
        assert rain.revealed == 0

    def test_revealed_never_exceeds_length(self):
        rain = make_rain(length=3, speed=5, head_row=9)
        assert rain.advance(10) is False
        assert rain.revealed == 3

    @pytest.mark.parametrize("height,speed,length", [
        (24, 1, 10),
        (24, 5, 10),
        (24, 5, 13),
        (10, 3, 12),
        (1, 1, 4),
        (2, 7, 10),
        (50, 4, 19),
    ])
    def test_lifetime_closed_form(self, height, speed, length):
        """A streak from row 0 dies after ceil((h - 1 + L) / s) advances."""
        rain = make_rain(length=length, speed=speed)
        ticks = 0
        previous_revealed = 0
        previous_head = rain.head_row
        while True:
            ticks += 1
            alive = rain.advance(height)
            assert 0 <= rain.revealed <= rain.length
            assert rain.revealed >= previous_revealed
            assert rain.head_row >= previous_head
            assert 0 <= rain.head_row <= height - 1
            previous_revealed = rain.revealed
            previous_head = rain.head_row
            if not alive:
                break
        assert ticks == math.ceil((height - 1 + length) / speed)


# ===========================================================================
# Render Tests
# ===========================================================================

class TestRainRender:
    def test_segment_drawn_upward_from_head(self):
        term = RecordingTerminal(10, 10)
        rain = make_rain(length=3, head_row=5, column=4, draw_background=False)
        rain.render(term)
        term.flush()
        assert term.char_at(4, 5) == 'A'
        assert term.char_at(4, 4) == 'B'
        assert term.char_at(4, 3) == 'C'
        assert term.drawn_cells() == 3

    def test_segment_clipped_at_top(self):
        term = RecordingTerminal(10, 10)
        rain = make_rain(length=5, head_row=1, draw_background=False)
        rain.render(term)
        term.flush()
        assert term.column_text(0)[:2] == 'BA'
        assert term.drawn_cells() == 2

    def test_brightness_gradient(self):
        term = RecordingTerminal(10, 10)
        rain = make_rain(length=5, head_row=4, draw_background=False)
        rain.render(term)
        term.flush()
        # 255 // 5 == 51 per glyph
        assert term.screen[(0, 4)][1] == Rgb(255, 255, 255)
        assert term.screen[(0, 3)][1] == Rgb(204, 255, 204)
        assert term.screen[(0, 0)][1] == Rgb(51, 255, 51)

    def test_gradient_restarts_at_revealed(self):
        term = RecordingTerminal(10, 10)
        rain = make_rain(length=5, head_row=9, draw_background=False)
        rain.revealed = 2
        rain.render(term)
        term.flush()
        assert term.char_at(0, 9) == 'C'
        assert term.screen[(0, 9)][1] == Rgb(255, 255, 255)
        assert term.drawn_cells() == 3

    def test_background_glow(self):
        term = RecordingTerminal(10, 10)
        rain = make_rain(length=5, head_row=4, draw_background=True)
        rain.render(term)
        term.flush()
        assert term.screen[(0, 4)][2] == Rgb(0, 204, 0)

    def test_no_background_commands_when_disabled(self):
        term = RecordingTerminal(10, 10)
        make_rain(length=5, head_row=4, draw_background=False).render(term)
        assert not any(c[0] == 'set_background' for c in term.commands)

    def test_color_reset_after_each_glyph(self):
        term = RecordingTerminal(10, 10)
        make_rain(length=3, head_row=4, draw_background=False).render(term)
        names = [c[0] for c in term.commands]
        assert names.count('print_char') == names.count('reset_color') == 3

    def test_render_does_not_flush(self):
        term = RecordingTerminal(10, 10)
        make_rain(length=3, head_row=4).render(term)
        assert term.flush_count == 0
        assert term.drawn_cells() == 0


# ===========================================================================
# Tail Erase Tests
# ===========================================================================

class TestTailErase:
    def _expected_rows(self, rain):
        if not rain.alive:
            return set()
        return set(range(max(0, rain.segment_top), rain.head_row + 1))

    @pytest.mark.parametrize("speed,length,height", [
        (1, 3, 10),
        (2, 4, 10),
        (3, 5, 12),
        (1, 12, 10),
        (5, 10, 24),
    ])
    def test_no_stale_glyphs_without_clear(self, speed, length, height):
        """Only the live segment is ever visible when tails are erased."""
        term = RecordingTerminal(3, height)
        rain = make_rain(length=length, speed=speed, column=1, draw_background=False,
                         refresh_strategy=RefreshStrategy.TAIL_ERASE)
        rain.render(term)
        term.flush()
        while True:
            alive = rain.advance(height)
            if alive:
                rain.render(term)
            else:
                rain.erase(term)
            term.flush()
            visible = {y for (x, y) in term.screen if x == 1}
            assert visible == self._expected_rows(rain)
            if not alive:
                break
        assert term.drawn_cells() == 0

    def test_full_clear_strategy_never_blanks(self):
        term = RecordingTerminal(3, 10)
        rain = make_rain(length=3, speed=1, head_row=6, draw_background=False,
                         refresh_strategy=RefreshStrategy.FULL_CLEAR)
        rain.render(term)
        assert not any(c == ('print_char', ' ') for c in term.commands)

    def test_tail_erase_waits_for_streak_to_clear_top(self):
        term = RecordingTerminal(3, 10)
        rain = make_rain(length=5, speed=1, head_row=3,
                         refresh_strategy=RefreshStrategy.TAIL_ERASE)
        rain.render(term)
        assert not any(c == ('print_char', ' ') for c in term.commands)

    def test_tail_erase_blanks_speed_rows(self):
        term = RecordingTerminal(3, 20)
        rain = make_rain(length=4, speed=3, head_row=10,
                         refresh_strategy=RefreshStrategy.TAIL_ERASE)
        rain.render(term)
        blanks = [c for c in term.commands if c == ('print_char', ' ')]
        assert len(blanks) == 3

    def test_erase_without_render_is_noop(self):
        term = RecordingTerminal(3, 10)
        make_rain().erase(term)
        assert term.commands == []
