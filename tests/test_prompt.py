"""
Tests for prompt generation, typed progress and the virtual paddle center.
"""

import random

import pytest

from typing_pong import BoardConfig, Side
from typing_pong.prompt import (FALLBACK_DISTANCE_COLS, PredictiveDefensePromptGenerator, Prompt,
                                RallyContext, TypedProgressTracker, underline_span)
from typing_pong.trajectory import Position, Velocity


def straight_down(board, col):
    """Ball leaving the top line straight toward ``col`` on the bottom line."""
    return Position(board.column_to_x(col), board.top_line), Velocity(0.0, 0.5)


class TestGenerator:
    def test_scenario_distance_four(self, board, rng):
        gen = PredictiveDefensePromptGenerator(board, rng=rng)
        pos, vel = straight_down(board, 7)
        prompt, rally = gen.generate(Side.TOP, Side.BOTTOM, pos, vel, defender_column=11)

        assert rally.predicted_column == 7
        assert prompt.distance_columns == 4
        assert len(prompt.text) == 6
        assert prompt.center_step_index == 3

        tracker = TypedProgressTracker()
        tracker.reset(prompt)
        for ch in prompt.text[:4]:
            assert tracker.feed(ch)
        assert tracker.virtual_center(rally, board.half_paddle) == rally.predicted_column

    def test_prediction_follows_wall_bounces(self, board, rng):
        gen = PredictiveDefensePromptGenerator(board, rng=rng)
        # from x=0.9 heading right, bounces off the right wall once
        pos, vel = Position(0.9, board.top_line), Velocity(0.2, 0.76)
        col = gen.predict_column(pos, vel, Side.BOTTOM)
        assert col == board.x_to_column(0.98 - (0.9 + 0.2 - 0.98))

    def test_length_matches_distance_plus_half(self, board):
        rnd = random.Random(5)
        gen = PredictiveDefensePromptGenerator(board, rng=rnd)
        for _ in range(200):
            pos = Position(rnd.uniform(0.05, 0.95), board.bottom_line)
            vel = Velocity(rnd.uniform(-1, 1), -rnd.uniform(0.1, 1))
            home = rnd.randint(-3, 22)
            prompt, rally = gen.generate(Side.BOTTOM, Side.TOP, pos, vel, home)
            assert prompt.distance_columns == abs(rally.predicted_column - home)
            assert len(prompt.text) == prompt.distance_columns + board.half_paddle
            assert prompt.center_step_index == max(prompt.distance_columns - 1, 0)

    def test_degenerate_geometry_falls_back(self, board, rng):
        gen = PredictiveDefensePromptGenerator(board, rng=rng)
        # moving away from the defender line: never arrives
        prompt, rally = gen.generate(Side.TOP, Side.BOTTOM, Position(0.5, 0.5), Velocity(0.1, -0.5), 12)
        assert prompt.distance_columns == FALLBACK_DISTANCE_COLS
        assert len(prompt.text) == FALLBACK_DISTANCE_COLS + board.half_paddle
        assert rally.predicted_column == 12

    def test_horizontal_motion_falls_back(self, board, rng):
        gen = PredictiveDefensePromptGenerator(board, rng=rng)
        assert gen.predict_column(Position(0.5, 0.5), Velocity(1.0, 0.0), Side.TOP) is None

    def test_custom_bank(self, board, rng):
        gen = PredictiveDefensePromptGenerator(board, bank={1: ["x"]}, rng=rng)
        pos, vel = straight_down(board, 5)
        prompt, _ = gen.generate(Side.TOP, Side.BOTTOM, pos, vel, 5)
        # 2-char target has no exact fit, greedy overshoots to 3
        assert prompt.text == "x x"


class TestTypedProgressTracker:
    def make(self, text="go up"):
        tracker = TypedProgressTracker()
        tracker.reset(Prompt(text, 2, 3))
        return tracker

    def test_case_insensitive_letters_and_spaces(self):
        tracker = self.make()
        assert tracker.feed("G")
        assert tracker.feed("o")
        assert tracker.feed(" ")
        assert tracker.typed_text == "go "
        assert tracker.remaining == "up"

    def test_mismatch_is_ignored(self):
        tracker = self.make()
        assert not tracker.feed("x")
        assert not tracker.feed("1")
        assert not tracker.feed("go")
        assert not tracker.feed("")
        assert tracker.typed_length == 0

    def test_stops_at_prompt_length(self):
        tracker = self.make("ok")
        assert tracker.feed("o") and tracker.feed("k")
        assert tracker.complete
        assert tracker.expected() is None
        assert not tracker.feed("k")
        assert tracker.typed_length == 2

    def test_no_prompt(self):
        tracker = TypedProgressTracker()
        assert not tracker.feed("a")
        assert not tracker.complete
        assert tracker.text == ""

    def test_steps_capped_by_planned_travel(self):
        tracker = TypedProgressTracker()
        tracker.reset(Prompt("cat cat", 2, 3))
        for ch in "cat cat":
            tracker.feed(ch)
        rally = RallyContext(Side.TOP, Side.BOTTOM, 10, 3)
        assert tracker.steps(rally, 1) == 4
        assert tracker.virtual_center(rally, 1) == 11

    def test_clear(self):
        tracker = self.make()
        tracker.feed("g")
        tracker.clear()
        assert tracker.prompt is None
        assert tracker.typed_length == 0


class TestUnderlineSpan:
    def test_span_moves_with_typing(self):
        prompt = Prompt("abc def", 3, 4)
        rally = RallyContext(Side.TOP, Side.BOTTOM, 10, 4)
        tracker = TypedProgressTracker()
        tracker.reset(prompt)
        assert underline_span(prompt, tracker, rally, 2) == (-3, 1)
        for ch in "abc ":
            tracker.feed(ch)
        # centered on the green letter once the distance is typed
        assert underline_span(prompt, tracker, rally, 2) == (1, 5)
