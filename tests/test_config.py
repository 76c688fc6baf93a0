"""
Tests for BoardConfig normalization and derived geometry.
"""

import pytest

from typing_pong import BoardConfig, Side


class TestNormalization:
    """Out-of-range settings are coerced, never rejected."""

    def test_defaults(self, board):
        assert board.columns == 20
        assert board.paddle_width == 5
        assert board.half_paddle == 2
        assert board.initial_travel_time == 5.0
        assert board.max_points is None

    @pytest.mark.parametrize("cols,expected", [(4, 8), (8, 8), (33, 33), (50, 50), (80, 50)])
    def test_columns_clamped(self, cols, expected):
        assert BoardConfig(columns=cols).columns == expected

    @pytest.mark.parametrize("width,expected", [(0, 1), (1, 1), (4, 3), (6, 5), (19, 19), (30, 19)])
    def test_paddle_width_forced_odd_and_narrower_than_board(self, width, expected):
        assert BoardConfig(columns=20, paddle_width=width).paddle_width == expected

    def test_paddle_width_on_small_board(self):
        cfg = BoardConfig(columns=9, paddle_width=9)
        assert cfg.paddle_width == 7
        assert cfg.paddle_width % 2 == 1
        assert cfg.paddle_width <= cfg.columns - 1

    def test_travel_time_range(self):
        assert BoardConfig(initial_travel_time=0.2).initial_travel_time == 1.0
        assert BoardConfig(initial_travel_time=25).initial_travel_time == 10.0

    def test_minimum_travel_never_above_start(self):
        cfg = BoardConfig(initial_travel_time=1.5)
        assert cfg.min_travel_time == 1.5

    @pytest.mark.parametrize("floor,expected", [(0, 1.0), (-2, 1.0), (0.5, 1.0), (1.5, 1.5), (3.0, 3.0), (9, 5.0)])
    def test_minimum_travel_kept_positive(self, floor, expected):
        assert BoardConfig(min_travel_time=floor).min_travel_time == expected

    @pytest.mark.parametrize("step,expected", [(-0.5, 0.0), (0, 0.0), (0.25, 0.25)])
    def test_travel_step_never_negative(self, step, expected):
        assert BoardConfig(travel_time_step=step).travel_time_step == expected

    def test_ramp_stops_at_positive_floor(self):
        cfg = BoardConfig(min_travel_time=0, travel_time_step=3)
        t = cfg.initial_travel_time
        for _ in range(10):
            t = cfg.ramp(t)
        assert t == 1.0

    def test_negative_step_does_not_slow_the_ball(self):
        cfg = BoardConfig(travel_time_step=-1)
        assert cfg.ramp(5.0) == 5.0

    @pytest.mark.parametrize("points,expected", [(None, None), (1, 3), (7, 7), (20, 11)])
    def test_max_points(self, points, expected):
        assert BoardConfig(max_points=points).max_points == expected

    def test_with_changes_renormalizes(self, board):
        cfg = board.with_changes(paddle_width=4, columns=100)
        assert cfg.paddle_width == 3
        assert cfg.columns == 50
        assert board.columns == 20  # source config untouched


class TestGeometry:
    def test_paddle_lines_include_ball_radius(self, board):
        assert board.paddle_line(Side.TOP) == pytest.approx(0.12)
        assert board.paddle_line(Side.BOTTOM) == pytest.approx(0.88)
        assert board.vertical_span == pytest.approx(0.8)

    def test_columns_map_to_unit_interval(self, board):
        assert board.column_to_x(0) == 0.0
        assert board.column_to_x(19) == 1.0
        assert board.x_to_column(board.column_to_x(7)) == 7

    def test_home_columns(self, board):
        assert board.home_column(Side.TOP) == 0
        assert board.home_column(Side.BOTTOM) == 19

    def test_paddle_bounds_allow_overhang(self, board):
        lo, hi = board.paddle_bounds(-3)
        assert lo < hi < 0

    def test_clamp_x_keeps_ball_inside_walls(self, board):
        assert board.clamp_x(0.0) == pytest.approx(board.wall_left)
        assert board.clamp_x(1.0) == pytest.approx(board.wall_right)
        assert board.clamp_x(0.4) == 0.4

    def test_ramp_is_floored(self, board):
        assert board.ramp(5.0) == pytest.approx(4.9)
        assert board.ramp(2.05) == 2.0
        assert board.ramp(2.0) == 2.0

    def test_winner_reached(self, board):
        assert not board.winner_reached(99)
        capped = board.with_changes(max_points=3)
        assert not capped.winner_reached(2)
        assert capped.winner_reached(3)

    def test_side_opponent(self):
        assert Side.TOP.opponent is Side.BOTTOM
        assert Side.BOTTOM.opponent is Side.TOP
