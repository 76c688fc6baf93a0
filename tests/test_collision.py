"""
Tests for hit/miss decisions and bounce physics.
"""

import random

import pytest

from typing_pong import Side
from typing_pong.collision import CollisionResolver, bounce_velocity, relative_columns
from typing_pong.prompt import Prompt, RallyContext, TypedProgressTracker
from typing_pong.trajectory import STOPPED, Position, Velocity


def typed(n, text="abcdefghij"):
    tracker = TypedProgressTracker()
    tracker.reset(Prompt(text, 3, 4))
    for ch in text[:n]:
        tracker.feed(ch)
    return tracker


RALLY = RallyContext(Side.TOP, Side.BOTTOM, predicted_column=10, distance_columns=4)


class TestBouncePhysics:
    def test_center_hit_is_three_to_one(self, board, rng):
        vel = bounce_velocity(0, Side.BOTTOM, 0.3, 4.0, board, rng)
        assert abs(vel.vy) / abs(vel.vx) == pytest.approx(3.0)
        assert abs(vel.vy) == pytest.approx(board.vertical_span / 4.0)

    @pytest.mark.parametrize("rel", [-1, 1])
    def test_one_off_center_is_45_degrees(self, board, rng, rel):
        vel = bounce_velocity(rel, Side.BOTTOM, 0.3, 4.0, board, rng)
        assert abs(vel.vy) / abs(vel.vx) == pytest.approx(1.0)
        assert (vel.vx > 0) == (rel > 0)

    @pytest.mark.parametrize("rel", [-3, -2, 2, 3])
    def test_far_off_center_is_shallow(self, board, rng, rel):
        vel = bounce_velocity(rel, Side.TOP, -0.3, 4.0, board, rng)
        assert abs(vel.vy) / abs(vel.vx) == pytest.approx(0.5)
        assert (vel.vx > 0) == (rel > 0)

    def test_direction_away_from_side_hit(self, board, rng):
        assert bounce_velocity(0, Side.TOP, 0.1, 3.0, board, rng).vy > 0
        assert bounce_velocity(0, Side.BOTTOM, 0.1, 3.0, board, rng).vy < 0

    def test_center_hit_keeps_horizontal_sign(self, board, rng):
        assert bounce_velocity(0, Side.TOP, 0.2, 3.0, board, rng).vx > 0
        assert bounce_velocity(0, Side.TOP, -0.2, 3.0, board, rng).vx < 0

    def test_center_hit_from_vertical_picks_a_side(self, board):
        signs = {bounce_velocity(0, Side.TOP, 0.0, 3.0, board, random.Random(s)).vx > 0 for s in range(20)}
        assert signs == {True, False}

    def test_relative_columns_clamped(self):
        assert relative_columns(10, 10, 2) == 0
        assert relative_columns(10, 14, 2) == -2
        assert relative_columns(10, 3, 2) == 2


class TestResolverTypedAuthority:
    def resolve(self, board, rng, n, pos=Position(0.3, 0.87), paddle_column=0):
        resolver = CollisionResolver(board, rng)
        return resolver.resolve(Side.BOTTOM, pos, Velocity(0.2, 0.5), RALLY, typed(n),
                                paddle_column, 4.9)

    def test_miss_awards_opponent(self, board, rng):
        out = self.resolve(board, rng, 0)  # virtual center 6, span [4, 8]
        assert not out.hit
        assert out.winner is Side.TOP
        assert out.velocity == STOPPED
        assert out.position.y == pytest.approx(board.bottom_line)

    def test_perfect_alignment_is_center_hit(self, board, rng):
        out = self.resolve(board, rng, 4)
        assert out.hit
        assert out.winner is None
        assert out.rel_columns == 0
        assert abs(out.velocity.vy) / abs(out.velocity.vx) == pytest.approx(3.0)
        assert out.velocity.vy < 0

    def test_ball_snaps_to_predicted_column(self, board, rng):
        # the free-running x is far away; typed progress decides
        out = self.resolve(board, rng, 4, pos=Position(0.9, 0.87))
        assert out.position.x == pytest.approx(board.column_to_x(10))
        assert out.position.y == pytest.approx(board.bottom_line)

    def test_rendered_paddle_is_ignored(self, board, rng):
        out = self.resolve(board, rng, 4, paddle_column=-40)
        assert out.hit

    @pytest.mark.parametrize("n,rel,hit", [(2, 2, True), (3, 1, True), (5, -1, True),
                                           (6, -2, True), (1, 2, False),
                                           # typing past the planned travel changes nothing
                                           (9, -2, True)])
    def test_overshoot_and_undershoot(self, board, rng, n, rel, hit):
        out = self.resolve(board, rng, n)
        assert out.hit is hit
        if hit:
            assert out.rel_columns == rel


class TestResolverGeometryFallback:
    def test_no_rally_uses_real_paddle(self, board, rng):
        resolver = CollisionResolver(board, rng)
        pos = Position(board.column_to_x(10), 0.1)
        out = resolver.resolve(Side.TOP, pos, Velocity(0.2, -0.5), None, TypedProgressTracker(), 10, 4.0)
        assert out.hit
        assert out.rel_columns == 0
        assert out.position.y == pytest.approx(board.top_line)

    def test_no_rally_miss(self, board, rng):
        resolver = CollisionResolver(board, rng)
        pos = Position(board.column_to_x(16), 0.1)
        out = resolver.resolve(Side.TOP, pos, Velocity(0.2, -0.5), None, TypedProgressTracker(), 10, 4.0)
        assert not out.hit
        assert out.winner is Side.BOTTOM

    def test_off_center_geometry_hit(self, board, rng):
        resolver = CollisionResolver(board, rng)
        pos = Position(board.column_to_x(11), 0.1)
        out = resolver.resolve(Side.TOP, pos, Velocity(-0.2, -0.5), None, TypedProgressTracker(), 10, 4.0)
        assert out.hit
        assert out.rel_columns == 1
        assert out.velocity.vx > 0
