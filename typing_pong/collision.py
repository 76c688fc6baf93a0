"""Paddle-line collisions: hit or miss, and the bounce that follows a hit.

The defender's authoritative position during a rally is the virtual center
derived from typed progress. The rendered paddle column is only consulted
when there is no rally context, which is the case for a bot defender.
"""
import logging
import random
from dataclasses import dataclass
from typing import Optional

from .config import BoardConfig, Side
from .prompt import RallyContext, TypedProgressTracker
from .trajectory import STOPPED, Position, Velocity

log = logging.getLogger(__name__)

CENTER_SLOPE = 3.0
NEAR_SLOPE = 1.0
FAR_SLOPE = 0.5


@dataclass(frozen=True)
class CollisionOutcome:
    hit: bool
    position: Position
    velocity: Velocity
    rel_columns: int = 0
    winner: Optional[Side] = None


def relative_columns(hit_column: float, center: float, half: int) -> int:
    rel = round(hit_column - center)
    return max(-half, min(rel, half))


def bounce_velocity(rel: int, side: Side, previous_vx: float, travel_time: float,
                    board: BoardConfig, rng=random) -> Velocity:
    """Velocity leaving a paddle hit ``rel`` columns off its center.

    Slope is rise over run: 3 on a center hit, 1 one column off, 0.5 further
    out. Vertical speed always crosses the board in ``travel_time``.
    """
    vy_mag = board.vertical_span / travel_time
    vy = vy_mag if side is Side.TOP else -vy_mag  # top hit -> ball goes down

    if rel == 0:
        if previous_vx > 0:
            sign = 1
        elif previous_vx < 0:
            sign = -1
        else:
            sign = rng.choice((-1, 1))
        return Velocity(vy_mag / CENTER_SLOPE * sign, vy)

    slope = NEAR_SLOPE if abs(rel) == 1 else FAR_SLOPE
    sign = 1 if rel > 0 else -1
    return Velocity(vy_mag / slope * sign, vy)


class CollisionResolver:
    def __init__(self, board: BoardConfig, rng=None):
        self.board = board
        self.rng = rng or random.Random()

    def resolve(self, side: Side, pos: Position, vel: Velocity,
                rally: Optional[RallyContext], tracker: TypedProgressTracker,
                paddle_column: float, travel_time: float) -> CollisionOutcome:
        """Decide the ball's fate at ``side``'s paddle line.

        ``tracker`` is read at call time, so a keystroke landing on the same
        frame as the collision still counts. ``travel_time`` is the already
        ramped value a hit would leave with.
        """
        board = self.board
        half = board.half_paddle
        y = board.paddle_line(side)

        if rally is not None and rally.defender is side and rally.predicted_column is not None:
            predicted = rally.predicted_column
            center = tracker.virtual_center(rally, half)
            hit = center - half <= predicted <= center + half
            rel = relative_columns(predicted, center, half)
            x = board.clamp_x(board.column_to_x(predicted))
        else:
            lo, hi = board.paddle_bounds(paddle_column)
            hit = lo <= pos.x <= hi
            hit_col = board.x_to_column(pos.x)
            rel = relative_columns(hit_col, round(paddle_column), half)
            x = board.clamp_x(board.column_to_x(hit_col))

        if not hit:
            log.debug("%s missed at x=%.3f", side.value, pos.x)
            return CollisionOutcome(False, Position(pos.x, y), STOPPED, rel, side.opponent)

        new_vel = bounce_velocity(rel, side, vel.vx, travel_time, board, self.rng)
        log.debug("%s hit, %+d cols off center -> %s", side.value, rel, new_vel)
        return CollisionOutcome(True, Position(x, y), new_vel, rel)
