from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

BOARD_COLS = 20
PADDLE_WIDTH_COLS = 5  # must be odd

MIN_BOARD_COLS, MAX_BOARD_COLS = 8, 50
MIN_POINTS, MAX_POINTS = 3, 11
MIN_START_TRAVEL, MAX_START_TRAVEL = 1.0, 10.0

INITIAL_TRAVEL_TIME = 5.0
MIN_TRAVEL_TIME = 2.0
TRAVEL_TIME_STEP = 0.1

# Normalized coordinates (0..1)
TOP_PADDLE_Y = 0.1
BOTTOM_PADDLE_Y = 0.9
BALL_RADIUS = 0.02

SERVE_COUNTDOWN = 30.0


class Side(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"

    @property
    def opponent(self) -> "Side":
        return Side.BOTTOM if self is Side.TOP else Side.TOP


class RoundPhase(str, Enum):
    PRE_SERVE = "pre_serve"
    RALLY = "rally"
    GAME_OVER = "game_over"


class GameMode(str, Enum):
    SINGLE = "single"  # top paddle is a bot
    TWO = "two"


def _clamp(value, lo, hi):
    return max(lo, min(value, hi))


@dataclass(frozen=True)
class BoardConfig:
    """Static board geometry and pacing.

    Values are coerced into range on construction instead of rejected, the
    same way a settings form would clamp them.
    """
    columns: int = BOARD_COLS
    paddle_width: int = PADDLE_WIDTH_COLS
    top_paddle_y: float = TOP_PADDLE_Y
    bottom_paddle_y: float = BOTTOM_PADDLE_Y
    ball_radius: float = BALL_RADIUS
    initial_travel_time: float = INITIAL_TRAVEL_TIME
    min_travel_time: float = MIN_TRAVEL_TIME
    travel_time_step: float = TRAVEL_TIME_STEP
    max_points: Optional[int] = None
    serve_countdown: float = SERVE_COUNTDOWN

    def __post_init__(self):
        cols = _clamp(int(self.columns), MIN_BOARD_COLS, MAX_BOARD_COLS)
        width = _clamp(int(self.paddle_width), 1, cols - 1)
        if width % 2 == 0:
            width -= 1
        start = _clamp(float(self.initial_travel_time), MIN_START_TRAVEL, MAX_START_TRAVEL)
        floor = _clamp(float(self.min_travel_time), MIN_START_TRAVEL, start)
        step = max(0.0, float(self.travel_time_step))
        points = self.max_points
        if points is not None:
            points = _clamp(int(points), MIN_POINTS, MAX_POINTS)
        # frozen dataclass: write through object.__setattr__
        object.__setattr__(self, "columns", cols)
        object.__setattr__(self, "paddle_width", width)
        object.__setattr__(self, "initial_travel_time", start)
        object.__setattr__(self, "min_travel_time", floor)
        object.__setattr__(self, "travel_time_step", step)
        object.__setattr__(self, "max_points", points)

    def with_changes(self, **changes) -> "BoardConfig":
        return replace(self, **changes)

    @property
    def half_paddle(self) -> int:
        return self.paddle_width // 2

    @property
    def vertical_span(self) -> float:
        return self.bottom_paddle_y - self.top_paddle_y

    @property
    def top_line(self) -> float:
        return self.top_paddle_y + self.ball_radius

    @property
    def bottom_line(self) -> float:
        return self.bottom_paddle_y - self.ball_radius

    @property
    def wall_left(self) -> float:
        return self.ball_radius

    @property
    def wall_right(self) -> float:
        return 1.0 - self.ball_radius

    def clamp_x(self, x: float) -> float:
        return max(self.wall_left, min(x, self.wall_right))

    def paddle_line(self, side: Side) -> float:
        return self.top_line if side is Side.TOP else self.bottom_line

    def home_column(self, side: Side) -> int:
        return 0 if side is Side.TOP else self.columns - 1

    def column_to_x(self, col: float) -> float:
        return col / (self.columns - 1)

    def x_to_column(self, x: float) -> int:
        return round(x * (self.columns - 1))

    def paddle_bounds(self, col: float):
        """(min_x, max_x) of a paddle centered on ``col``, overhang allowed."""
        center = self.column_to_x(col)
        half_w = self.paddle_width / self.columns / 2
        return center - half_w, center + half_w

    def ramp(self, travel_time: float) -> float:
        # Rounded so repeated decrements do not accumulate float noise
        return max(self.min_travel_time, round(travel_time - self.travel_time_step, 2))

    def winner_reached(self, score: int) -> bool:
        return self.max_points is not None and score >= self.max_points
