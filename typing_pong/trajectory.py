"""Analytic ball motion.

The ball never gets stepped frame by frame. Each leg of its path is solved
ahead of time as a ``Segment`` ending on the next wall or paddle line, and
frames only interpolate along it.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from .config import BoardConfig, Side

log = logging.getLogger(__name__)

EPS = 1e-6


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class Velocity:
    vx: float
    vy: float

    @property
    def moving(self) -> bool:
        return self.vx != 0 or self.vy != 0


STOPPED = Velocity(0.0, 0.0)


class EventType(str, Enum):
    WALL_LEFT = "wall-left"
    WALL_RIGHT = "wall-right"
    PADDLE_TOP = "paddle-top"
    PADDLE_BOTTOM = "paddle-bottom"

    @property
    def is_wall(self) -> bool:
        return self in (EventType.WALL_LEFT, EventType.WALL_RIGHT)

    @property
    def side(self) -> Optional[Side]:
        if self is EventType.PADDLE_TOP:
            return Side.TOP
        if self is EventType.PADDLE_BOTTOM:
            return Side.BOTTOM
        return None


@dataclass(frozen=True)
class BoundaryEvent:
    type: EventType
    time: float


@dataclass(frozen=True)
class Segment:
    start: Position
    end: Position
    duration: float
    event: Optional[BoundaryEvent] = None

    @property
    def idle(self) -> bool:
        return self.duration <= 0 or self.event is None

    def position_at(self, elapsed: float) -> Position:
        if self.idle:
            return self.start
        t = max(0.0, min(elapsed / self.duration, 1.0))
        return Position(
            self.start.x + (self.end.x - self.start.x) * t,
            self.start.y + (self.end.y - self.start.y) * t,
        )


def idle_segment(pos: Position) -> Segment:
    return Segment(pos, pos, 0.0, None)


def plan_segment(pos: Position, vel: Velocity, board: BoardConfig) -> Segment:
    """Plan the leg from ``pos`` to the next boundary crossing."""
    events = []
    if vel.vx < 0:
        events.append(BoundaryEvent(EventType.WALL_LEFT, (board.wall_left - pos.x) / vel.vx))
    elif vel.vx > 0:
        events.append(BoundaryEvent(EventType.WALL_RIGHT, (board.wall_right - pos.x) / vel.vx))
    if vel.vy < 0:
        events.append(BoundaryEvent(EventType.PADDLE_TOP, (board.top_line - pos.y) / vel.vy))
    elif vel.vy > 0:
        events.append(BoundaryEvent(EventType.PADDLE_BOTTOM, (board.bottom_line - pos.y) / vel.vy))

    # anything at or under EPS is the event we just resolved
    events = [e for e in events if e.time > EPS]
    if not events:
        return idle_segment(pos)

    nxt = min(events, key=lambda e: e.time)
    end = Position(pos.x + vel.vx * nxt.time, pos.y + vel.vy * nxt.time)
    return Segment(pos, end, nxt.time, nxt)


def reflect_x(x0: float, vx: float, t: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Where 1D motion between walls at ``lo`` and ``hi`` ends up after ``t``.

    Folds the unbounded position back into the court instead of simulating
    each wall bounce: the motion is periodic with period ``2 * (hi - lo)``.
    """
    width = hi - lo
    period = 2 * width
    pos = (x0 - lo + vx * t) % period
    if pos > width:
        pos = period - pos
    return max(lo, min(lo + pos, hi))


# (side, position at the line, velocity) -> (position, velocity), or None
# when the ball was not returned and motion must stop.
PaddleHandler = Callable[[Side, Position, Velocity], Optional[Tuple[Position, Velocity]]]


class SegmentAnimator:
    """Drives the single live segment, one frame callback at a time."""

    def __init__(self, board: BoardConfig, on_paddle: PaddleHandler):
        self.board = board
        self.on_paddle = on_paddle
        self.segment: Optional[Segment] = None
        self.velocity = STOPPED
        self.position = Position(0.5, 0.5)
        self.elapsed = 0.0

    @property
    def active(self) -> bool:
        return self.segment is not None and not self.segment.idle

    def start(self, pos: Position, vel: Velocity):
        self.position = pos
        self.velocity = vel
        self._replan(pos, vel)

    def cancel(self, park: Optional[Position] = None):
        self.segment = None
        self.elapsed = 0.0
        self.velocity = STOPPED
        if park is not None:
            self.position = park

    def _replan(self, pos: Position, vel: Velocity):
        # leaving a paddle snapped onto a side wall, heading out: that wall bounces first
        if ((pos.x >= self.board.wall_right - EPS and vel.vx > 0)
                or (pos.x <= self.board.wall_left + EPS and vel.vx < 0)):
            vel = Velocity(-vel.vx, vel.vy)
            self.velocity = vel
        self.segment = plan_segment(pos, vel, self.board)
        self.elapsed = 0.0
        if self.segment.idle:
            log.debug("no boundary ahead of %s with %s, halting", pos, vel)
        else:
            log.debug("segment %s in %.3fs -> %s", self.segment.event.type.value,
                      self.segment.duration, self.segment.end)

    def tick(self, dt: float) -> Position:
        seg = self.segment
        if seg is None or seg.idle:
            return self.position

        self.elapsed += dt
        self.position = seg.position_at(self.elapsed)
        if self.elapsed < seg.duration:
            return self.position

        # Segment finished: resolve its event from the exact endpoint
        pos, vel = seg.end, self.velocity
        evt = seg.event.type
        if evt is EventType.WALL_LEFT:
            vel = Velocity(abs(vel.vx), vel.vy)
        elif evt is EventType.WALL_RIGHT:
            vel = Velocity(-abs(vel.vx), vel.vy)
        else:
            result = self.on_paddle(evt.side, pos, vel)
            if result is None:
                # point scored inside the handler; it already reset the ball
                return self.position
            pos, vel = result

        self.position = pos
        self.velocity = vel
        self._replan(pos, vel)
        return self.position
