"""Defender prompts and the typed progress that positions the defender."""
import logging
import random
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import BoardConfig, Side
from .trajectory import Position, Velocity, reflect_x
from .words import WORD_BANK, compose_prompt

log = logging.getLogger(__name__)

FALLBACK_DISTANCE_COLS = 3


@dataclass(frozen=True)
class Prompt:
    text: str
    center_step_index: int
    distance_columns: int


@dataclass(frozen=True)
class RallyContext:
    attacker: Side
    defender: Side
    predicted_column: Optional[int]
    distance_columns: int
    defender_start_column: float = 0


class TypedProgressTracker:
    """Counts correctly typed prompt characters; nothing else moves it."""

    def __init__(self):
        self.prompt: Optional[Prompt] = None
        self.typed_length = 0

    def reset(self, prompt: Optional[Prompt]):
        self.prompt = prompt
        self.typed_length = 0

    def clear(self):
        self.reset(None)

    @property
    def text(self) -> str:
        return self.prompt.text if self.prompt else ""

    @property
    def typed_text(self) -> str:
        return self.text[:self.typed_length]

    @property
    def remaining(self) -> str:
        return self.text[self.typed_length:]

    @property
    def complete(self) -> bool:
        return self.prompt is not None and self.typed_length >= len(self.text)

    def expected(self) -> Optional[str]:
        if self.prompt is None or self.complete:
            return None
        return self.text[self.typed_length]

    def feed(self, ch: str) -> bool:
        """Advance by one if ``ch`` is the next expected character."""
        expected = self.expected()
        if expected is None or len(ch) != 1:
            return False
        key = ch.lower()
        if not (key == " " or "a" <= key <= "z"):
            return False
        if key != expected.lower():
            return False
        self.typed_length += 1
        return True

    def steps(self, rally: RallyContext, half_paddle: int) -> int:
        # a greedy fallback prompt can run longer than the planned travel
        return min(self.typed_length, rally.distance_columns + half_paddle)

    def virtual_center(self, rally: RallyContext, half_paddle: int) -> float:
        return rally.predicted_column + (self.steps(rally, half_paddle) - rally.distance_columns)


def underline_span(prompt: Prompt, tracker: TypedProgressTracker, rally: RallyContext,
                   half_paddle: int) -> Tuple[int, int]:
    """Prompt character indexes the paddle covers right now (inclusive).

    Purely for drawing; hit detection reads ``virtual_center`` instead.
    """
    steps = tracker.steps(rally, half_paddle)
    center_now = prompt.center_step_index - (prompt.distance_columns - steps)
    return round(center_now - half_paddle), round(center_now + half_paddle)


class PredictiveDefensePromptGenerator:
    def __init__(self, board: BoardConfig, bank=None, rng=None):
        self.board = board
        self.bank = WORD_BANK if bank is None else bank
        self.rng = rng or random.Random()

    def predict_column(self, pos: Position, vel: Velocity, defender: Side) -> Optional[int]:
        """Column where the ball crosses the defender's line, or None if it never does."""
        if vel.vy == 0:
            return None
        t = (self.board.paddle_line(defender) - pos.y) / vel.vy
        if t <= 0:
            return None
        x = reflect_x(pos.x, vel.vx, t, self.board.wall_left, self.board.wall_right)
        return self.board.x_to_column(x)

    def generate(self, attacker: Side, defender: Side, pos: Position, vel: Velocity,
                 defender_column: float) -> Tuple[Prompt, RallyContext]:
        half = self.board.half_paddle
        predicted = self.predict_column(pos, vel, defender)
        if predicted is None:
            # degenerate geometry: short fixed prompt around the current column
            distance = FALLBACK_DISTANCE_COLS
            predicted = round(defender_column)
            log.debug("no forward crossing for %s, fallback prompt", defender.value)
        else:
            distance = abs(predicted - round(defender_column))

        text = compose_prompt(distance + half, self.bank, self.rng)
        prompt = Prompt(text, max(distance - 1, 0), distance)
        rally = RallyContext(attacker, defender, predicted, distance, defender_column)
        log.debug("%s defends col %d (distance %d): %r", defender.value, predicted, distance, text)
        return prompt, rally
