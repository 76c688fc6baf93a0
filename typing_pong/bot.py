import random
from dataclasses import dataclass
from typing import Dict

from .config import BoardConfig, Side
from .trajectory import Position, Velocity

BOT_SERVE_DELAY = 1.5


@dataclass(frozen=True)
class BotSettings:
    move_interval: float  # seconds per one-column step
    mistake_chance: float


BOT_SETTINGS: Dict[str, BotSettings] = {
    "easy": BotSettings(move_interval=0.2, mistake_chance=0.25),
    "medium": BotSettings(move_interval=0.12, mistake_chance=0.1),
    "hard": BotSettings(move_interval=0.08, mistake_chance=0.02),
}


class BotDefender:
    """Tracks the ball one column at a time, sometimes the wrong way."""

    def __init__(self, board: BoardConfig, side: Side = Side.TOP, difficulty: str = "medium", rng=None):
        if difficulty not in BOT_SETTINGS:
            raise ValueError(f"unknown bot difficulty {difficulty!r}")
        self.board = board
        self.side = side
        self.difficulty = difficulty
        self.settings = BOT_SETTINGS[difficulty]
        self.rng = rng or random.Random()
        self.accumulator = 0.0

    def reset(self):
        self.accumulator = 0.0

    def approaching(self, vel: Velocity) -> bool:
        return vel.vy < 0 if self.side is Side.TOP else vel.vy > 0

    def update(self, dt: float, column: int, ball: Position, vel: Velocity) -> int:
        """Return the bot paddle's column after ``dt`` seconds."""
        if not self.approaching(vel):
            return column
        self.accumulator += dt
        while self.accumulator >= self.settings.move_interval:
            self.accumulator -= self.settings.move_interval
            error = self.board.x_to_column(ball.x) - column
            if error == 0:
                continue
            step = 1 if error > 0 else -1
            if self.rng.random() < self.settings.mistake_chance:
                step = -step
            column += step
        return column
