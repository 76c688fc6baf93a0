"""Round flow: serve, rally, point, game over.

``RoundStateMachine`` is the single owner of ``SimulationState``. Frontends
feed it keys and frame deltas and read the state back for drawing; they never
write to it.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Optional

from .bot import BOT_SERVE_DELAY, BotDefender
from .collision import CollisionResolver
from .config import BoardConfig, GameMode, RoundPhase, Side
from .prompt import (PredictiveDefensePromptGenerator, Prompt, RallyContext,
                     TypedProgressTracker)
from .trajectory import STOPPED, Position, SegmentAnimator, Velocity
from .words import WORD_BANK

log = logging.getLogger(__name__)

CENTER = Position(0.5, 0.5)
SERVE_WORD_LENGTHS = (4, 5, 6)


class RallyInProgressError(RuntimeError):
    pass


@dataclass
class PaddleState:
    center_column: int  # may overhang the board edges
    width_columns: int


@dataclass
class Scoreboard:
    top: int = 0
    bottom: int = 0

    def __getitem__(self, side: Side) -> int:
        return self.top if side is Side.TOP else self.bottom

    def add(self, side: Side) -> int:
        if side is Side.TOP:
            self.top += 1
        else:
            self.bottom += 1
        return self[side]


class ServeCountdown:
    """Cancellable countdown ticking down in fixed one-second steps."""

    def __init__(self, duration: float, interval: float = 1.0):
        self.duration = duration
        self.interval = interval
        self.remaining = duration
        self.running = False
        self._acc = 0.0

    def start(self):
        self.remaining = self.duration
        self.running = True
        self._acc = 0.0

    def cancel(self):
        self.running = False
        self._acc = 0.0

    def tick(self, dt: float) -> bool:
        """Advance by ``dt``; True exactly once, when the countdown runs out."""
        if not self.running:
            return False
        self._acc += dt
        while self._acc >= self.interval:
            self._acc -= self.interval
            self.remaining = max(0.0, self.remaining - self.interval)
            if self.remaining <= 0:
                self.running = False
                return True
        return False


@dataclass
class SimulationState:
    phase: RoundPhase
    position: Position
    velocity: Velocity
    travel_time: float
    paddles: Dict[Side, PaddleState]
    attacker: Side = Side.BOTTOM
    scores: Scoreboard = field(default_factory=Scoreboard)
    prompt: Optional[Prompt] = None
    rally: Optional[RallyContext] = None
    progress: TypedProgressTracker = field(default_factory=TypedProgressTracker)
    serve: TypedProgressTracker = field(default_factory=TypedProgressTracker)
    rally_hits: int = 0
    winner: Optional[Side] = None
    status: str = ""

    @property
    def defender(self) -> Side:
        return self.attacker.opponent


class RoundStateMachine:
    def __init__(self, board: Optional[BoardConfig] = None, mode: GameMode = GameMode.TWO,
                 difficulty: str = "medium", rng=None, bank=None):
        self.board = board or BoardConfig()
        self.mode = GameMode(mode)
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self.bank = WORD_BANK if bank is None else bank
        self._build()

    def _build(self):
        board = self.board
        self._build_collaborators()
        self.state = SimulationState(
            phase=RoundPhase.PRE_SERVE,
            position=CENTER,
            velocity=STOPPED,
            travel_time=board.initial_travel_time,
            paddles={side: PaddleState(board.home_column(side), board.paddle_width) for side in Side},
        )
        self._enter_pre_serve(Side.BOTTOM, "Press Enter to serve after typing the serve word.")

    def _build_collaborators(self):
        board = self.board
        self.prompts = PredictiveDefensePromptGenerator(board, self.bank, self.rng)
        self.resolver = CollisionResolver(board, self.rng)
        self.animator = SegmentAnimator(board, self._on_paddle)
        self.countdown = ServeCountdown(board.serve_countdown)
        self.bot = None
        if self.mode is GameMode.SINGLE:
            self.bot = BotDefender(board, Side.TOP, self.difficulty, self.rng)
        self._bot_serve_in = 0.0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def phase(self) -> RoundPhase:
        return self.state.phase

    def is_bot(self, side: Side) -> bool:
        return self.bot is not None and self.bot.side is side

    def virtual_center(self) -> Optional[float]:
        s = self.state
        if s.phase is not RoundPhase.RALLY or s.rally is None:
            return None
        return s.progress.virtual_center(s.rally, self.board.half_paddle)

    @property
    def countdown_seconds(self) -> int:
        return int(round(self.countdown.remaining)) if self.countdown.running else 0

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def press_left(self) -> bool:
        return self._move_attacker(-1)

    def press_right(self) -> bool:
        return self._move_attacker(1)

    def _move_attacker(self, delta: int) -> bool:
        s = self.state
        if s.phase is not RoundPhase.PRE_SERVE or self.is_bot(s.attacker):
            return False
        paddle = s.paddles[s.attacker]
        col = max(0, min(paddle.center_column + delta, self.board.columns - 1))
        moved = col != paddle.center_column
        paddle.center_column = col
        return moved

    def type_char(self, ch: str) -> bool:
        s = self.state
        if s.phase is RoundPhase.PRE_SERVE:
            if self.is_bot(s.attacker):
                return False
            return s.serve.feed(ch)
        if s.phase is not RoundPhase.RALLY or s.rally is None or self.is_bot(s.defender):
            return False
        if not s.progress.feed(ch):
            return False

        # rendered paddle follows the typing; hit detection never reads it
        paddle = s.paddles[s.defender]
        target = s.rally.predicted_column
        prev = paddle.center_column
        paddle.center_column = prev + (1 if target >= prev else -1)
        if s.progress.complete:
            s.status = (f"{s.defender.value.capitalize()} finished the prompt. "
                        "The paddle may have overshot or undershot, watch the bounce!")
        return True

    def confirm(self) -> bool:
        s = self.state
        if s.phase is not RoundPhase.PRE_SERVE or s.serve.typed_length < 1:
            return False
        self.launch()
        return True

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _enter_pre_serve(self, attacker: Side, status: str):
        s = self.state
        s.phase = RoundPhase.PRE_SERVE
        s.attacker = attacker
        s.prompt = None
        s.rally = None
        s.progress.clear()
        lengths = ([n for n in SERVE_WORD_LENGTHS if self.bank.get(n)]
                   or sorted(n for n, words in self.bank.items() if words))
        word = self.rng.choice(self.bank[self.rng.choice(lengths)])
        s.serve.reset(Prompt(word, 0, 0))
        s.status = status
        if self.is_bot(attacker):
            self.countdown.cancel()
            self._bot_serve_in = BOT_SERVE_DELAY
        else:
            self.countdown.start()

    def launch(self):
        s = self.state
        if s.phase is not RoundPhase.PRE_SERVE:
            return
        self.countdown.cancel()
        attacker, defender = s.attacker, s.defender
        col = s.paddles[attacker].center_column
        pos = Position(self.board.clamp_x(self.board.column_to_x(col)), self.board.paddle_line(attacker))

        vy_mag = self.board.vertical_span / s.travel_time
        vy = vy_mag if attacker is Side.TOP else -vy_mag
        vel = Velocity(vy_mag * self.rng.choice((-1, 1)), vy)  # slope 1

        s.phase = RoundPhase.RALLY
        s.rally_hits = 0
        s.position, s.velocity = pos, vel
        self._setup_defense(attacker, defender, pos, vel)
        log.info("%s serves from column %d", attacker.value, col)
        self.animator.start(pos, vel)

    def _setup_defense(self, attacker: Side, defender: Side, pos: Position, vel: Velocity):
        s = self.state
        if self.is_bot(defender):
            s.prompt, s.rally = None, None
            s.progress.clear()
            self.bot.reset()
            s.status = "Bot is defending. Get ready to defend when it's your turn!"
            return
        s.prompt, s.rally = self.prompts.generate(
            attacker, defender, pos, vel, s.paddles[defender].center_column)
        s.progress.reset(s.prompt)
        s.status = (f"{defender.value.capitalize()} player: type the prompt. "
                    "Each character moves the paddle one column.")

    def _on_paddle(self, side: Side, pos: Position, vel: Velocity):
        s = self.state
        ramped = self.board.ramp(s.travel_time)
        outcome = self.resolver.resolve(side, pos, vel, s.rally, s.progress,
                                        s.paddles[side].center_column, ramped)
        if not outcome.hit:
            s.position, s.velocity = outcome.position, STOPPED
            self.award_point(outcome.winner)
            return None

        s.travel_time = ramped
        s.rally_hits += 1
        s.attacker = side
        s.position, s.velocity = outcome.position, outcome.velocity
        self._setup_defense(side, side.opponent, outcome.position, outcome.velocity)
        s.status = f"{side.value.capitalize()} hit the ball!"
        return outcome.position, outcome.velocity

    def award_point(self, winner: Side):
        s = self.state
        self.animator.cancel(park=CENTER)
        self.countdown.cancel()
        score = s.scores.add(winner)
        s.position, s.velocity = CENTER, STOPPED
        s.travel_time = self.board.initial_travel_time
        log.info("%s scores after %d hits (top %d, bottom %d)", winner.value, s.rally_hits,
                 s.scores.top, s.scores.bottom)

        if self.board.winner_reached(score):
            s.phase = RoundPhase.GAME_OVER
            s.winner = winner
            s.prompt, s.rally = None, None
            s.progress.clear()
            s.serve.clear()
            s.status = f"{winner.value.capitalize()} wins the game! Reset to play again."
            log.info("game over, %s wins", winner.value)
            return
        self._enter_pre_serve(winner, f"{winner.value.capitalize()} scored! Serve the next round.")

    def reset(self):
        self.animator.cancel(park=CENTER)
        self.countdown.cancel()
        self._build()
        log.info("game reset")

    def configure(self, **changes):
        if self.state.phase is RoundPhase.RALLY:
            raise RallyInProgressError("configuration can only change between rallies")
        self.board = board = self.board.with_changes(**changes)
        self._build_collaborators()

        # scores and paddles carry over; only the pacing restarts
        s = self.state
        s.travel_time = board.initial_travel_time
        for paddle in s.paddles.values():
            paddle.center_column = max(0, min(paddle.center_column, board.columns - 1))
            paddle.width_columns = board.paddle_width
        log.info("board reconfigured: %d columns, paddle %d", board.columns, board.paddle_width)
        if s.phase is RoundPhase.PRE_SERVE:
            self._enter_pre_serve(s.attacker, s.status)

    # ------------------------------------------------------------------
    # Frame callback
    # ------------------------------------------------------------------
    def update(self, dt: float):
        s = self.state
        if s.phase is RoundPhase.PRE_SERVE:
            if self.is_bot(s.attacker):
                self._bot_serve_in -= dt
                if self._bot_serve_in <= 0:
                    self.launch()
            elif self.countdown.tick(dt):
                log.info("serve countdown expired, auto-launching")
                self.launch()
        elif s.phase is RoundPhase.RALLY:
            if self.bot is not None and s.defender is self.bot.side:
                paddle = s.paddles[self.bot.side]
                paddle.center_column = self.bot.update(dt, paddle.center_column, s.position, s.velocity)
            self.animator.tick(dt)
            if s.phase is RoundPhase.RALLY:
                s.position, s.velocity = self.animator.position, self.animator.velocity
