"""
Headless typing pong matches between scripted typists.

Requirements:
- pip install numpy

Usage:
- python simulate.py --matches 20              # two scripted typists
- python simulate.py --single --difficulty hard # typist vs. the top bot

No pygame here: matches advance with a fixed frame delta, so a whole game
runs in well under a second. Each typist aims for the center-hit letter,
misses by a few columns now and then, and fumbles keys at a fixed rate.
"""
import argparse
import logging
import random
import string
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from typing_pong import BoardConfig, GameMode, RoundPhase, RoundStateMachine, Side

FRAME_DT = 1 / 60


@dataclass
class TypistConfig:
    chars_per_second: float = 4.0
    accuracy: float = 0.92     # chance a keystroke is the right one
    aim_error: int = 1         # stop up to this many chars early/late
    serve_delay: float = 1.0


class TypistAgent:
    """Plays one side: serves after a pause and types prompts at a steady rate."""

    def __init__(self, side: Side, cfg: TypistConfig, rng: random.Random):
        self.side = side
        self.cfg = cfg
        self.rng = rng
        self.clock = 0.0
        self.goal: Optional[int] = None
        self._prompt = None

    def _pick_goal(self, game: RoundStateMachine) -> int:
        s = game.state
        miss = self.rng.randint(-self.cfg.aim_error, self.cfg.aim_error)
        return max(0, min(s.prompt.distance_columns + miss, len(s.prompt.text)))

    def _key(self, expected: str) -> str:
        if self.rng.random() < self.cfg.accuracy:
            return expected
        return self.rng.choice([c for c in string.ascii_lowercase + " " if c != expected])

    def act(self, game: RoundStateMachine, dt: float):
        s = game.state
        self.clock += dt
        if s.phase is RoundPhase.PRE_SERVE and s.attacker is self.side:
            if self.clock < self.cfg.serve_delay:
                return
            if s.serve.typed_length == 0:
                game.type_char(self._key(s.serve.expected()))
            else:
                game.confirm()
                self.clock = 0.0
            return

        if s.phase is not RoundPhase.RALLY or s.defender is not self.side or s.prompt is None:
            self._prompt = None
            return
        if s.prompt is not self._prompt:
            self._prompt = s.prompt
            self.goal = self._pick_goal(game)
            self.clock = 0.0

        interval = 1.0 / self.cfg.chars_per_second
        while self.clock >= interval and s.progress.typed_length < self.goal:
            self.clock -= interval
            game.type_char(self._key(s.progress.expected()))


@dataclass
class MatchStats:
    scores: Dict[str, int] = field(default_factory=dict)
    rallies: List[int] = field(default_factory=list)        # hits per point
    prompt_lengths: List[int] = field(default_factory=list)
    travel_times: List[float] = field(default_factory=list)  # at every hit
    frames: int = 0


class HeadlessMatch:
    def __init__(self, board: Optional[BoardConfig] = None, mode=GameMode.TWO, difficulty="medium",
                 typist: Optional[TypistConfig] = None, seed=None):
        self.board = board or BoardConfig(max_points=5)
        self.mode = GameMode(mode)
        self.difficulty = difficulty
        self.typist = typist or TypistConfig()
        self.rng = random.Random(seed)
        self.reset()

    def reset(self):
        self.game = RoundStateMachine(self.board, mode=self.mode, difficulty=self.difficulty,
                                      rng=self.rng)
        sides = [Side.BOTTOM] if self.mode is GameMode.SINGLE else list(Side)
        self.agents = [TypistAgent(side, self.typist, self.rng) for side in sides]
        self.stats = MatchStats()
        self._last_prompt = None
        self._last_hits = 0
        return self._state()

    def _state(self):
        # Normalize to [-1,1] like any other observation vector
        s = self.game.state
        b = self.board
        return np.array([
            (s.paddles[Side.TOP].center_column / (b.columns - 1)) * 2 - 1,
            (s.paddles[Side.BOTTOM].center_column / (b.columns - 1)) * 2 - 1,
            s.position.x * 2 - 1,
            s.position.y * 2 - 1,
            s.velocity.vx / 2.0,
            s.velocity.vy / 2.0,
        ], dtype=np.float32)

    def step(self, dt: float = FRAME_DT):
        g = self.game
        for agent in self.agents:
            agent.act(g, dt)
        before = g.state.scores.top + g.state.scores.bottom
        g.update(dt)
        s = g.state
        self.stats.frames += 1

        if s.prompt is not None and s.prompt is not self._last_prompt:
            self.stats.prompt_lengths.append(len(s.prompt.text))
        self._last_prompt = s.prompt
        point = s.scores.top + s.scores.bottom > before
        if point:
            self.stats.rallies.append(s.rally_hits)
        elif s.phase is RoundPhase.RALLY and s.rally_hits > self._last_hits:
            self.stats.travel_times.append(s.travel_time)
        self._last_hits = s.rally_hits if s.phase is RoundPhase.RALLY else 0

        done = s.phase is RoundPhase.GAME_OVER
        self.stats.scores = {"top": s.scores.top, "bottom": s.scores.bottom}
        return self._state(), done, {"point": point, "phase": s.phase.value}

    def run(self, max_seconds: float = 900.0, dt: float = FRAME_DT) -> MatchStats:
        for _ in range(int(max_seconds / dt)):
            _, done, _ = self.step(dt)
            if done:
                break
        return self.stats

    def render_rgb(self, scale=2, width=200, height=150):
        # Return an RGB image of the court
        s = self.game.state
        b = self.board
        W, H = width, height
        img = np.zeros((H, W, 3), dtype=np.uint8)
        img[:] = (25, 25, 30)
        for y in (b.top_paddle_y, b.bottom_paddle_y):
            img[int(y * H), :] = (70, 110, 170)
        pw = max(1, int(b.paddle_width / b.columns * W))
        colors = {Side.TOP: (251, 191, 36), Side.BOTTOM: (34, 197, 94)}
        for side, paddle in s.paddles.items():
            cx = int(b.column_to_x(paddle.center_column) * W)
            x0, x1 = max(0, cx - pw // 2), min(W, cx + pw // 2 + 1)
            py = int((b.top_paddle_y if side is Side.TOP else b.bottom_paddle_y) * H)
            y0 = py - 3 if side is Side.TOP else py + 1
            if x0 < x1:
                img[max(0, y0):y0 + 3, x0:x1] = colors[side]
        bx, by = int(s.position.x * W), int(s.position.y * H)
        img[max(0, by - 2):min(H, by + 2), max(0, bx - 2):min(W, bx + 2)] = (120, 200, 255)
        if scale != 1:
            img = np.repeat(np.repeat(img, scale, axis=0), scale, axis=1)
        return img


def run_matches(matches=10, board=None, mode=GameMode.TWO, difficulty="medium", typist=None, seed=None):
    results = []
    for m in range(matches):
        env = HeadlessMatch(board, mode, difficulty, typist, None if seed is None else seed + m)
        stats = env.run()
        results.append(stats)
        longest = max(stats.rallies) if stats.rallies else 0
        mean_len = np.mean(stats.prompt_lengths) if stats.prompt_lengths else 0.0
        print(f"Match {m+1}: top {stats.scores['top']} - bottom {stats.scores['bottom']} | "
              f"points {len(stats.rallies)} | longest rally {longest} | mean prompt {mean_len:.1f} chars")
    return results


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--matches", type=int, default=10)
    parser.add_argument("--columns", type=int, default=20)
    parser.add_argument("--paddle-width", type=int, default=5)
    parser.add_argument("--travel-time", type=float, default=5.0)
    parser.add_argument("--max-points", type=int, default=5)
    parser.add_argument("--cps", type=float, default=4.0, help="typist chars per second")
    parser.add_argument("--accuracy", type=float, default=0.92)
    parser.add_argument("--single", action="store_true")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="medium")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(name)s %(levelname)s %(message)s")
    board = BoardConfig(columns=args.columns, paddle_width=args.paddle_width,
                        initial_travel_time=args.travel_time, max_points=args.max_points)
    typist = TypistConfig(chars_per_second=args.cps, accuracy=args.accuracy)
    results = run_matches(args.matches, board, GameMode.SINGLE if args.single else GameMode.TWO,
                          args.difficulty, typist, args.seed)
    rallies = [r for stats in results for r in stats.rallies]
    print(f"Mean hits per point: {np.mean(rallies) if rallies else 0.0:.2f}")
