import argparse
import logging
import random
import sys

import pygame

from typing_pong import BoardConfig, GameMode, RoundPhase, RoundStateMachine, Side
from typing_pong.prompt import underline_span

WIDTH, HEIGHT = 900, 640
COURT_H = 460
PADDLE_H = 12
BALL_SIZE = 16
PADDLE_SMOOTHING = 12.0  # per second, display only
FONT_NAME = "arial"
MONO_NAME = "couriernew"

WHITE = (240, 240, 240)
BG = (25, 25, 30)
GRID = (40, 40, 50)
DIM = (120, 120, 140)
ACCENT = (120, 200, 255)
LINE = (70, 110, 170)
TOP_COLOR = (251, 191, 36)
BOTTOM_COLOR = (34, 197, 94)


def col_left_px(board, col):
    # same span the bot collision check uses, overhang allowed
    lo, _ = board.paddle_bounds(col)
    return lo * WIDTH


def draw_court(surface, board, font_tiny):
    for col in range(board.columns):
        x = int(board.column_to_x(col) * WIDTH)
        pygame.draw.line(surface, GRID, (x, 0), (x, COURT_H))
        label = font_tiny.render(str(col), True, DIM)
        surface.blit(label, (x - label.get_width() // 2, COURT_H - 16))
    for y in (board.top_paddle_y, board.bottom_paddle_y):
        pygame.draw.line(surface, LINE, (0, int(y * COURT_H)), (WIDTH, int(y * COURT_H)), 2)


def draw_paddle(surface, board, side, draw_col):
    y = board.top_paddle_y if side is Side.TOP else board.bottom_paddle_y
    rect = pygame.Rect(int(col_left_px(board, draw_col)), int(y * COURT_H) - PADDLE_H // 2,
                       int(board.paddle_width / board.columns * WIDTH), PADDLE_H)
    if side is Side.TOP:
        rect.bottom = int(y * COURT_H)
    else:
        rect.top = int(y * COURT_H)
    pygame.draw.rect(surface, TOP_COLOR if side is Side.TOP else BOTTOM_COLOR, rect, border_radius=6)


def draw_prompt(surface, game, font_mono, font_small, top):
    s = game.state
    tracker = s.progress if s.phase is RoundPhase.RALLY else s.serve
    text = tracker.text
    if not text:
        return
    span = None
    if s.phase is RoundPhase.RALLY and s.prompt and s.rally:
        span = underline_span(s.prompt, s.progress, s.rally, game.board.half_paddle)

    char_w = font_mono.size("m")[0] + 4
    x0 = WIDTH // 2 - char_w * len(text) // 2
    for idx, ch in enumerate(text):
        color = DIM
        if s.phase is RoundPhase.RALLY and idx == s.prompt.center_step_index:
            color = BOTTOM_COLOR
        elif idx == tracker.typed_length:
            color = WHITE
        elif idx < tracker.typed_length:
            color = (90, 90, 105)
        glyph = font_mono.render("·" if ch == " " else ch, True, color)
        x = x0 + idx * char_w
        surface.blit(glyph, (x, top))
        if span and span[0] <= idx <= span[1]:
            pygame.draw.line(surface, WHITE, (x, top + glyph.get_height() + 2),
                             (x + char_w - 4, top + glyph.get_height() + 2), 2)

    if s.phase is RoundPhase.PRE_SERVE:
        hint = "Type the serve word, then Enter (auto serve in %ds)" % game.countdown_seconds
        info = font_small.render(hint, True, DIM)
        surface.blit(info, (WIDTH // 2 - info.get_width() // 2, top + 44))


def game(board, mode, difficulty, seed=None):
    pygame.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption("Typing Pong")
    clock = pygame.time.Clock()
    font_tiny = pygame.font.SysFont(FONT_NAME, 11)
    font_small = pygame.font.SysFont(FONT_NAME, 18)
    font_big = pygame.font.SysFont(FONT_NAME, 40, bold=True)
    font_mono = pygame.font.SysFont(MONO_NAME, 28, bold=True)

    match = RoundStateMachine(board, mode=mode, difficulty=difficulty, rng=random.Random(seed))
    draw_cols = {side: float(p.center_column) for side, p in match.state.paddles.items()}

    while True:
        dt = clock.tick(60) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    pygame.quit(); sys.exit(0)
                if event.key == pygame.K_F5:
                    match.reset()
                elif event.key == pygame.K_LEFT:
                    match.press_left()
                elif event.key == pygame.K_RIGHT:
                    match.press_right()
                elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                    match.confirm()
                elif event.unicode:
                    match.type_char(event.unicode)

        match.update(dt)
        s = match.state

        # Smooth the drawn paddles toward their columns
        k = min(1.0, dt * PADDLE_SMOOTHING)
        for side, paddle in s.paddles.items():
            draw_cols[side] += (paddle.center_column - draw_cols[side]) * k

        screen.fill(BG)
        draw_court(screen, match.board, font_tiny)
        for side in Side:
            draw_paddle(screen, match.board, side, draw_cols[side])
        ball = pygame.Rect(0, 0, BALL_SIZE, BALL_SIZE)
        ball.center = (int(s.position.x * WIDTH), int(s.position.y * COURT_H))
        pygame.draw.ellipse(screen, ACCENT, ball)

        # UI
        pygame.draw.line(screen, GRID, (0, COURT_H), (WIDTH, COURT_H), 2)
        score_text = font_big.render(f"{s.scores.top}   {s.scores.bottom}", True, WHITE)
        screen.blit(score_text, (WIDTH // 2 - score_text.get_width() // 2, COURT_H + 8))
        draw_prompt(screen, match, font_mono, font_small, COURT_H + 60)
        status = font_small.render(s.status, True, DIM)
        screen.blit(status, (20, HEIGHT - 52))
        info = f"speed {s.travel_time:.1f}s | Arrows: aim serve | Enter: serve | F5: reset | Esc: quit"
        info_text = font_small.render(info, True, DIM)
        screen.blit(info_text, (20, HEIGHT - 28))

        pygame.display.flip()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Two-player typing pong")
    parser.add_argument("--columns", type=int, default=20)
    parser.add_argument("--paddle-width", type=int, default=5)
    parser.add_argument("--travel-time", type=float, default=5.0)
    parser.add_argument("--max-points", type=int, default=None)
    parser.add_argument("--single", action="store_true", help="play against the top bot")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"], default="medium")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    board = BoardConfig(columns=args.columns, paddle_width=args.paddle_width,
                        initial_travel_time=args.travel_time, max_points=args.max_points)
    game(board, GameMode.SINGLE if args.single else GameMode.TWO, args.difficulty, args.seed)
