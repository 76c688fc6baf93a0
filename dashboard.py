# dashboard.py
import time
from dataclasses import dataclass

import matplotlib.pyplot as plt
import numpy as np
import streamlit as st

from simulate import HeadlessMatch, TypistConfig
from typing_pong import BoardConfig, GameMode, RoundPhase


# -----------------------------
# Config dataclass
# -----------------------------
@dataclass
class Config:
    columns: int = 20
    paddle_width: int = 5
    travel_time: float = 5.0
    max_points: int = 5
    single: bool = False
    difficulty: str = "medium"
    cps: float = 4.0
    accuracy: float = 0.92
    aim_error: int = 1
    seed: int = 0

    def board(self) -> BoardConfig:
        return BoardConfig(columns=self.columns, paddle_width=self.paddle_width,
                           initial_travel_time=self.travel_time, max_points=self.max_points)

    def typist(self) -> TypistConfig:
        return TypistConfig(chars_per_second=self.cps, accuracy=self.accuracy, aim_error=self.aim_error)


def new_match(cfg: Config, seed=None) -> HeadlessMatch:
    mode = GameMode.SINGLE if cfg.single else GameMode.TWO
    return HeadlessMatch(cfg.board(), mode, cfg.difficulty, cfg.typist(), cfg.seed if seed is None else seed)


def demo_match(cfg: Config, max_seconds=300, fps=30, speedup=4):
    """
    Play one fresh match to the end and live-stream frames in the app.
    The session match is left untouched.
    """
    env = new_match(cfg, seed=int(time.time()))
    placeholder = st.empty()
    frames_per_view = max(1, int(speedup * 60 / fps))
    for step in range(int(max_seconds * 60)):
        _, done, _ = env.step()
        if step % frames_per_view == 0 or done:
            s = env.game.state
            placeholder.image(env.render_rgb(scale=3), channels="RGB",
                              caption=f"Demo: top {s.scores.top} - bottom {s.scores.bottom} | {s.status}")
            time.sleep(1.0 / fps)
        if done:
            break
    st.success(f"Demo finished: {env.stats.scores}, {len(env.stats.rallies)} points played")


# -----------------------------
# Streamlit App
# -----------------------------
st.set_page_config(layout="wide", page_title="Typing Pong: Match Lab")
st.title("Typing Pong: Scripted Match Lab")

# Session boot
if "cfg" not in st.session_state:
    st.session_state.cfg = Config()
if "match" not in st.session_state:
    st.session_state.match = new_match(st.session_state.cfg)

# Sidebar controls
st.sidebar.header("Controls")
reset = st.sidebar.button("⟲ New match")

st.sidebar.header("Board (applies to the next match)")
columns = st.sidebar.slider("Columns", 8, 50, value=st.session_state.cfg.columns)
widest = columns - 1 if (columns - 1) % 2 else columns - 2
paddle_width = st.sidebar.slider("Paddle width (odd)", 1, widest,
                                 value=min(st.session_state.cfg.paddle_width, widest), step=2)
travel_time = st.sidebar.slider("Starting travel time (s)", 1.0, 10.0, value=st.session_state.cfg.travel_time, step=0.5)
max_points = st.sidebar.select_slider("Max points", options=list(range(3, 12)), value=st.session_state.cfg.max_points)
single = st.sidebar.checkbox("Bot defends the top", value=st.session_state.cfg.single)
difficulty = st.sidebar.select_slider("Bot difficulty", options=["easy", "medium", "hard"],
                                      value=st.session_state.cfg.difficulty)

st.sidebar.header("Typists")
cps = st.sidebar.slider("Chars per second", 1.0, 12.0, value=st.session_state.cfg.cps, step=0.5)
accuracy = st.sidebar.slider("Keystroke accuracy", 0.5, 1.0, value=st.session_state.cfg.accuracy, step=0.01)
aim_error = st.sidebar.slider("Aim error (chars)", 0, 4, value=st.session_state.cfg.aim_error)

new_cfg = Config(columns=columns, paddle_width=paddle_width, travel_time=travel_time, max_points=max_points,
                 single=single, difficulty=difficulty, cps=cps, accuracy=accuracy, aim_error=aim_error,
                 seed=st.session_state.cfg.seed)
st.session_state.cfg = new_cfg

if reset:
    st.session_state.cfg.seed += 1
    st.session_state.match = new_match(st.session_state.cfg)

env = st.session_state.match
state = env.game.state

# Layout: two columns
left, right = st.columns([1, 1])

# LEFT: Game rendering (stepped locally for view)
with left:
    st.subheader("Court")
    seconds = st.slider("Seconds simulated per refresh", 0.1, 5.0, 1.0, 0.1)
    if state.phase is not RoundPhase.GAME_OVER:
        for _ in range(int(seconds * 60)):
            _, done, _ = env.step()
            if done:
                break
    st.image(env.render_rgb(scale=3), channels="RGB", caption=state.status)
    if state.prompt is not None:
        st.code(f"{state.progress.typed_text}|{state.progress.remaining}", language=None)

# RIGHT: Metrics
with right:
    st.subheader("Match metrics")
    stats = env.stats
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Top", f"{state.scores.top}")
    m2.metric("Bottom", f"{state.scores.bottom}")
    m3.metric("Travel time", f"{state.travel_time:.2f}s")
    m4.metric("Phase", state.phase.value)

    c1, c2 = st.columns(2)
    with c1:
        st.caption("Travel time at each hit")
        fig1, ax1 = plt.subplots()
        ax1.plot(stats.travel_times)
        ax1.axhline(env.board.min_travel_time, color="gray", linestyle="--")
        ax1.set_xlabel("Hit"); ax1.set_ylabel("Seconds")
        st.pyplot(fig1, clear_figure=True)
    with c2:
        st.caption("Hits per point")
        fig2, ax2 = plt.subplots()
        if stats.rallies:
            ax2.hist(stats.rallies, bins=np.arange(0, max(stats.rallies) + 2) - 0.5)
        ax2.set_xlabel("Hits"); ax2.set_ylabel("Points")
        st.pyplot(fig2, clear_figure=True)

    st.markdown("### Prompt lengths")
    if stats.prompt_lengths:
        figp, axp = plt.subplots()
        axp.hist(stats.prompt_lengths, bins=20)
        axp.set_title(f"mean {np.mean(stats.prompt_lengths):.1f} chars")
        st.pyplot(figp, clear_figure=True)
    else:
        st.info("Prompt lengths will appear once a human-side rally starts.")

    # --- Demo: watch a whole match ---
    st.markdown("### Demo: Watch a Full Match")
    demo_fps = st.slider("Demo FPS", 10, 60, 30, 1, key="demo_fps")
    if st.button("▶ Play one match", key="play_demo"):
        demo_match(st.session_state.cfg, fps=demo_fps)

st.caption("Adjust the sliders, then start a new match. Each refresh advances the current match.")
