"""Typing Pong: the defender's paddle moves one column per correctly typed character."""
from .config import BoardConfig, GameMode, RoundPhase, Side
from .rally import RallyInProgressError, RoundStateMachine, SimulationState

__all__ = [
    "BoardConfig",
    "GameMode",
    "RallyInProgressError",
    "RoundPhase",
    "RoundStateMachine",
    "Side",
    "SimulationState",
]
