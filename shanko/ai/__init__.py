"""Decision-making players that drive seats through the flow controller."""

from .base import DecisionMaker, JokerSwapDecision, MeldDecision
from .heuristic import FirstCardPlayer, HeuristicPlayer

__all__ = [
    "DecisionMaker",
    "FirstCardPlayer",
    "HeuristicPlayer",
    "JokerSwapDecision",
    "MeldDecision",
]
