"""
評価システムモジュール

MCTSプレイヤーの強さを測定するための対戦・評価機能を提供
"""

from .players import (
    Player,
    RandomPlayer,
    MCTSPlayer,
    HumanPlayer,
)
from .arena import Arena, MatchResult, evaluate_player

__all__ = [
    "Player",
    "RandomPlayer",
    "MCTSPlayer",
    "HumanPlayer",
    "Arena",
    "MatchResult",
    "evaluate_player",
]
