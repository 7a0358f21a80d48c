"""
UCT MCTS

二人零和・完全情報・交互手番ゲームのためのモンテカルロ木探索
"""

from .config import MCTSConfig, load_config
from .errors import (
    MCTSError,
    InvalidActionError,
    DuplicateActionError,
    EmptyChildrenError,
    NoLegalMovesError,
    InvalidStateError,
)
from .game import GameRules, Outcome, TicTacToe
from .mcts import MCTS, MCTSNode, construct_search, find_best_action

__all__ = [
    "MCTSConfig",
    "load_config",
    "MCTSError",
    "InvalidActionError",
    "DuplicateActionError",
    "EmptyChildrenError",
    "NoLegalMovesError",
    "InvalidStateError",
    "GameRules",
    "Outcome",
    "TicTacToe",
    "MCTS",
    "MCTSNode",
    "construct_search",
    "find_best_action",
]
