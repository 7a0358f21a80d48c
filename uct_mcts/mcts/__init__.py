"""
Monte Carlo Tree Search モジュール

UCT方式のMCTS実装を提供
"""

from .mcts import MCTS, construct_search, find_best_action
from .node import MCTSNode, UCT_UNVISITED

__all__ = [
    "MCTS",
    "MCTSNode",
    "UCT_UNVISITED",
    "construct_search",
    "find_best_action",
]
