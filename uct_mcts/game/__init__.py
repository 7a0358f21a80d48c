"""
ゲームルールモジュール

探索エンジンが利用するルールインターフェースと三目並べの実装を提供
"""

from .base import GameRules, Outcome, PLAYER_A, PLAYER_B, PLAYERS
from .tictactoe import TicTacToe

__all__ = [
    "GameRules",
    "Outcome",
    "PLAYER_A",
    "PLAYER_B",
    "PLAYERS",
    "TicTacToe",
]
