"""
共通フィクスチャ
"""

import pytest

from uct_mcts.game import TicTacToe


@pytest.fixture
def rules():
    """三目並べのルール"""
    return TicTacToe()


@pytest.fixture
def empty_board(rules):
    """空の盤面"""
    return rules.initial_state()
