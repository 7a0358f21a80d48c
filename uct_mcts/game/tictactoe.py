"""
三目並べ（Tic-Tac-Toe）のルール

盤面は長さ9のタプル。インデックスは以下の通り:

     0 | 1 | 2
    ---+---+---
     3 | 4 | 5
    ---+---+---
     6 | 7 | 8
"""

import numbers
from typing import List, Sequence

from uct_mcts.errors import InvalidActionError, InvalidStateError
from .base import GameRules, Outcome, PLAYER_A, PLAYER_B


class TicTacToe(GameRules):
    """
    三目並べ

    セルの値:
    - EMPTY (-1): 空き
    - MACHINE (0): AI（X）
    - HUMAN (1): 人間（O）
    """

    EMPTY = -1
    MACHINE = PLAYER_A
    HUMAN = PLAYER_B

    BOARD_SIZE = 9

    WINNING_LINES = (
        (0, 1, 2), (3, 4, 5), (6, 7, 8),  # 行
        (0, 3, 6), (1, 4, 7), (2, 5, 8),  # 列
        (0, 4, 8), (2, 4, 6),             # 対角線
    )

    SYMBOLS = {EMPTY: " ", MACHINE: "X", HUMAN: "O"}

    def initial_state(self) -> tuple:
        """空の盤面"""
        return (self.EMPTY,) * self.BOARD_SIZE

    def legal_actions(self, state: Sequence[int]) -> List[int]:
        return [i for i, cell in enumerate(state) if cell == self.EMPTY]

    def has_legal_actions(self, state: Sequence[int]) -> bool:
        return self.EMPTY in state

    def winner(self, state: Sequence[int]) -> Outcome:
        for a, b, c in self.WINNING_LINES:
            if state[a] != self.EMPTY and state[a] == state[b] == state[c]:
                return Outcome.win_for(state[a])

        if self.has_legal_actions(state):
            return Outcome.IN_PROGRESS
        return Outcome.DRAW

    def apply(self, state: Sequence[int], action: int, player: int) -> tuple:
        """
        着手を適用

        Args:
            state: 盤面
            action: セル番号 (0-8)
            player: MACHINE または HUMAN

        Returns:
            tuple: 着手後の盤面

        Raises:
            InvalidActionError: 範囲外・既に埋まっているセル、または不正なプレイヤー
        """
        self._check_player(player)

        if not isinstance(action, numbers.Integral) or not 0 <= action < len(state):
            raise InvalidActionError(f"Action out of range: {action!r}")
        action = int(action)
        if state[action] != self.EMPTY:
            raise InvalidActionError(f"Cell {action} is already occupied")

        next_state = list(state)
        next_state[action] = player
        return tuple(next_state)

    def validate_state(self, state: Sequence[int]) -> tuple:
        """
        盤面チェック

        長さ9で、各セルが EMPTY / MACHINE / HUMAN のいずれかであること
        """
        if isinstance(state, (str, bytes)):
            raise InvalidStateError("Board must be a sequence of cell markers, not a string")

        try:
            cells = tuple(state)
        except TypeError:
            raise InvalidStateError(f"Board must be a sequence, got {type(state).__name__}")

        if len(cells) != self.BOARD_SIZE:
            raise InvalidStateError(
                f"Board must have {self.BOARD_SIZE} cells, got {len(cells)}"
            )

        for index, cell in enumerate(cells):
            if not isinstance(cell, numbers.Integral) or cell not in self.SYMBOLS:
                raise InvalidStateError(f"Invalid marker {cell!r} at cell {index}")

        return tuple(int(cell) for cell in cells)

    def player_to_move(self, state: Sequence[int]) -> int:
        """先手は MACHINE。MACHINE の駒が多ければ HUMAN の手番"""
        if state.count(self.MACHINE) > state.count(self.HUMAN):
            return self.HUMAN
        return self.MACHINE

    def parse_state(self, text: str) -> tuple:
        """
        文字列から盤面を作成（CLI用）

        'X' = MACHINE, 'O' = HUMAN, '.' / '-' / '_' = 空き。空白は無視する

        Args:
            text: 例 "X.O......"

        Returns:
            tuple: 盤面
        """
        mapping = {"X": self.MACHINE, "O": self.HUMAN, ".": self.EMPTY, "-": self.EMPTY, "_": self.EMPTY}
        cells = []
        for ch in "".join(text.split()).upper():
            if ch not in mapping:
                raise InvalidStateError(f"Invalid board character: {ch!r}")
            cells.append(mapping[ch])
        return self.validate_state(cells)

    def render(self, state: Sequence[int]) -> str:
        s = [self.SYMBOLS[cell] for cell in state]
        rows = [f" {s[i]} | {s[i + 1]} | {s[i + 2]}" for i in (0, 3, 6)]
        return "\n---+---+---\n".join(rows)
