"""
ゲームルールのインターフェース

探索エンジンはこのインターフェースだけを通してゲームに触れる。
盤面（State）は不変値として扱い、着手は常に新しい盤面を返す。
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Hashable, List, Optional, Sequence

from uct_mcts.errors import InvalidActionError

# プレイヤーID（2人だけ）
PLAYER_A = 0
PLAYER_B = 1
PLAYERS = (PLAYER_A, PLAYER_B)


class Outcome(IntEnum):
    """
    局面の勝敗

    勝ちの値はプレイヤーIDと一致させている（PLAYER_A_WINS == PLAYER_A）
    """

    IN_PROGRESS = -2
    PLAYER_A_WINS = PLAYER_A
    PLAYER_B_WINS = PLAYER_B
    DRAW = 2

    @classmethod
    def win_for(cls, player: int) -> "Outcome":
        """プレイヤーの勝ちを表すOutcomeを返す"""
        if player not in PLAYERS:
            raise ValueError(f"Unknown player: {player}")
        return cls(player)

    @property
    def winner(self) -> Optional[int]:
        """勝者のプレイヤーID。引き分け・進行中はNone"""
        if self in (Outcome.PLAYER_A_WINS, Outcome.PLAYER_B_WINS):
            return int(self)
        return None

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.IN_PROGRESS


class GameRules(ABC):
    """
    ゲームルールの基底クラス

    すべてのメソッドは盤面を変更しない純粋関数として実装すること
    """

    @abstractmethod
    def initial_state(self) -> tuple:
        """対局開始時の盤面"""
        pass

    @abstractmethod
    def legal_actions(self, state: Sequence[int]) -> List[Hashable]:
        """
        合法手を列挙

        Args:
            state: 盤面

        Returns:
            List: 合法手のリスト（なければ空）
        """
        pass

    def has_legal_actions(self, state: Sequence[int]) -> bool:
        """合法手が1つ以上あるか"""
        return len(self.legal_actions(state)) > 0

    @abstractmethod
    def winner(self, state: Sequence[int]) -> Outcome:
        """
        勝敗判定

        Args:
            state: 盤面

        Returns:
            Outcome: 勝敗（進行中なら IN_PROGRESS）
        """
        pass

    def other_player(self, player: int) -> int:
        """相手プレイヤーを返す"""
        if player == PLAYER_A:
            return PLAYER_B
        if player == PLAYER_B:
            return PLAYER_A
        raise ValueError(f"Unknown player: {player}")

    @abstractmethod
    def apply(self, state: Sequence[int], action: Hashable, player: int) -> tuple:
        """
        着手を適用した新しい盤面を返す

        Args:
            state: 盤面（変更しない）
            action: 着手
            player: 着手するプレイヤー

        Returns:
            tuple: 着手後の盤面

        Raises:
            InvalidActionError: 合法手でない場合
        """
        pass

    @abstractmethod
    def validate_state(self, state: Sequence[int]) -> tuple:
        """
        盤面の形式チェック

        Returns:
            tuple: 正規化した盤面

        Raises:
            InvalidStateError: 形式が不正な場合
        """
        pass

    def player_to_move(self, state: Sequence[int]) -> int:
        """
        盤面から手番のプレイヤーを推定する

        既定では常に PLAYER_A（先手）を返す

        Returns:
            int: 手番のプレイヤー
        """
        return PLAYER_A

    def render(self, state: Sequence[int]) -> str:
        """人間向けの文字列表現"""
        return str(tuple(state))

    def _check_player(self, player: int):
        if player not in PLAYERS:
            raise InvalidActionError(f"Unknown player: {player}")
