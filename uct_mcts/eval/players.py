"""
プレイヤークラス

評価・対戦用のプレイヤーを実装:
- RandomPlayer: ランダムに着手
- MCTSPlayer: UCT方式のMCTS
- HumanPlayer: 標準入力から着手
"""

from abc import ABC, abstractmethod
from typing import Hashable, Optional

import numpy as np

from uct_mcts.config import MCTSConfig
from uct_mcts.errors import NoLegalMovesError
from uct_mcts.game.base import GameRules
from uct_mcts.mcts.mcts import find_best_action


class Player(ABC):
    """
    プレイヤーの基底クラス
    """

    def __init__(self, name: str):
        """
        Args:
            name: プレイヤー名
        """
        self.name = name

    @abstractmethod
    def get_action(self, rules: GameRules, state: tuple, player: int) -> Hashable:
        """
        着手を選択

        Args:
            rules: ゲームルール
            state: 現在の盤面
            player: 自分のプレイヤーID

        Returns:
            着手

        Raises:
            NoLegalMovesError: 合法手がない場合
        """
        pass

    def reset(self):
        """ゲーム開始時の初期化（必要に応じてオーバーライド）"""
        pass


class RandomPlayer(Player):
    """
    ランダムプレイヤー

    合法手の中から一様に選択
    """

    def __init__(self, name: str = "Random", seed: Optional[int] = None):
        super().__init__(name)
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def get_action(self, rules: GameRules, state: tuple, player: int) -> Hashable:
        """ランダムに着手を選択"""
        legal_actions = rules.legal_actions(state)

        if len(legal_actions) == 0:
            raise NoLegalMovesError("No legal moves")

        return legal_actions[self.rng.integers(len(legal_actions))]


class MCTSPlayer(Player):
    """
    MCTSベースのAIプレイヤー

    1手ごとに新しい探索木を作る
    """

    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        num_iterations: Optional[int] = None,
        name: Optional[str] = None,
    ):
        """
        Args:
            config: 探索設定
            num_iterations: 探索回数（省略時は config の値）
            name: プレイヤー名

        Raises:
            ValueError: num_iterations が正の整数でない場合
        """
        self.config = config or MCTSConfig()
        if num_iterations is None:
            num_iterations = self.config.num_iterations
        if isinstance(num_iterations, bool) or not isinstance(num_iterations, int) or num_iterations < 1:
            raise ValueError(f"num_iterations must be a positive integer, got {num_iterations!r}")
        self.num_iterations = num_iterations

        if name is None:
            name = f"MCTS-{self.num_iterations}it"
        super().__init__(name)

    def get_action(self, rules: GameRules, state: tuple, player: int) -> Hashable:
        """MCTSで最良の手を選択"""
        return find_best_action(
            rules,
            state,
            player,
            num_iterations=self.num_iterations,
            config=self.config,
        )


class HumanPlayer(Player):
    """
    人間プレイヤー（CLI用）

    標準入力から着手を受け付ける
    """

    def __init__(self, name: str = "Human"):
        super().__init__(name)

    def get_action(self, rules: GameRules, state: tuple, player: int) -> Hashable:
        """標準入力から着手を受け付ける"""
        legal_actions = rules.legal_actions(state)

        if len(legal_actions) == 0:
            raise NoLegalMovesError("No legal moves")

        print(f"\n{rules.render(state)}")
        print(f"\n合法手: {legal_actions}")

        while True:
            try:
                action = int(input("着手を入力してください: ").strip())
            except EOFError:
                raise SystemExit("\n入力が終了したため対局を中断します。")
            except ValueError:
                print("入力エラー。もう一度入力してください。")
                continue

            if action in legal_actions:
                return action
            print(f"無効な着手です。合法手: {legal_actions}")
