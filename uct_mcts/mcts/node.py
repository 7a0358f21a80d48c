"""
MCTSノード定義

UCT方式のMCTSで使用する木構造のノードクラス
UCT値計算と統計情報を管理
"""

import math
import weakref
from typing import Dict, Hashable, Optional

from uct_mcts.errors import DuplicateActionError, EmptyChildrenError
from uct_mcts.game.base import GameRules, Outcome

# 未訪問ノードのUCT値（必ず訪問済みの兄弟より優先される）
UCT_UNVISITED = float("inf")


class MCTSNode:
    """
    MCTSの木構造ノード

    各ノードは以下の情報を保持:
    - 訪問回数 (n)
    - 累積価値 (v) - このノードへ着手したプレイヤー (last_player) 視点
    - 勝ち・引き分け・負けの回数
    - 子ノードへのリンク（着手順を保持）

    UCT式:
        v / n + C * sqrt(ln(N) / n)

    N は親ノードの訪問回数（比較する時点の値）
    """

    def __init__(
        self,
        state: tuple,
        player: int,
        last_player: int,
        parent: Optional['MCTSNode'] = None,
        action: Optional[Hashable] = None,
    ):
        """
        Args:
            state (tuple): このノードの盤面
            player (int): このノードから着手するプレイヤー
            last_player (int): このノードの盤面を作る手を指したプレイヤー
            parent (MCTSNode, optional): 親ノード（弱参照で保持）
            action (optional): 親ノードからこのノードへの着手
        """
        self.state = state
        self.player = player
        self.last_player = last_player
        self.action = action

        # 親は子を所有するが、子は親を所有しない
        self._parent = weakref.ref(parent) if parent is not None else None

        # 統計情報
        self.visit_count = 0
        self.value_sum = 0.0
        self.wins = 0
        self.draws = 0
        self.losses = 0

        # 最後に計算したUCT値
        self.uct = UCT_UNVISITED

        # 子ノード: {action: MCTSNode}（挿入順 = 展開順）
        self.children: Dict[Hashable, MCTSNode] = {}

        self._outcome: Optional[Outcome] = None

    @property
    def parent(self) -> Optional['MCTSNode']:
        if self._parent is None:
            return None
        return self._parent()

    def is_leaf(self) -> bool:
        """リーフノードかどうか"""
        return len(self.children) == 0

    def outcome(self, rules: GameRules) -> Outcome:
        """
        このノードの勝敗（一度判明したらキャッシュする）

        Args:
            rules (GameRules): ゲームルール

        Returns:
            Outcome: 勝敗
        """
        if self._outcome is None:
            self._outcome = rules.winner(self.state)
        return self._outcome

    def is_terminal(self, rules: GameRules) -> bool:
        """終局ノードかどうか"""
        return self.outcome(rules).is_terminal

    def is_fully_expanded(self, rules: GameRules) -> bool:
        """すべての合法手に子ノードがあるか"""
        return len(self.children) == len(rules.legal_actions(self.state))

    def untried_actions(self, rules: GameRules) -> list:
        """子ノードがまだない合法手（合法手の順序を保つ）"""
        return [a for a in rules.legal_actions(self.state) if a not in self.children]

    def add_child(self, child_state: tuple, action: Hashable, player: int) -> 'MCTSNode':
        """
        子ノードを作成して追加

        Args:
            child_state (tuple): 着手後の盤面
            action: 着手
            player (int): 子ノードから着手するプレイヤー

        Returns:
            MCTSNode: 追加した子ノード

        Raises:
            DuplicateActionError: 同じ着手の子ノードが既にある場合
        """
        if action in self.children:
            raise DuplicateActionError(f"Child for action {action!r} already exists")

        child = MCTSNode(
            state=child_state,
            player=player,
            last_player=self.player,
            parent=self,
            action=action,
        )
        self.children[action] = child
        return child

    def get_child(self, index: int) -> 'MCTSNode':
        """展開順で index 番目の子ノード"""
        return list(self.children.values())[index]

    def get_value(self) -> float:
        """
        平均価値 v / n を取得

        Returns:
            float: 平均価値。訪問回数が0の場合は0を返す
        """
        if self.visit_count == 0:
            return 0.0
        return self.value_sum / self.visit_count

    def compute_uct(self, exploration_weight: float) -> float:
        """
        UCT値を計算して self.uct に保存

        Args:
            exploration_weight (float): 探索定数 C

        Returns:
            float: UCT値。未訪問なら UCT_UNVISITED
        """
        if self.visit_count == 0:
            self.uct = UCT_UNVISITED
            return self.uct

        exploitation = self.value_sum / self.visit_count

        parent = self.parent
        exploration = 0.0
        if parent is not None and parent.visit_count > 0:
            exploration = exploration_weight * math.sqrt(
                math.log(parent.visit_count) / self.visit_count
            )

        self.uct = exploitation + exploration
        return self.uct

    def best_child(self, exploration_weight: float) -> 'MCTSNode':
        """
        UCT値が最大の子ノードを選択

        同点の場合は先に展開された子を選ぶ

        Args:
            exploration_weight (float): 探索定数 C

        Returns:
            MCTSNode: 選択された子ノード

        Raises:
            EmptyChildrenError: 子ノードがない場合
        """
        if self.is_leaf():
            raise EmptyChildrenError("best_child called on a node without children")

        best_score = -float('inf')
        best = None

        for child in self.children.values():
            score = child.compute_uct(exploration_weight)
            if best is None or score > best_score:
                best_score = score
                best = child

        return best

    def update(self, outcome: Outcome):
        """
        ノードの統計情報を更新（バックプロパゲーション）

        last_player の勝ちなら +1、相手の勝ちなら -1、引き分けは 0

        Args:
            outcome (Outcome): シミュレーションの結果
        """
        self.visit_count += 1

        winner = Outcome(outcome).winner
        if winner is None:
            if outcome == Outcome.DRAW:
                self.draws += 1
        elif winner == self.last_player:
            self.wins += 1
            self.value_sum += 1.0
        else:
            self.losses += 1
            self.value_sum -= 1.0

    def get_visit_counts(self) -> Dict[Hashable, int]:
        """
        子ノードの訪問回数を取得

        Returns:
            Dict: {action: visit_count}
        """
        return {action: child.visit_count for action, child in self.children.items()}

    def __repr__(self) -> str:
        """デバッグ用の文字列表現"""
        return (f"MCTSNode(action={self.action!r}, "
                f"player={self.player}, "
                f"N={self.visit_count}, "
                f"W={self.value_sum:.1f}, "
                f"Q={self.get_value():.3f}, "
                f"children={len(self.children)})")
