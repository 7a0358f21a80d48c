"""
モンテカルロ木探索 (Monte Carlo Tree Search)

UCT方式のMCTS実装:
- UCT式による選択
- 1回の探索につき1手だけ展開
- ランダムプレイアウトによる評価
- 終局結果のバックプロパゲーション
"""

import logging
import math
from typing import Dict, Hashable, List, Optional, Sequence

import numpy as np

from uct_mcts.config import MCTSConfig
from uct_mcts.errors import InvalidStateError, NoLegalMovesError
from uct_mcts.game.base import GameRules, Outcome, PLAYERS
from .node import MCTSNode

logger = logging.getLogger(__name__)


class MCTS:
    """
    モンテカルロ木探索

    UCTの探索アルゴリズム:
    1. Select: 完全展開済みのノードをUCT値が最大の子へ下降
    2. Expand: 未展開の合法手を1つ選び子ノードを作成
    3. Simulate: ランダムプレイアウトで終局まで進める
    4. Backpropagate: 終局結果をルートまで伝播

    1つのインスタンスが1つの探索木を持つ。別の局面を探索する場合は新しく作成する。
    """

    def __init__(
        self,
        rules: GameRules,
        state: Sequence[int],
        player: int,
        exploration_weight: float = math.sqrt(2),
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        random_expansion: bool = True,
    ):
        """
        Args:
            rules (GameRules): ゲームルール
            state: 探索開始局面
            player (int): 開始局面で着手するプレイヤー
            exploration_weight (float): UCT式の探索定数 C
            rng (np.random.Generator, optional): 乱数生成器
            seed (int, optional): rng を指定しない場合のシード
            random_expansion (bool): 未展開の手をランダムに選ぶか

        Raises:
            InvalidStateError: 盤面または手番が不正な場合
        """
        if player not in PLAYERS:
            raise InvalidStateError(f"Unknown player: {player!r}")

        self.rules = rules
        self.exploration_weight = exploration_weight
        self.random_expansion = random_expansion
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        # ルートノードの作成
        root_state = rules.validate_state(state)
        self._root = MCTSNode(
            state=root_state,
            player=player,
            last_player=rules.other_player(player),
        )
        self._best_node: Optional[MCTSNode] = None

    @property
    def root(self) -> MCTSNode:
        """ルートノード（診断用。外部から変更しないこと）"""
        return self._root

    @property
    def best_node(self) -> Optional[MCTSNode]:
        """直前の search で選ばれた子ノード"""
        return self._best_node

    def search(self, num_iterations: int) -> Hashable:
        """
        MCTS探索を実行し、最良の着手を返す

        Args:
            num_iterations (int): 探索回数（正の整数）

        Returns:
            最も訪問回数が多いルートの子ノードへの着手

        Raises:
            ValueError: num_iterations が正の整数でない場合
            NoLegalMovesError: 開始局面が終局している場合
        """
        if isinstance(num_iterations, bool) or not isinstance(num_iterations, int) or num_iterations < 1:
            raise ValueError(f"num_iterations must be a positive integer, got {num_iterations!r}")

        if self._root.is_terminal(self.rules):
            logger.info(
                "No legal moves: root is terminal (%s)", self._root.outcome(self.rules).name
            )
            raise NoLegalMovesError(
                f"Game is already over: {self._root.outcome(self.rules).name}"
            )

        logger.debug(
            "MCTS search start: iterations=%d, player=%s, C=%.3f",
            num_iterations, self._root.player, self.exploration_weight,
        )

        for _ in range(num_iterations):
            self._run_iteration()

        best = self._select_best_move()
        self._best_node = best

        logger.debug(
            "MCTS search done: action=%r, visits=%d/%d, value=%.3f",
            best.action, best.visit_count, self._root.visit_count, best.get_value(),
        )
        return best.action

    def _run_iteration(self):
        """
        1回の探索を実行

        Select -> Expand -> Simulate -> Backpropagate のサイクル
        """
        node = self._select()

        if not node.is_terminal(self.rules):
            node = self._expand(node)

        outcome = self._simulate(node.state, node.player)
        self._backpropagate(node, outcome)

    def _select(self) -> MCTSNode:
        """
        ルートから下降して展開・評価するノードを選ぶ

        終局ノード、リーフ、または未展開の手が残るノードで止まる

        Returns:
            MCTSNode: 選択されたノード
        """
        node = self._root

        while True:
            if node.is_terminal(self.rules):
                return node
            if node.is_leaf() or not node.is_fully_expanded(self.rules):
                return node
            node = node.best_child(self.exploration_weight)

    def _expand(self, node: MCTSNode) -> MCTSNode:
        """
        未展開の合法手を1つ選んで子ノードを作成

        Args:
            node (MCTSNode): 展開するノード（非終局）

        Returns:
            MCTSNode: 作成した子ノード
        """
        untried = node.untried_actions(self.rules)

        if self.random_expansion:
            action = untried[self.rng.integers(len(untried))]
        else:
            action = untried[0]

        child_state = self.rules.apply(node.state, action, node.player)
        return node.add_child(child_state, action, self.rules.other_player(node.player))

    def _simulate(self, state: tuple, player: int) -> Outcome:
        """
        ランダムプレイアウト

        木には触れず、盤面の値だけを使って終局まで進める

        Args:
            state (tuple): 開始盤面
            player (int): 開始盤面で着手するプレイヤー

        Returns:
            Outcome: 終局結果
        """
        outcome = self.rules.winner(state)

        while outcome == Outcome.IN_PROGRESS:
            legal_actions = self.rules.legal_actions(state)
            action = legal_actions[self.rng.integers(len(legal_actions))]

            state = self.rules.apply(state, action, player)
            player = self.rules.other_player(player)
            outcome = self.rules.winner(state)

        return outcome

    def _backpropagate(self, node: MCTSNode, outcome: Outcome):
        """
        終局結果をルートまで伝播

        Args:
            node (MCTSNode): シミュレーションを開始したノード
            outcome (Outcome): 終局結果
        """
        while node is not None:
            node.update(outcome)
            node = node.parent

    def _select_best_move(self) -> MCTSNode:
        """
        訪問回数が最大のルートの子ノードを選ぶ（同数なら先に展開された方）

        Raises:
            NoLegalMovesError: ルートに子ノードがない場合
        """
        best = None
        for child in self._root.children.values():
            if best is None or child.visit_count > best.visit_count:
                best = child

        if best is None:
            raise NoLegalMovesError("Root has no children after search")
        return best

    def get_action_statistics(self) -> Dict[Hashable, dict]:
        """
        ルートの子ノードの統計情報（診断用）

        Returns:
            Dict: {action: {"visits", "value", "wins", "draws", "losses"}}
        """
        return {
            action: {
                "visits": child.visit_count,
                "value": child.get_value(),
                "wins": child.wins,
                "draws": child.draws,
                "losses": child.losses,
            }
            for action, child in self._root.children.items()
        }

    def get_visit_distribution(self) -> tuple:
        """
        ルートの子ノードの訪問割合

        Returns:
            tuple: (actions, distribution)
                - actions (list): 展開順の着手
                - distribution (np.ndarray): 訪問回数の割合（合計1、未探索なら全て0）
        """
        actions: List[Hashable] = list(self._root.children.keys())
        counts = np.array(
            [child.visit_count for child in self._root.children.values()],
            dtype=np.float64,
        )

        total = counts.sum()
        if total > 0:
            counts /= total
        return actions, counts


def construct_search(
    rules: GameRules,
    state: Sequence[int],
    player: int,
    config: Optional[MCTSConfig] = None,
) -> MCTS:
    """
    設定から探索木を作成

    Args:
        rules (GameRules): ゲームルール
        state: 開始局面
        player (int): 開始局面で着手するプレイヤー
        config (MCTSConfig, optional): 探索設定

    Returns:
        MCTS: 新しい探索木
    """
    config = config or MCTSConfig()
    return MCTS(
        rules,
        state,
        player,
        exploration_weight=config.exploration_weight,
        seed=config.seed,
        random_expansion=config.random_expansion,
    )


def find_best_action(
    rules: GameRules,
    state: Sequence[int],
    player: int,
    num_iterations: Optional[int] = None,
    config: Optional[MCTSConfig] = None,
) -> Hashable:
    """
    新しい探索木で探索し、最良の着手を返す（便利関数）

    Args:
        rules (GameRules): ゲームルール
        state: 開始局面
        player (int): 開始局面で着手するプレイヤー
        num_iterations (int, optional): 探索回数（省略時は config の値）
        config (MCTSConfig, optional): 探索設定

    Returns:
        最良の着手
    """
    config = config or MCTSConfig()
    mcts = construct_search(rules, state, player, config)
    return mcts.search(num_iterations if num_iterations is not None else config.num_iterations)
