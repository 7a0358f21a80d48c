"""
MCTSのテストケース

- MCTSNodeの基本機能テスト
- MCTS探索ロジックのテスト
- 三目並べでの統合テスト
"""

import math

import numpy as np
import pytest

from uct_mcts.config import MCTSConfig
from uct_mcts.errors import (
    DuplicateActionError,
    EmptyChildrenError,
    InvalidStateError,
    NoLegalMovesError,
)
from uct_mcts.game import Outcome, TicTacToe
from uct_mcts.mcts import MCTS, MCTSNode, UCT_UNVISITED, construct_search, find_best_action

E, X, O = TicTacToe.EMPTY, TicTacToe.MACHINE, TicTacToe.HUMAN


def make_root(state, player=X):
    return MCTSNode(state=state, player=player, last_player=1 - player)


def assert_tree_consistent(rules, node):
    """木全体の不変条件を確認"""
    actions = list(node.children.keys())
    assert len(actions) == len(set(actions))
    assert len(actions) <= len(rules.legal_actions(node.state))
    assert node.visit_count >= sum(c.visit_count for c in node.children.values())
    assert node.value_sum == node.wins - node.losses

    for action, child in node.children.items():
        assert child.parent is node
        assert child.action == action
        assert child.last_player == node.player
        assert child.player == rules.other_player(node.player)
        assert child.state == rules.apply(node.state, action, node.player)
        assert_tree_consistent(rules, child)


class TestMCTSNode:
    """MCTSNodeの基本機能テスト"""

    def test_node_initialization(self, empty_board):
        """ノードの初期化テスト"""
        node = make_root(empty_board)

        assert node.visit_count == 0
        assert node.value_sum == 0.0
        assert node.get_value() == 0.0
        assert node.parent is None
        assert node.action is None
        assert node.player == X
        assert node.last_player == O
        assert node.is_leaf()

    def test_node_update(self, empty_board):
        """ノードの統計更新テスト（last_player視点）"""
        node = make_root(empty_board, player=O)  # last_player = X

        node.update(Outcome.PLAYER_A_WINS)
        assert node.visit_count == 1
        assert node.value_sum == 1.0
        assert node.wins == 1

        node.update(Outcome.PLAYER_B_WINS)
        assert node.visit_count == 2
        assert node.value_sum == 0.0
        assert node.losses == 1

        node.update(Outcome.DRAW)
        assert node.visit_count == 3
        assert node.value_sum == 0.0
        assert node.draws == 1

    def test_update_sums_wins_minus_losses(self, empty_board):
        """k回の更新で visit_count == k、value == 勝ち - 負け"""
        node = make_root(empty_board, player=O)
        outcomes = [Outcome.PLAYER_A_WINS, Outcome.PLAYER_B_WINS, Outcome.DRAW] * 5
        outcomes += [Outcome.PLAYER_A_WINS] * 3

        for outcome in outcomes:
            node.update(outcome)

        assert node.visit_count == len(outcomes)
        assert node.value_sum == 8 - 5
        assert (node.wins, node.draws, node.losses) == (8, 5, 5)

    def test_update_in_progress_counts_visit_only(self, empty_board):
        node = make_root(empty_board)
        node.update(Outcome.IN_PROGRESS)

        assert node.visit_count == 1
        assert node.value_sum == 0.0
        assert (node.wins, node.draws, node.losses) == (0, 0, 0)

    def test_add_child(self, rules, empty_board):
        """子ノードの追加テスト"""
        root = make_root(empty_board)
        child = root.add_child(rules.apply(empty_board, 1, X), 1, O)

        assert not root.is_leaf()
        assert root.children == {1: child}
        assert child.parent is root
        assert child.action == 1
        assert child.player == O
        assert child.last_player == X
        assert root.get_child(0) is child

        root.add_child(rules.apply(empty_board, 2, X), 2, O)
        assert len(root.children) == 2
        assert list(root.children.keys()) == [1, 2]

    def test_add_duplicate_child(self, rules, empty_board):
        root = make_root(empty_board)
        root.add_child(rules.apply(empty_board, 1, X), 1, O)

        with pytest.raises(DuplicateActionError):
            root.add_child(rules.apply(empty_board, 1, X), 1, O)

    def test_uct_value(self, rules, empty_board):
        """UCT値の計算テスト"""
        root = make_root(empty_board)
        child = root.add_child(rules.apply(empty_board, 1, X), 1, O)

        root.update(Outcome.PLAYER_A_WINS)
        child.update(Outcome.PLAYER_A_WINS)
        # exploitation = 1, exploration = sqrt(2) * sqrt(ln(1) / 1) = 0
        assert child.compute_uct(math.sqrt(2)) == pytest.approx(1.0)
        assert child.uct == pytest.approx(1.0)

        root.update(Outcome.PLAYER_B_WINS)
        child.update(Outcome.PLAYER_B_WINS)
        # exploitation = 0, exploration = sqrt(2) * sqrt(ln(2) / 2)
        assert child.compute_uct(math.sqrt(2)) == pytest.approx(math.sqrt(2 * math.log(2) / 2))

    def test_uct_reads_parent_visits_at_call_time(self, rules, empty_board):
        root = make_root(empty_board)
        child = root.add_child(rules.apply(empty_board, 1, X), 1, O)
        root.update(Outcome.DRAW)
        child.update(Outcome.DRAW)
        before = child.compute_uct(1.0)

        for _ in range(5):
            root.update(Outcome.DRAW)

        assert child.compute_uct(1.0) == pytest.approx(math.sqrt(math.log(6)))
        assert child.uct > before

    def test_unvisited_uct_is_sentinel(self, rules, empty_board):
        root = make_root(empty_board)
        child = root.add_child(rules.apply(empty_board, 1, X), 1, O)

        assert child.compute_uct(math.sqrt(2)) == UCT_UNVISITED
        assert math.isinf(UCT_UNVISITED)

    def test_best_child_prefers_unvisited(self, rules, empty_board):
        """未訪問の子は訪問済みの子より必ず優先される"""
        root = make_root(empty_board)
        visited = root.add_child(rules.apply(empty_board, 0, X), 0, O)
        unvisited = root.add_child(rules.apply(empty_board, 8, X), 8, O)

        for _ in range(10):
            root.update(Outcome.PLAYER_A_WINS)
            visited.update(Outcome.PLAYER_A_WINS)

        assert root.best_child(math.sqrt(2)) is unvisited

    def test_best_child_tie_break_by_insertion(self, rules, empty_board):
        """同点なら先に展開された子を選ぶ"""
        root = make_root(empty_board)
        first = root.add_child(rules.apply(empty_board, 5, X), 5, O)
        root.add_child(rules.apply(empty_board, 3, X), 3, O)

        assert root.best_child(math.sqrt(2)) is first

        for child in root.children.values():
            root.update(Outcome.DRAW)
            child.update(Outcome.DRAW)

        assert root.best_child(math.sqrt(2)) is first

    def test_best_child_highest_uct(self, rules, empty_board):
        root = make_root(empty_board)
        loser = root.add_child(rules.apply(empty_board, 0, X), 0, O)
        winner = root.add_child(rules.apply(empty_board, 4, X), 4, O)

        for _ in range(3):
            root.update(Outcome.PLAYER_B_WINS)
            loser.update(Outcome.PLAYER_B_WINS)
            root.update(Outcome.PLAYER_A_WINS)
            winner.update(Outcome.PLAYER_A_WINS)

        assert root.best_child(math.sqrt(2)) is winner

    def test_best_child_on_leaf(self, empty_board):
        with pytest.raises(EmptyChildrenError):
            make_root(empty_board).best_child(math.sqrt(2))

    def test_fully_expanded(self, rules):
        """子の数が合法手の数に達したら完全展開、その後も維持される"""
        state = (X, O, X, O, X, O, E, E, E)  # 6, 7, 8 が空き
        root = make_root(state, player=O)

        for action in rules.legal_actions(state):
            assert not root.is_fully_expanded(rules)
            root.add_child(rules.apply(state, action, O), action, X)

        assert root.is_fully_expanded(rules)
        root.update(Outcome.DRAW)
        assert root.is_fully_expanded(rules)
        assert root.untried_actions(rules) == []

    def test_untried_actions(self, rules, empty_board):
        root = make_root(empty_board)
        root.add_child(rules.apply(empty_board, 4, X), 4, O)
        assert root.untried_actions(rules) == [0, 1, 2, 3, 5, 6, 7, 8]

    def test_terminal_node(self, rules):
        node = make_root((X, X, X, O, O, E, E, E, E), player=O)
        assert node.is_terminal(rules)
        assert node.outcome(rules) == Outcome.PLAYER_A_WINS

    def test_get_visit_counts(self, rules, empty_board):
        root = make_root(empty_board)
        a = root.add_child(rules.apply(empty_board, 0, X), 0, O)
        root.add_child(rules.apply(empty_board, 4, X), 4, O)
        a.update(Outcome.DRAW)

        assert root.get_visit_counts() == {0: 1, 4: 0}


class TestMCTS:
    """MCTS探索ロジックのテスト"""

    def test_mcts_initialization(self, rules, empty_board):
        """MCTSの初期化テスト"""
        mcts = MCTS(rules, empty_board, X, seed=0)

        assert mcts.root.state == empty_board
        assert mcts.root.player == X
        assert mcts.root.parent is None
        assert mcts.root.is_leaf()
        assert mcts.exploration_weight == pytest.approx(math.sqrt(2))
        assert mcts.best_node is None

    def test_invalid_state(self, rules):
        with pytest.raises(InvalidStateError):
            MCTS(rules, [E] * 8, X)
        with pytest.raises(InvalidStateError):
            MCTS(rules, [E] * 8 + [4], X)

    def test_invalid_player(self, rules, empty_board):
        with pytest.raises(InvalidStateError):
            MCTS(rules, empty_board, 2)

    @pytest.mark.parametrize("budget", [0, -1, 1.5, True, "10"])
    def test_invalid_budget(self, rules, empty_board, budget):
        mcts = MCTS(rules, empty_board, X, seed=0)
        with pytest.raises(ValueError):
            mcts.search(budget)

    def test_search_returns_legal_action(self, rules, empty_board):
        mcts = MCTS(rules, empty_board, X, seed=0)
        action = mcts.search(50)

        assert action in rules.legal_actions(empty_board)
        assert mcts.best_node is mcts.root.children[action]

    def test_backpropagation_accounting(self, rules, empty_board):
        """各反復でルートと1つの子がちょうど1回ずつ更新される"""
        mcts = MCTS(rules, empty_board, X, seed=3)
        mcts.search(300)

        root = mcts.root
        assert root.visit_count == 300
        assert sum(c.visit_count for c in root.children.values()) == 300
        assert_tree_consistent(rules, root)

    def test_search_accumulates_on_same_tree(self, rules, empty_board):
        mcts = MCTS(rules, empty_board, X, seed=3)
        mcts.search(100)
        root = mcts.root
        mcts.search(50)

        assert mcts.root is root
        assert root.visit_count == 150

    def test_expands_before_deepening(self, rules, empty_board):
        """ルートの全合法手が展開されるまで孫ノードは作られない"""
        mcts = MCTS(rules, empty_board, X, seed=0)
        mcts.search(9)

        assert len(mcts.root.children) == 9
        assert all(child.is_leaf() for child in mcts.root.children.values())
        assert all(child.visit_count == 1 for child in mcts.root.children.values())

    def test_ordered_expansion(self, rules, empty_board):
        mcts = MCTS(rules, empty_board, X, seed=0, random_expansion=False)
        mcts.search(9)
        assert list(mcts.root.children.keys()) == list(range(9))

    def test_simulation_does_not_touch_tree(self, rules, empty_board):
        mcts = MCTS(rules, empty_board, X, seed=0)
        outcome = mcts._simulate(empty_board, X)

        assert outcome != Outcome.IN_PROGRESS
        assert mcts.root.visit_count == 0
        assert mcts.root.is_leaf()

    def test_full_board_draw(self, rules):
        """埋まった引き分け盤面では NoLegalMovesError"""
        state = (X, O, X, X, O, O, O, X, X)
        assert rules.winner(state) == Outcome.DRAW

        mcts = MCTS(rules, state, X, seed=0)
        with pytest.raises(NoLegalMovesError):
            mcts.search(10)

    def test_game_already_won(self, rules):
        """勝敗が決まった盤面では空きセルがあっても NoLegalMovesError"""
        state = (X, X, X, O, O, E, E, E, E)
        mcts = MCTS(rules, state, O, seed=0)

        with pytest.raises(NoLegalMovesError):
            mcts.search(10)
        assert mcts.root.is_leaf()

    def test_single_legal_move(self, rules):
        state = (X, O, X, X, O, O, O, X, E)
        mcts = MCTS(rules, state, X, seed=0)
        assert mcts.search(5) == 8

    def test_action_statistics(self, rules, empty_board):
        mcts = MCTS(rules, empty_board, X, seed=1)
        mcts.search(200)
        stats = mcts.get_action_statistics()

        assert set(stats.keys()) == set(mcts.root.children.keys())
        assert sum(s["visits"] for s in stats.values()) == 200
        for s in stats.values():
            assert s["wins"] + s["draws"] + s["losses"] == s["visits"]
            assert -1.0 <= s["value"] <= 1.0

    def test_visit_distribution(self, rules, empty_board):
        mcts = MCTS(rules, empty_board, X, seed=1)

        actions, dist = mcts.get_visit_distribution()
        assert actions == []
        assert dist.shape == (0,)

        mcts.search(100)
        actions, dist = mcts.get_visit_distribution()
        assert len(actions) == 9
        assert np.isclose(dist.sum(), 1.0)
        assert np.all(dist > 0)

    def test_injected_generator(self, rules, empty_board):
        rng = np.random.default_rng(7)
        mcts = MCTS(rules, empty_board, X, rng=rng)
        assert mcts.rng is rng
        mcts.search(20)


class TestIntegration:
    """三目並べでの統合テスト"""

    def test_opening_move_is_center(self, rules, empty_board):
        """空の盤面からの最善手は中央"""
        mcts = MCTS(rules, empty_board, TicTacToe.MACHINE, seed=0)
        assert mcts.search(1000) == 4

    @pytest.mark.parametrize("budget", [50, 200, 1000])
    def test_takes_immediate_win(self, rules, budget):
        """1手で勝てる場合はその手を選ぶ"""
        state = (X, X, E, O, O, E, E, E, E)
        mcts = MCTS(rules, state, X, seed=budget)
        assert mcts.search(budget) == 2

    def test_takes_immediate_win_as_human(self, rules):
        state = (X, X, E, O, O, E, X, E, E)
        mcts = MCTS(rules, state, O, seed=5)
        assert mcts.search(200) == 5

    def test_blocks_opponent_win(self, rules):
        """相手の勝ちを防ぐ"""
        state = (O, O, E, E, X, E, E, E, E)
        mcts = MCTS(rules, state, X, seed=11)
        assert mcts.search(2000) == 2

    def test_seeded_search_is_reproducible(self, rules, empty_board):
        """同じシードなら独立した木でも同じ手を選ぶ"""
        first = MCTS(rules, empty_board, X, seed=42)
        second = MCTS(rules, empty_board, X, seed=42)

        assert first.search(500) == second.search(500)
        assert first.root.get_visit_counts() == second.root.get_visit_counts()

    def test_construct_search_from_config(self, rules, empty_board):
        config = MCTSConfig(exploration_weight=0.5, seed=3, random_expansion=False)
        mcts = construct_search(rules, empty_board, X, config)

        assert mcts.exploration_weight == 0.5
        assert mcts.random_expansion is False

    def test_find_best_action(self, rules):
        state = (X, X, E, O, O, E, E, E, E)
        config = MCTSConfig(num_iterations=200, seed=0)

        assert find_best_action(rules, state, X, config=config) == 2
        assert find_best_action(rules, state, X, num_iterations=100, config=config) == 2

