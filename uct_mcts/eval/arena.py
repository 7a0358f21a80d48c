"""
対戦管理システム (Arena)

2つのプレイヤーを対戦させ、結果を記録する
"""

import time
from dataclasses import dataclass
from typing import List, Optional

from uct_mcts.game.base import GameRules, Outcome, PLAYER_A, PLAYER_B
from .players import Player


@dataclass
class MatchResult:
    """
    対戦結果

    Attributes:
        player1_name: プレイヤー1の名前
        player2_name: プレイヤー2の名前
        winner: 勝者 (1: player1, -1: player2, 0: 引き分け)
        num_moves: 総手数
        duration: 対戦時間（秒）
        final_state: 終局時の盤面
    """
    player1_name: str
    player2_name: str
    winner: int
    num_moves: int
    duration: float
    final_state: Optional[tuple] = None

    def __str__(self) -> str:
        """結果の文字列表現"""
        if self.winner == 1:
            result = f"{self.player1_name} wins"
        elif self.winner == -1:
            result = f"{self.player2_name} wins"
        else:
            result = "Draw"

        return (
            f"{result} | "
            f"Moves: {self.num_moves} | "
            f"Time: {self.duration:.2f}s"
        )


class Arena:
    """
    対戦管理システム

    先手は PLAYER_A、後手は PLAYER_B として指す
    """

    def __init__(self, rules: GameRules, verbose: bool = True):
        """
        Args:
            rules: ゲームルール（initial_state() を持つこと）
            verbose: 詳細な出力を行うか
        """
        self.rules = rules
        self.verbose = verbose

    def play_game(
        self,
        player1: Player,
        player2: Player,
        starting_player: int = 1,
        initial_state: Optional[tuple] = None,
        to_move: Optional[int] = None,
    ) -> MatchResult:
        """
        1ゲームを実行

        Args:
            player1: プレイヤー1
            player2: プレイヤー2
            starting_player: 先手 (1: player1, -1: player2)
            initial_state: 開始盤面（省略時は rules.initial_state()）
            to_move: 最初に着手するプレイヤー（省略時は rules.player_to_move() で盤面から推定）

        Returns:
            MatchResult: 対戦結果
        """
        if initial_state is None:
            state = self.rules.initial_state()
        else:
            state = self.rules.validate_state(initial_state)

        player1.reset()
        player2.reset()

        # 先手・後手の割り当て
        if starting_player == 1:
            seats = {PLAYER_A: player1, PLAYER_B: player2}
        else:
            seats = {PLAYER_A: player2, PLAYER_B: player1}

        if to_move is None:
            to_move = self.rules.player_to_move(state)
        elif to_move not in seats:
            raise ValueError(f"Unknown player: {to_move}")

        num_moves = 0
        start_time = time.time()

        # ゲームループ
        outcome = self.rules.winner(state)
        while outcome == Outcome.IN_PROGRESS:
            current = seats[to_move]
            action = current.get_action(self.rules, state, to_move)

            if self.verbose:
                print(f"{current.name} plays: {action} (legal: {self.rules.legal_actions(state)})")

            state = self.rules.apply(state, action, to_move)
            to_move = self.rules.other_player(to_move)
            num_moves += 1
            outcome = self.rules.winner(state)

        duration = time.time() - start_time

        # プレイヤー1視点での勝者判定
        winning_player = outcome.winner
        if winning_player is None:
            winner = 0
        elif seats[winning_player] is player1:
            winner = 1
        else:
            winner = -1

        result = MatchResult(
            player1_name=player1.name,
            player2_name=player2.name,
            winner=winner,
            num_moves=num_moves,
            duration=duration,
            final_state=state,
        )

        if self.verbose:
            print(f"\n{self.rules.render(state)}")
            print(f"\n{result}\n")

        return result

    def play_matches(
        self,
        player1: Player,
        player2: Player,
        num_games: int = 10,
        alternate_colors: bool = True,
    ) -> List[MatchResult]:
        """
        複数ゲームを実行

        Args:
            player1: プレイヤー1
            player2: プレイヤー2
            num_games: ゲーム数
            alternate_colors: 先後を交代するか

        Returns:
            List[MatchResult]: 対戦結果のリスト
        """
        results = []

        for game_idx in range(num_games):
            if self.verbose:
                print(f"=== Game {game_idx + 1}/{num_games} ===")

            if alternate_colors:
                starting_player = 1 if (game_idx % 2 == 0) else -1
            else:
                starting_player = 1

            result = self.play_game(player1, player2, starting_player)
            results.append(result)

        if self.verbose:
            self._print_summary(results, player1.name, player2.name)

        return results

    def _print_summary(
        self,
        results: List[MatchResult],
        player1_name: str,
        player2_name: str,
    ):
        """対戦結果のサマリーを表示"""
        print("\n" + "=" * 70)
        print("Match Summary")
        print("=" * 70)

        player1_wins = sum(1 for r in results if r.winner == 1)
        player2_wins = sum(1 for r in results if r.winner == -1)
        draws = sum(1 for r in results if r.winner == 0)

        total_games = len(results)
        player1_win_rate = player1_wins / total_games * 100 if total_games > 0 else 0
        player2_win_rate = player2_wins / total_games * 100 if total_games > 0 else 0
        avg_moves = sum(r.num_moves for r in results) / total_games if total_games > 0 else 0
        avg_duration = sum(r.duration for r in results) / total_games if total_games > 0 else 0

        print(f"\nTotal Games: {total_games}")
        print(f"{player1_name}: {player1_wins} wins ({player1_win_rate:.1f}%)")
        print(f"{player2_name}: {player2_wins} wins ({player2_win_rate:.1f}%)")
        print(f"Draws: {draws}")
        print(f"\nAverage Moves: {avg_moves:.1f}")
        print(f"Average Duration: {avg_duration:.2f}s")
        print("=" * 70 + "\n")


def evaluate_player(
    rules: GameRules,
    player: Player,
    opponent: Player,
    num_games: int = 10,
    verbose: bool = True,
) -> dict:
    """
    プレイヤーを評価

    Args:
        rules: ゲームルール
        player: 評価対象のプレイヤー
        opponent: 対戦相手
        num_games: ゲーム数
        verbose: 詳細な出力

    Returns:
        dict: 評価結果
            - win_rate: 勝率
            - draw_rate: 引き分け率
            - loss_rate: 負け率
            - avg_moves: 平均手数
            - results: 対戦結果リスト
    """
    arena = Arena(rules, verbose=verbose)
    results = arena.play_matches(player, opponent, num_games=num_games)

    wins = sum(1 for r in results if r.winner == 1)
    draws = sum(1 for r in results if r.winner == 0)
    losses = sum(1 for r in results if r.winner == -1)

    return {
        "win_rate": wins / num_games if num_games > 0 else 0,
        "draw_rate": draws / num_games if num_games > 0 else 0,
        "loss_rate": losses / num_games if num_games > 0 else 0,
        "avg_moves": sum(r.num_moves for r in results) / num_games if num_games > 0 else 0,
        "results": results,
    }
