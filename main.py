"""
UCT MCTS - CLIエントリポイント

最善手の計算・対戦・評価用のコマンドラインインターフェース
"""

import argparse
import logging

from uct_mcts.config import MCTSConfig, load_config
from uct_mcts.errors import NoLegalMovesError
from uct_mcts.game import TicTacToe
from uct_mcts.mcts import construct_search
from uct_mcts.eval.players import HumanPlayer, MCTSPlayer, RandomPlayer
from uct_mcts.eval.arena import Arena, evaluate_player


def positive_int(value: str) -> int:
    """argparse用: 1以上の整数"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_config(args) -> tuple:
    """
    設定ファイルとコマンドライン引数から探索設定を作成

    Args:
        args: argparseの引数

    Returns:
        tuple: (config_dict, MCTSConfig)
    """
    config = load_config(args.config)
    section = dict(config.get('mcts') or {})

    if args.iterations is not None:
        section['num_iterations'] = args.iterations
    if args.seed is not None:
        section['seed'] = args.seed

    return config, MCTSConfig(**section)


def move_command(args):
    """
    最善手コマンド

    Args:
        args: argparseの引数
    """
    _, mcts_config = build_config(args)
    rules = TicTacToe()
    state = rules.parse_state(args.board)
    player = TicTacToe.HUMAN if args.player == 'O' else TicTacToe.MACHINE

    mcts = construct_search(rules, state, player, mcts_config)
    try:
        action = mcts.search(mcts_config.num_iterations)
    except NoLegalMovesError:
        print(f"{rules.render(state)}\n")
        print(f"Game is already over: {rules.winner(state).name}")
        return

    print(f"Best move: {action}")
    for a, stats in mcts.get_action_statistics().items():
        print(f"  {a}: visits={stats['visits']:5d}  value={stats['value']:+.3f}")
    print(f"\n{rules.render(rules.apply(state, action, player))}")


def play_command(args):
    """
    対戦コマンド（人間 vs AI）

    Args:
        args: argparseの引数
    """
    _, mcts_config = build_config(args)
    rules = TicTacToe()

    arena = Arena(rules, verbose=True)
    human = HumanPlayer()
    ai = MCTSPlayer(config=mcts_config)

    starting_player = -1 if args.human_first else 1
    arena.play_game(ai, human, starting_player=starting_player)


def eval_command(args):
    """
    評価コマンド（AI vs ランダム）

    Args:
        args: argparseの引数
    """
    config, mcts_config = build_config(args)
    if args.games is not None:
        num_games = args.games
    else:
        num_games = (config.get('eval') or {}).get('num_games', 20)
    if isinstance(num_games, bool) or not isinstance(num_games, int) or num_games < 1:
        raise ValueError(f"num_games must be a positive integer, got {num_games!r}")
    rules = TicTacToe()

    print("=" * 70)
    print("MCTS Evaluation")
    print("=" * 70)
    print(f"Games: {num_games}")
    print(f"Iterations per move: {mcts_config.num_iterations}")

    eval_result = evaluate_player(
        rules,
        player=MCTSPlayer(config=mcts_config),
        opponent=RandomPlayer(seed=mcts_config.seed),
        num_games=num_games,
        verbose=args.verbose,
    )

    print(f"\nResult vs Random:")
    print(f"  Win Rate:  {eval_result['win_rate'] * 100:.1f}%")
    print(f"  Draw Rate: {eval_result['draw_rate'] * 100:.1f}%")
    print(f"  Loss Rate: {eval_result['loss_rate'] * 100:.1f}%")
    print(f"  Avg Moves: {eval_result['avg_moves']:.1f}")


def main():
    """メインエントリポイント"""
    parser = argparse.ArgumentParser(description="UCT MCTS - CLI")
    parser.add_argument(
        '--log-level',
        type=str,
        default='WARNING',
        help='Logging level (default: WARNING)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--config',
        type=str,
        default='configs/default.yaml',
        help='Path to config file (default: configs/default.yaml)'
    )
    common.add_argument(
        '--iterations',
        type=positive_int,
        default=None,
        help='MCTS iterations per move (overrides config)'
    )
    common.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed (overrides config)'
    )

    # Move コマンド
    move_parser = subparsers.add_parser('move', parents=[common], help='Compute the best move')
    move_parser.add_argument(
        '--board',
        type=str,
        default='.........',
        help="Board as 9 characters: X, O or '.' (default: empty board)"
    )
    move_parser.add_argument(
        '--player',
        type=str,
        choices=['X', 'O'],
        default='X',
        help='Player to move (default: X)'
    )
    move_parser.set_defaults(func=move_command)

    # Play コマンド
    play_parser = subparsers.add_parser('play', parents=[common], help='Play against the AI')
    play_parser.add_argument(
        '--human-first',
        action='store_true',
        help='Human plays first'
    )
    play_parser.set_defaults(func=play_command)

    # Eval コマンド
    eval_parser = subparsers.add_parser('eval', parents=[common], help='Evaluate against a random player')
    eval_parser.add_argument(
        '--games',
        type=positive_int,
        default=None,
        help='Number of games (overrides config)'
    )
    eval_parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show detailed game progress'
    )
    eval_parser.set_defaults(func=eval_command)

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if hasattr(args, 'func'):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
