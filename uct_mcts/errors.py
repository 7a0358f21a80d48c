"""
探索エンジンの例外定義

- InvalidActionError: 合法でない着手を適用しようとした
- DuplicateActionError: 同じ着手の子ノードを二重に作成しようとした
- EmptyChildrenError: 子ノードを持たないノードで子選択を行った
- NoLegalMovesError: 探索開始局面に合法手がない（終局済み）
- InvalidStateError: 盤面・手番の形式が不正
"""


class MCTSError(Exception):
    """探索エンジンの例外の基底クラス"""


class InvalidActionError(MCTSError, ValueError):
    """現在の局面で合法でない着手"""


class DuplicateActionError(MCTSError):
    """同じ着手に対する子ノードが既に存在する"""


class EmptyChildrenError(MCTSError):
    """子ノードがないノードで best_child が呼ばれた"""


class NoLegalMovesError(MCTSError):
    """
    指せる手がない

    ゲームが既に終了している場合に発生する。呼び出し側が処理すべき正常な終了条件。
    """


class InvalidStateError(MCTSError, ValueError):
    """盤面または手番が不正"""
