"""
探索設定

YAML設定ファイルの読み込みと、Pydanticによる値の検証
"""

import math
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


def load_config(config_path: str) -> dict:
    """
    YAML設定ファイルを読み込む

    Args:
        config_path: 設定ファイルのパス

    Returns:
        dict: 設定辞書
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config root must be a mapping, got {type(config).__name__}")
    return config


class MCTSConfig(BaseModel):
    """MCTS探索の設定"""

    num_iterations: int = Field(
        default=1000,
        ge=1,
        description="1手あたりの探索回数",
    )
    exploration_weight: float = Field(
        default=math.sqrt(2),
        gt=0,
        description="UCT式の探索定数 C",
    )
    seed: Optional[int] = Field(
        default=None,
        description="乱数シード（Noneなら毎回異なる）",
    )
    random_expansion: bool = Field(
        default=True,
        description="未展開の手をランダムに選ぶか（Falseなら合法手の順）",
    )

    @classmethod
    def from_dict(cls, config: dict) -> "MCTSConfig":
        """
        設定辞書の mcts セクションから作成

        Args:
            config: load_config の戻り値

        Returns:
            MCTSConfig: 検証済みの設定
        """
        section = (config or {}).get('mcts') or {}
        if not isinstance(section, dict):
            raise ValueError(f"Config section 'mcts' must be a mapping, got {type(section).__name__}")
        return cls(**section)

    @classmethod
    def from_yaml(cls, config_path: str) -> "MCTSConfig":
        """YAMLファイルから作成"""
        return cls.from_dict(load_config(config_path))
