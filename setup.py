"""パッケージのビルドスクリプト

使用方法:
    uv pip install -e ".[test]"
"""

from setuptools import find_packages, setup

setup(
    name="uct-mcts",
    version="0.1.0",
    description="UCT Monte Carlo Tree Search for two-player board games",
    packages=find_packages(include=["uct_mcts", "uct_mcts.*"]),
    py_modules=["main"],
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pydantic>=2",
        "pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "uct-mcts=main:main",
        ],
    },
)
