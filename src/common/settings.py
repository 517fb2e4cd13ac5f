"""
どこで: `common.settings`
何を: dfield の環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。

環境変数:
- `DFIELD_USE_NUMBA`: 生成カーネルに Numba JIT を使うか（既定 1）。0 で NumPy 参照実装。
- `DFIELD_DEFAULT_SPREAD`: CLI の既定 spread [入力 px]（既定 8、下限 0）。
- `DFIELD_LOG_LEVEL`: CLI のログレベル（既定 INFO）。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int, env_str


@dataclass
class _Settings:
    # Generator
    USE_NUMBA: bool = True
    DEFAULT_SPREAD: int = 8

    # CLI
    LOG_LEVEL: str = "INFO"


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - bool は `env_bool`、int は `env_int` を使用。
    - spread は下限 0 に丸める（上限は generator 側で検証する）。
    """
    _settings.USE_NUMBA = env_bool("DFIELD_USE_NUMBA", True)
    _settings.DEFAULT_SPREAD = env_int("DFIELD_DEFAULT_SPREAD", 8, min_value=0) or 0
    _settings.LOG_LEVEL = env_str("DFIELD_LOG_LEVEL", "INFO").upper()


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
