"""
どこで: `common.logging`。
何を: dfield CLI 用のロギング初期化（`setup_default_logging`）。
なぜ: ライブラリ層を無音に保ったまま、CLI だけがエラー種別を人に見える形で出せるようにするため。

約束事:
- `dfield.codec` / `dfield.generator` / `dfield.field` はロガーを取得せず、設定にも触れない。
- `dfield.cli` は `logging.getLogger(__name__)` を使い、起動時に本関数を 1 度呼ぶ。
- レベルは `--log-level`、無ければ `DFIELD_LOG_LEVEL`（`common.settings`）から渡される。
"""

from __future__ import annotations

import logging

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_default_logging(level: int | str = "INFO") -> None:
    """ルートロガーが未設定のときだけ `basicConfig` を適用する。

    - 既にハンドラがあれば何もしない（組み込み先アプリや pytest の設定を尊重）
    - 未知のレベル名は INFO 扱い
    """
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)

    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=lvl, format=DEFAULT_FORMAT)


__all__ = ["setup_default_logging", "DEFAULT_FORMAT"]
