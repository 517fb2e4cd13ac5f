"""
どこで: `common` パッケージ。
何を: 設定（環境変数）とロギングの共通基盤。
なぜ: dfield 本体と CLI の双方から再利用し、依存の向きを単純化するため。
"""

from . import settings
from .logging import setup_default_logging

__all__ = [
    "settings",
    "setup_default_logging",
]
