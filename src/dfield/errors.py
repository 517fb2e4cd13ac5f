"""
どこで: `dfield.errors`。
何を: コーデック/ジェネレータが送出する例外の分類を定義する。
なぜ: 呼び出し側が失敗の種類（I/O・フォーマット・引数）を型で区別できるようにするため。

分類:
- `DFieldIOError`: ファイルを開けなかった（原因の `OSError` を保持）。
- `DFieldFormatError`: コンテナ構造の不正。`kind` に `FormatErrorKind` を持つ。
- `ParameterError` 系: `generate` の引数検証失敗（`ValueError` 互換）。
"""

from __future__ import annotations

import enum
import os


class FormatErrorKind(enum.Enum):
    """`.dfield` コンテナの構造エラー種別。"""

    BAD_MAGIC = "bad_magic"
    TRUNCATED_HEADER = "truncated_header"
    INVALID_DIMENSIONS = "invalid_dimensions"
    TRUNCATED_PAYLOAD = "truncated_payload"
    WRITE_ERROR = "write_error"


class DFieldError(Exception):
    """dfield が送出する例外の基底クラス。"""

    kind_name: str = "error"


class DFieldIOError(DFieldError):
    """ファイルを開けなかった場合に送出される例外。

    `cause` に元の `OSError` を保持する（`raise ... from` でも連鎖する）。
    """

    kind_name = "io_error"

    def __init__(self, path: str | os.PathLike[str] | None, cause: OSError) -> None:
        super().__init__(f"cannot open {path!s}: {cause}")
        self.path = path
        self.cause = cause


class DFieldFormatError(DFieldError):
    """コンテナの構造不正（マジック不一致・切り詰め・不正寸法・書き込み失敗）。"""

    def __init__(
        self,
        kind: FormatErrorKind,
        message: str | None = None,
        *,
        path: str | os.PathLike[str] | None = None,
    ) -> None:
        if message is None:
            message = kind.value.replace("_", " ")
        if path is not None:
            message = f"{path!s}: {message}"
        super().__init__(message)
        self.kind = kind
        self.path = path

    @property
    def kind_name(self) -> str:  # type: ignore[override]
        return self.kind.value


class ParameterError(DFieldError, ValueError):
    """`generate` の引数検証失敗。呼び出し側の契約違反でありリトライしない。"""

    kind_name = "invalid_parameter"


class InvalidInputSizeError(ParameterError):
    kind_name = "invalid_input_size"


class InvalidOutputSizeError(ParameterError):
    kind_name = "invalid_output_size"


class InvalidSpreadError(ParameterError):
    kind_name = "invalid_spread"


__all__ = [
    "FormatErrorKind",
    "DFieldError",
    "DFieldIOError",
    "DFieldFormatError",
    "ParameterError",
    "InvalidInputSizeError",
    "InvalidOutputSizeError",
    "InvalidSpreadError",
]
