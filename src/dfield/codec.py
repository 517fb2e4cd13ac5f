"""
どこで: `dfield.codec`。
何を: DistanceField を `.dfield` コンテナへ保存/読込し、生ビットマップを読み込む。
なぜ: マジック付きの厳密なバイト数検証で、切り詰められた成果物を有効値として扱わないため。

コンテナ形式（リトルエンディアン）:

    offset  size          field
    0       2             magic   b"DF"
    2       4             width   int32 (> 0)
    6       4             height  int32 (> 0)
    10      width*height  payload int8, 行優先

- マジック無しの旧形式は非対応（`BAD_MAGIC` として拒否）。
- ペイロードは上限付きのチャンクで読むため、壊れたヘッダの巨大寸法で先行確保しない。
- ファイルハンドルは成功/失敗いずれでも閉じる。
"""

from __future__ import annotations

import contextlib
import os
import struct
from typing import IO

import numpy as np

from .errors import (
    DFieldFormatError,
    DFieldIOError,
    FormatErrorKind,
    InvalidInputSizeError,
)
from .field import DistanceField

MAGIC = b"DF"
_DIMS = struct.Struct("<ii")
HEADER_SIZE = len(MAGIC) + _DIMS.size

# 1 回の read で要求する最大バイト数
READ_CHUNK = 1 << 20

PathLike = str | os.PathLike[str]


def _read_exact(fp: IO[bytes], size: int) -> bytes:
    """`size` バイトまで読む。EOF で打ち切り、読めた分だけ返す。

    非バッファのストリームは EOF 前でも短く返し得るため、常に EOF までループする。
    """
    buf = bytearray()
    while len(buf) < size:
        chunk = fp.read(min(READ_CHUNK, size - len(buf)))
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


def _write_exact(fp: IO[bytes], payload: bytes) -> None:
    written = fp.write(payload)
    if written != len(payload):
        raise DFieldFormatError(
            FormatErrorKind.WRITE_ERROR,
            f"short write ({written} of {len(payload)} bytes)",
        )


def read_field(fp: IO[bytes]) -> DistanceField:
    """開いたバイナリストリームから DistanceField を 1 つ読む。

    Raises
    ------
    DFieldFormatError
        マジック不一致/ヘッダ切り詰め/不正寸法/ペイロード切り詰め。
    """
    magic = _read_exact(fp, len(MAGIC))
    if magic != MAGIC:
        raise DFieldFormatError(FormatErrorKind.BAD_MAGIC, f"bad magic {magic!r}")

    raw = _read_exact(fp, _DIMS.size)
    if len(raw) != _DIMS.size:
        raise DFieldFormatError(
            FormatErrorKind.TRUNCATED_HEADER,
            f"truncated header ({len(raw)} of {_DIMS.size} dimension bytes)",
        )
    width, height = _DIMS.unpack(raw)
    if width <= 0 or height <= 0:
        raise DFieldFormatError(
            FormatErrorKind.INVALID_DIMENSIONS,
            f"invalid dimensions {width}x{height}",
        )

    expected = width * height
    payload = _read_exact(fp, expected)
    if len(payload) != expected:
        raise DFieldFormatError(
            FormatErrorKind.TRUNCATED_PAYLOAD,
            f"truncated payload ({len(payload)} of {expected} bytes)",
        )
    return DistanceField.from_bytes(width, height, payload)


def write_field(fp: IO[bytes], field: DistanceField) -> None:
    """開いたバイナリストリームへ DistanceField を書き出す。

    各書き込みは期待バイト数と照合し、不足時は `WRITE_ERROR`。
    """
    if not isinstance(field, DistanceField):
        raise TypeError(f"DistanceField が必要です（{type(field).__name__}）")
    # 型の不変条件で保証済みだが、寸法 0 のファイルは決して書かない
    if field.width <= 0 or field.height <= 0:
        raise ValueError(f"invalid field dimensions {field.width}x{field.height}")

    _write_exact(fp, MAGIC)
    _write_exact(fp, _DIMS.pack(field.width, field.height))
    _write_exact(fp, field.tobytes())


def load(path: PathLike) -> DistanceField:
    """`.dfield` ファイルを読み込む。

    Parameters
    ----------
    path : str | os.PathLike
        読み込むファイル。

    Returns
    -------
    DistanceField
        新しく確保された距離場。

    Raises
    ------
    DFieldIOError
        ファイルを開けない/読めない。
    DFieldFormatError
        コンテナ構造の不正（`kind` 参照）。
    """
    try:
        fp = open(path, "rb")
    except OSError as exc:
        raise DFieldIOError(path, exc) from exc

    try:
        with fp:
            return read_field(fp)
    except DFieldFormatError as exc:
        exc.path = path
        raise
    except OSError as exc:
        raise DFieldIOError(path, exc) from exc


def save(path: PathLike, field: DistanceField) -> None:
    """DistanceField を `.dfield` ファイルへ書き出す（作成/切り詰め）。

    書き込み途中で失敗した場合は中途半端なファイルを削除してから送出する。

    Raises
    ------
    DFieldIOError
        ファイルを開けない。
    DFieldFormatError
        書き込みが期待バイト数に満たない/書き込み中の OSError（`WRITE_ERROR`）。
    TypeError, ValueError
        `field` が有効な DistanceField でない（呼び出し側の契約違反）。
    """
    if not isinstance(field, DistanceField):
        raise TypeError(f"DistanceField が必要です（{type(field).__name__}）")

    try:
        fp = open(path, "wb")
    except OSError as exc:
        raise DFieldIOError(path, exc) from exc

    try:
        with fp:
            write_field(fp, field)
    except DFieldFormatError as exc:
        exc.path = path
        _discard(path)
        raise
    except OSError as exc:
        _discard(path)
        raise DFieldFormatError(
            FormatErrorKind.WRITE_ERROR, f"write failed: {exc}", path=path
        ) from exc


def _discard(path: PathLike) -> None:
    with contextlib.suppress(OSError):
        os.unlink(path)


def load_raw(path: PathLike, width: int, height: int) -> np.ndarray:
    """ヘッダ無しの 8bit 生ビットマップ（1 px = 1 byte）を読み込む。

    Returns
    -------
    np.ndarray
        形状 `(height, width)`、dtype `uint8`。0 = 非セット、非 0 = セット。
    """
    if width <= 0 or height <= 0:
        raise InvalidInputSizeError(f"invalid bitmap size {width}x{height}")

    expected = width * height
    try:
        with open(path, "rb") as fp:
            payload = _read_exact(fp, expected)
    except OSError as exc:
        raise DFieldIOError(path, exc) from exc

    if len(payload) != expected:
        raise DFieldFormatError(
            FormatErrorKind.TRUNCATED_PAYLOAD,
            f"raw bitmap has {len(payload)} of {expected} bytes",
            path=path,
        )
    return np.frombuffer(payload, dtype=np.uint8).reshape(height, width).copy()


__all__ = [
    "MAGIC",
    "HEADER_SIZE",
    "read_field",
    "write_field",
    "load",
    "save",
    "load_raw",
]
