"""
DistanceField 値型（dfield の中核データ）

データモデル（不変条件）:
- `data: int8 ndarray (height, width)` — 行優先、原点は左上。
- `width > 0` かつ `height > 0`（int32 に収まること）。非正の寸法を持つ値は生成できない。
- 各サンプルの符号は内外（負 = 形状の内側 / 正 = 外側）、絶対値は境界までの量子化距離。
  値域は `[-127, 127]`。
- 生成時に必ずコピーし、書き込み不可フラグを立てる（呼び出し側バッファと共有しない）。

`inside_mask` は 0 しきい値の内側判定。窓内で境界が見つかったサンプルは 0 に量子化されるため、
負になるのは境界から spread を超えて離れた内側（-127 に飽和）のみ。
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

INT32_MAX = 2**31 - 1


def _normalize_field_data(data: np.ndarray) -> np.ndarray:
    """`DistanceField` 生成時の内部正規化ヘルパ。"""

    arr = np.asarray(data)
    if arr.dtype != np.int8:
        raise ValueError(f"data は int8 配列である必要があります（dtype={arr.dtype}）。")
    if arr.ndim != 2:
        raise ValueError("data は形状 (height, width) の 2 次元配列である必要があります。")
    height, width = arr.shape
    if width <= 0 or height <= 0:
        raise ValueError(f"寸法は正である必要があります（width={width}, height={height}）。")
    if width > INT32_MAX or height > INT32_MAX:
        raise ValueError("寸法は int32 の範囲に収まる必要があります。")

    out = np.array(arr, dtype=np.int8, order="C", copy=True)
    out.flags.writeable = False
    return out


@dataclass(frozen=True, eq=False)
class DistanceField:
    """量子化済み符号付き距離場（不変）。

    フィールド:
    - `data (height, width) int8`: 書き込み不可の C 連続配列。
    """

    data: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _normalize_field_data(self.data))

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @classmethod
    def from_bytes(cls, width: int, height: int, payload: bytes | bytearray | memoryview) -> DistanceField:
        """行優先の生ペイロード（`width * height` バイト）から生成する。"""
        if width <= 0 or height <= 0:
            raise ValueError(f"寸法は正である必要があります（width={width}, height={height}）。")
        buf = np.frombuffer(payload, dtype=np.int8)
        if buf.size != width * height:
            raise ValueError(
                f"payload は {width * height} バイト必要です（実際 {buf.size} バイト）。"
            )
        return cls(buf.reshape(height, width))

    def tobytes(self) -> bytes:
        """行優先のペイロードを返す（コンテナの本体部分）。"""
        return self.data.tobytes(order="C")

    def inside_mask(self) -> np.ndarray:
        """`data < 0` の内側マスク（bool, (height, width)）。"""
        return self.data < 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DistanceField):
            return NotImplemented
        return self.data.shape == other.data.shape and bool(np.array_equal(self.data, other.data))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DistanceField(width={self.width}, height={self.height})"


__all__ = ["DistanceField", "INT32_MAX"]
