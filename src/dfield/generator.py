"""
どこで: `dfield.generator`。
何を: 2 値ビットマップから、再標本化・量子化済みの符号付き距離場を生成する。
なぜ: レンダラがアウトライン/グローを解像度非依存に描くための距離テクスチャを作るため。

アルゴリズム（出力ピクセルごとに独立）:
1. 出力 (x, y) を各軸独立の最近傍スケーリングで入力座標へ写像する。
   `x_in = round(x * in_w / out_w)`（0.5 は 0 から遠い側へ丸め）。整数演算で厳密に計算し、
   2 倍超の拡大で `in_w` に達した場合は最終ピクセルへ丸める。
2. 中心サンプルの状態（非 0 = セット）を得る。
3. 半径 `spread` の正方窓（入力範囲でクリップ、折り返し/クランプ無し）内で、
   状態の異なるピクセルまでの最小二乗距離 `i*i + j*j` を求める。
4. 見つからなければ距離は非有界とみなし ±127 に飽和する。
5. `sqrt` した距離をセット（内側）なら負にする。
6. `spread * sqrt(2) * 128` で割って最近接整数へ丸める（偶数丸め、`lrint` 相当）。
   既存アセットとのビット互換のため定数は変えない。窓内で検出された距離は 0 に量子化される。
7. `[-127, 127]` にクランプして int8 として格納する。

実装メモ:
- 既定は Numba JIT（`parallel=True`、出力行を `prange` で分割）。共有可変状態は無い。
- `use_numba=False` は NumPy 参照実装（窓オフセットごとのベクトル化）。結果はビット一致。
- 窓はループ範囲の時点で入力範囲へクリップするため、巨大な spread でも画像サイズで頭打ち。
- `spread <= 32768` は `2 * spread**2` が int32 に収まるための上限。
"""

from __future__ import annotations

import math
import operator
from typing import Any

import numpy as np
from numba import njit, prange  # type: ignore[attr-defined]

from common import settings

from .errors import (
    InvalidInputSizeError,
    InvalidOutputSizeError,
    InvalidSpreadError,
)
from .field import INT32_MAX, DistanceField

MAX_SPREAD: int = 32768
SATURATION: int = 127


def _as_int(value: Any, name: str, error: type[Exception]) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise error(f"{name} は整数である必要があります（{value!r}）") from None


def _check_size(width: Any, height: Any, label: str, error: type[Exception]) -> tuple[int, int]:
    w = _as_int(width, f"{label}_width", error)
    h = _as_int(height, f"{label}_height", error)
    if w <= 0 or h <= 0:
        raise error(f"{label} size must be positive (got {w}x{h})")
    if w > INT32_MAX or h > INT32_MAX:
        raise error(f"{label} size exceeds int32 (got {w}x{h})")
    return w, h


def resample_indices(input_size: int, output_size: int) -> np.ndarray:
    """出力軸の各 index に対応する入力 index（最近傍、0.5 は切り上げ）を返す。

    `round(k * input_size / output_size)` を整数演算で求める。
    同一サイズなら恒等写像。
    """
    # int32 寸法同士の積の 2 倍は int64 を超え得るため uint64 で計算する
    k = np.arange(output_size, dtype=np.uint64)
    idx = (np.uint64(2) * k * np.uint64(input_size) + np.uint64(output_size)) // np.uint64(
        2 * output_size
    )
    return np.minimum(idx, np.uint64(input_size - 1)).astype(np.int64)


def _distance_divisor(spread: int) -> float:
    # spread == 0 は窓が中心 1 px のみで常に未検出（飽和）となり、divisor は参照されない
    if spread == 0:
        return 1.0
    return spread * math.sqrt(2.0) * 128.0


@njit(cache=True)
def _quantize(best: int, inside: bool, divisor: float) -> int:
    """最小二乗距離を符号付き int8 値へ量子化する（best < 0 は未検出）。"""
    if best < 0:
        v = SATURATION
    else:
        v = int(round(math.sqrt(best) / divisor))
        if v > SATURATION:
            v = SATURATION
    if inside:
        return -v
    return v


@njit(cache=True, parallel=True)
def _field_kernel(state, x_map, y_map, spread, divisor):  # type: ignore[no-untyped-def]
    """Numba カーネル本体。

    引数:
        state: (in_h, in_w) uint8（0/1）。
        x_map: 出力列 -> 入力列 の写像。
        y_map: 出力行 -> 入力行 の写像。
        spread: 探索半径 [入力 px]。
        divisor: 距離 -> 量子化値 の除数（`spread * sqrt(2) * 128`）。

    返り値:
        (out_h, out_w) int8。
    """
    in_h, in_w = state.shape
    out_h = y_map.shape[0]
    out_w = x_map.shape[0]
    out = np.empty((out_h, out_w), dtype=np.int8)

    for y in prange(out_h):
        y_in = y_map[y]
        i_lo = max(-spread, -y_in)
        i_hi = min(spread, in_h - 1 - y_in)
        for x in range(out_w):
            x_in = x_map[x]
            j_lo = max(-spread, -x_in)
            j_hi = min(spread, in_w - 1 - x_in)
            center = state[y_in, x_in]

            best = -1
            for i in range(i_lo, i_hi + 1):
                row = y_in + i
                for j in range(j_lo, j_hi + 1):
                    if state[row, x_in + j] != center:
                        d2 = i * i + j * j
                        if best < 0 or d2 < best:
                            best = d2

            out[y, x] = _quantize(best, center != 0, divisor)
    return out


def _field_numpy(
    state: np.ndarray,
    x_map: np.ndarray,
    y_map: np.ndarray,
    spread: int,
    divisor: float,
) -> np.ndarray:
    """NumPy 参照実装。窓オフセットごとに全出力ピクセルをまとめて比較する。"""
    in_h, in_w = state.shape
    center = state[y_map[:, None], x_map[None, :]]

    unset = np.iinfo(np.int64).max
    best = np.full(center.shape, unset, dtype=np.int64)

    # 入力範囲外にしか届かないオフセットは走査しない
    ri = min(spread, in_h - 1)
    rj = min(spread, in_w - 1)
    for i in range(-ri, ri + 1):
        rows = y_map + i
        row_ok = (rows >= 0) & (rows < in_h)
        if not row_ok.any():
            continue
        rows_c = np.clip(rows, 0, in_h - 1)
        for j in range(-rj, rj + 1):
            cols = x_map + j
            col_ok = (cols >= 0) & (cols < in_w)
            if not col_ok.any():
                continue
            cols_c = np.clip(cols, 0, in_w - 1)
            neighbour = state[rows_c[:, None], cols_c[None, :]]
            hit = (neighbour != center) & row_ok[:, None] & col_ok[None, :]
            d2 = i * i + j * j
            best = np.where(hit & (d2 < best), d2, best)

    found = best != unset
    mag = np.full(center.shape, float(SATURATION), dtype=np.float64)
    if found.any():
        mag[found] = np.minimum(np.rint(np.sqrt(best[found].astype(np.float64)) / divisor), SATURATION)
    signed = np.where(center != 0, -mag, mag)
    return signed.astype(np.int8)


def _source_state(source: Any, input_width: int, input_height: int) -> np.ndarray:
    """入力バッファを (in_h, in_w) の 0/1 uint8 配列へ正規化する。"""
    if isinstance(source, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(source, dtype=np.uint8)
    else:
        flat = np.asarray(source).reshape(-1)
    needed = input_width * input_height
    if flat.size < needed:
        raise InvalidInputSizeError(
            f"source holds {flat.size} samples, {input_width}x{input_height} needs {needed}"
        )
    return (flat[:needed] != 0).astype(np.uint8).reshape(input_height, input_width)


def generate(
    source: Any,
    input_width: int,
    input_height: int,
    output_width: int,
    output_height: int,
    spread: int,
    *,
    use_numba: bool | None = None,
) -> DistanceField:
    """2 値ビットマップから量子化済み符号付き距離場を生成する。

    Parameters
    ----------
    source : bytes-like | array-like
        `input_width * input_height` 個以上のサンプル（行優先、非 0 = セット）。
    input_width, input_height : int
        入力ビットマップの寸法（> 0）。
    output_width, output_height : int
        出力距離場の寸法（> 0）。
    spread : int
        探索半径 [入力 px]。`0 <= spread <= 32768`。
    use_numba : bool | None, default None
        True で Numba カーネル、False で NumPy 参照実装。None は `DFIELD_USE_NUMBA` 設定に従う。

    Returns
    -------
    DistanceField
        `output_width x output_height` の新しい距離場。

    Raises
    ------
    InvalidInputSizeError
        入力寸法が非正、または `source` のサンプル数が不足。
    InvalidOutputSizeError
        出力寸法が非正。
    InvalidSpreadError
        spread が `[0, 32768]` の範囲外。
    """
    in_w, in_h = _check_size(input_width, input_height, "input", InvalidInputSizeError)
    out_w, out_h = _check_size(output_width, output_height, "output", InvalidOutputSizeError)
    spread_i = _as_int(spread, "spread", InvalidSpreadError)
    if spread_i < 0 or spread_i > MAX_SPREAD:
        raise InvalidSpreadError(f"spread must be within [0, {MAX_SPREAD}] (got {spread_i})")

    state = _source_state(source, in_w, in_h)
    x_map = resample_indices(in_w, out_w)
    y_map = resample_indices(in_h, out_h)
    divisor = _distance_divisor(spread_i)

    if use_numba is None:
        use_numba = settings.get().USE_NUMBA

    if use_numba:
        data = _field_kernel(state, x_map, y_map, spread_i, divisor)
    else:
        data = _field_numpy(state, x_map, y_map, spread_i, divisor)
    return DistanceField(data)


__all__ = ["generate", "resample_indices", "MAX_SPREAD", "SATURATION"]
