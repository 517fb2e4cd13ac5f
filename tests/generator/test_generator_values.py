from __future__ import annotations

import numpy as np
import pytest

from dfield import generate, resample_indices

# What this tests
# - 量子化値の具体例（窓内で検出された距離は 0、未検出は符号付きで ±127）、飽和、再標本化の写像。
# - 両バックエンド（numba / numpy）で同じ期待値になること。

BACKENDS = pytest.mark.parametrize("use_numba", [True, False], ids=["numba", "numpy"])


@BACKENDS
def test_all_set_saturates_negative(use_numba: bool) -> None:
    f = generate(bytes([255] * 16), 4, 4, 4, 4, 2, use_numba=use_numba)
    assert (f.width, f.height) == (4, 4)
    assert np.all(f.data == -127)


@BACKENDS
def test_all_unset_saturates_positive(use_numba: bool) -> None:
    f = generate(bytes(16), 4, 4, 3, 5, 2, use_numba=use_numba)
    assert f.data.shape == (5, 3)
    assert np.all(f.data == 127)


@BACKENDS
def test_known_values_single_row(use_numba: bool) -> None:
    # d / (2 * sqrt(2) * 128): d=1 -> 0.0028, d=2 -> 0.0055。いずれも 0 へ丸まる
    f = generate(bytes([255, 0, 0]), 3, 1, 3, 1, 2, use_numba=use_numba)
    assert f.data.tolist() == [[0, 0, 0]]


@BACKENDS
def test_window_diagonal_quantizes_to_zero(use_numba: bool) -> None:
    # spread=1: 対角 sqrt(2) / (sqrt(2) * 128) = 1/128 -> 0
    src = np.array([[255, 0], [0, 0]], dtype=np.uint8)
    f = generate(src, 2, 2, 2, 2, 1, use_numba=use_numba)
    assert f.data.tolist() == [[0, 0], [0, 0]]


@BACKENDS
def test_checkerboard_is_point_symmetric(checkerboard: bytes, use_numba: bool) -> None:
    f = generate(checkerboard, 2, 2, 2, 2, 1, use_numba=use_numba)
    assert f.data.tolist() == [[0, 0], [0, 0]]
    np.testing.assert_array_equal(f.data, np.rot90(f.data, 2))


@BACKENDS
def test_large_spread_keeps_explicit_saturation(use_numba: bool) -> None:
    # 窓が画像全体を覆っても、反対状態が無いピクセルは ±127 のまま
    f = generate(bytes([255, 255, 0]), 3, 1, 3, 1, 300, use_numba=use_numba)
    assert f.data.tolist() == [[0, 0, 0]]
    g = generate(bytes([255, 255, 255]), 3, 1, 3, 1, 300, use_numba=use_numba)
    assert g.data.tolist() == [[-127, -127, -127]]


@BACKENDS
def test_spread_zero_saturates_everything(square_bitmap: np.ndarray, use_numba: bool) -> None:
    f = generate(square_bitmap, 12, 12, 12, 12, 0, use_numba=use_numba)
    expect = np.where(square_bitmap != 0, -127, 127)
    np.testing.assert_array_equal(f.data, expect)


@BACKENDS
def test_only_far_from_boundary_saturates(square_bitmap: np.ndarray, use_numba: bool) -> None:
    # spread=1: 正方形 [4:8] の周囲 1 px（内外とも）は検出済みで 0、それ以外は状態に応じて ±127
    f = generate(square_bitmap, 12, 12, 12, 12, 1, use_numba=use_numba)
    expect = np.where(square_bitmap != 0, -127, 127)
    expect[3:9, 3:9] = 0
    expect[5:7, 5:7] = -127
    np.testing.assert_array_equal(f.data, expect)
    np.testing.assert_array_equal(f.inside_mask(), expect < 0)


@BACKENDS
def test_window_is_clipped_not_wrapped(use_numba: bool) -> None:
    # 右端の set は左端からは窓外。折り返すなら左端が検出してしまう。
    src = bytes([0, 0, 0, 0, 255])
    f = generate(src, 5, 1, 5, 1, 2, use_numba=use_numba)
    assert f.data[0, 0] == 127
    assert f.data[0, 1] == 127
    assert f.data[0, 2] == 0
    assert f.data[0, 3] == 0
    assert f.data[0, 4] == 0


@BACKENDS
def test_downsampling_uses_nearest_pixel(use_numba: bool) -> None:
    # x_map = [0, 2]
    f = generate(bytes([0, 0, 255, 255]), 4, 1, 2, 1, 1, use_numba=use_numba)
    assert f.data.tolist() == [[127, 0]]


@BACKENDS
def test_large_upscale_stays_in_bounds(use_numba: bool) -> None:
    f = generate(bytes([255]), 1, 1, 3, 3, 3, use_numba=use_numba)
    assert np.all(f.data == -127)


def test_resample_identity() -> None:
    for n in (1, 2, 7, 64, 513):
        np.testing.assert_array_equal(resample_indices(n, n), np.arange(n))


def test_resample_rounds_half_away_from_zero() -> None:
    # 1 * 3 / 2 = 1.5 -> 2、1 * 5 / 2 = 2.5 -> 3（偶数丸めなら 2）
    assert resample_indices(3, 2).tolist() == [0, 2]
    assert resample_indices(5, 2).tolist() == [0, 3]
    assert resample_indices(8, 4).tolist() == [0, 2, 4, 6]


def test_resample_upscale_is_clamped() -> None:
    assert resample_indices(1, 3).tolist() == [0, 0, 0]
    assert resample_indices(2, 5).tolist() == [0, 0, 1, 1, 1]


def test_result_does_not_alias_source(square_bitmap: np.ndarray) -> None:
    f = generate(square_bitmap, 12, 12, 12, 12, 1)
    square_bitmap[:] = 0
    assert f.data.min() < 0
    assert f.data.flags.writeable is False
