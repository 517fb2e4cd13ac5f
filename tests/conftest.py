"""共通フィクスチャ。

- 乱数シード固定
- 小さなビットマップ試料
- 生バイト列から `.dfield` ファイルを作るヘルパ
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import numpy as np
import pytest

from dfield import DistanceField


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture()
def checkerboard() -> bytes:
    # 2x2: 左上と右下が非セット
    return bytes([0, 255, 255, 0])


@pytest.fixture()
def square_bitmap() -> np.ndarray:
    """12x12 の中央に 4x4 の正方形（セット）を置いた uint8 ビットマップ。"""
    img = np.zeros((12, 12), dtype=np.uint8)
    img[4:8, 4:8] = 255
    return img


@pytest.fixture()
def small_field() -> DistanceField:
    data = np.array([[-127, -3, 0], [5, 64, 127]], dtype=np.int8)
    return DistanceField(data)


@pytest.fixture()
def write_raw(tmp_path: Path) -> Callable[[bytes, str], Path]:
    """任意バイト列をファイルへ書き、パスを返す。"""

    def _write(payload: bytes, name: str = "raw.bin") -> Path:
        path = tmp_path / name
        path.write_bytes(payload)
        return path

    return _write
