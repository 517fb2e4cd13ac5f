"""
dfield — 符号付き距離場（SDF）の生成と `.dfield` コンテナ形式。

使用例:
    from dfield import generate, save, load

    field = generate(bitmap, 512, 512, 64, 64, spread=16)
    save("glyph.dfield", field)
    assert load("glyph.dfield") == field
"""

from .codec import load, load_raw, read_field, save, write_field
from .errors import (
    DFieldError,
    DFieldFormatError,
    DFieldIOError,
    FormatErrorKind,
    InvalidInputSizeError,
    InvalidOutputSizeError,
    InvalidSpreadError,
    ParameterError,
)
from .field import DistanceField
from .generator import MAX_SPREAD, generate, resample_indices

__all__ = [
    "DistanceField",
    "generate",
    "resample_indices",
    "MAX_SPREAD",
    "load",
    "save",
    "load_raw",
    "read_field",
    "write_field",
    "DFieldError",
    "DFieldIOError",
    "DFieldFormatError",
    "FormatErrorKind",
    "ParameterError",
    "InvalidInputSizeError",
    "InvalidOutputSizeError",
    "InvalidSpreadError",
]
