"""
どこで: `dfield.cli`（`python -m dfield` / `dfield` コマンド）。
何を: 生ビットマップから `.dfield` を生成する `generate` と、内容を表示する `info` を提供する。
なぜ: アセットのオフライン変換をスクリプトから 1 コマンドで行えるようにするため。

失敗時はエラー種別をログへ出し、終了コード 1 で当該操作のみを中断する。
"""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from common import settings
from common.logging import setup_default_logging

from .codec import load, load_raw, save
from .errors import DFieldError
from .generator import generate

logger = logging.getLogger(__name__)


def _parse_size(text: str) -> tuple[int, int]:
    """`WxH` 形式の寸法を (width, height) へ変換する。"""
    try:
        w_s, h_s = text.lower().split("x", 1)
        return int(w_s), int(h_s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}") from None


def _cmd_generate(args: argparse.Namespace) -> int:
    in_w, in_h = args.input_size
    out_w, out_h = args.output_size if args.output_size is not None else args.input_size
    spread = args.spread if args.spread is not None else settings.get().DEFAULT_SPREAD

    bitmap = load_raw(args.raw, in_w, in_h)
    logger.debug(
        "generate %s: %dx%d -> %dx%d spread=%d", args.raw, in_w, in_h, out_w, out_h, spread
    )
    field = generate(bitmap, in_w, in_h, out_w, out_h, spread)
    save(args.out, field)
    logger.info("wrote %s (%dx%d)", args.out, field.width, field.height)
    print(args.out)
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    field = load(args.path)
    data = field.data
    print(f"{args.path}: {field.width}x{field.height} min={int(data.min())} max={int(data.max())}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dfield", description="Signed distance field tools")
    p.add_argument("--log-level", default=None, help="logging level (default: DFIELD_LOG_LEVEL)")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="generate a .dfield from a raw 8-bit bitmap")
    g.add_argument("raw", help="raw bitmap, one byte per pixel, no header")
    g.add_argument("out", help="output .dfield path")
    g.add_argument("--input-size", type=_parse_size, required=True, metavar="WxH")
    g.add_argument("--output-size", type=_parse_size, default=None, metavar="WxH")
    g.add_argument("--spread", type=int, default=None, help="search radius in input pixels")
    g.set_defaults(func=_cmd_generate)

    i = sub.add_parser("info", help="print the dimensions and sample range of a .dfield")
    i.add_argument("path")
    i.set_defaults(func=_cmd_info)
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_default_logging(args.log_level or settings.get().LOG_LEVEL)
    try:
        return int(args.func(args))
    except DFieldError as e:
        logger.error("[%s] %s: %s", args.command, e.kind_name, e)
        return 1


__all__ = ["main", "build_parser"]
