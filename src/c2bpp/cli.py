"""Command line interface for the 2bpp converter."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .converter import (
    DEFAULT_PALETTE,
    ConversionError,
    convert_png_to_2bpp,
    default_output_path,
    format_palette_text,
    load_palette,
    write_2bpp,
)


def build_parser() -> argparse.ArgumentParser:
    palette_text = format_palette_text(DEFAULT_PALETTE)

    parser = argparse.ArgumentParser(
        prog="c2bpp",
        description=(
            "Convert image files to Game Boy .2bpp tile data.\n"
            "Width and height must be multiples of 8 and every pixel must match one of the\n"
            "four palette colors exactly.\n"
            f"Default palette: {palette_text}"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument("image_path", type=Path, help="Path to the input image")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file name (default: input path with a .2bpp extension)",
    )
    parser.add_argument(
        "-p",
        "--palette",
        type=Path,
        help="palette.toml with lightest/light/dark/darkest entries (default: Game Boy palette)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not report the written file",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        palette = load_palette(args.palette) if args.palette is not None else DEFAULT_PALETTE
        data = convert_png_to_2bpp(args.image_path, palette)
        output = args.output if args.output is not None else default_output_path(args.image_path)
        target = write_2bpp(output, data)
        if not args.quiet:
            print(f"wrote {target}")
        return 0
    except ConversionError as exc:
        print(f"c2bpp has encountered an error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
