"""Image to Game Boy 2bpp tile converter.

This module converts images drawn with a four-color palette into packed
2bpp tile data. It can be invoked through the CLI (``c2bpp``) or imported to
convert a single image into bytes.
"""

from .converter import (
    DEFAULT_PALETTE,
    ConversionError,
    ImageDecodeError,
    ImageLoadError,
    Intensity,
    InvalidDimensionsError,
    OutputWriteError,
    Palette,
    PaletteLoadError,
    PixelNotInPaletteError,
    Tile,
    classify,
    convert_image_to_2bpp,
    convert_png_to_2bpp,
    encode_tile,
    extract_tiles,
    load_palette,
)

__all__ = [
    "DEFAULT_PALETTE",
    "ConversionError",
    "ImageDecodeError",
    "ImageLoadError",
    "Intensity",
    "InvalidDimensionsError",
    "OutputWriteError",
    "Palette",
    "PaletteLoadError",
    "PixelNotInPaletteError",
    "Tile",
    "classify",
    "convert_image_to_2bpp",
    "convert_png_to_2bpp",
    "encode_tile",
    "extract_tiles",
    "load_palette",
]
