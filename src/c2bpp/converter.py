"""Core conversion logic for the 2bpp tile converter."""

# Reference: Game Boy 2bpp tile format
# - A tile is 8x8 dots, each dot one of four shades (2 bits per dot).
# - A tile is stored as 16 bytes: 8 lines x (plane0 byte, plane1 byte).
# - Within a line, the dot's low bit goes to plane0 and its high bit to plane1.
# Shade     | plane0 | plane1
# ----------|--------|-------
# Lightest  |   0    |   0
# Light     |   1    |   0
# Dark      |   0    |   1
# Darkest   |   1    |   1

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields
from enum import IntEnum
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

Color = Tuple[int, int, int]

TILE_SIZE = 8
TILE_BYTES = 16
OUTPUT_SUFFIX = ".2bpp"


class Intensity(IntEnum):
    """Four shades ordered by increasing darkness weight."""

    LIGHTEST = 0
    LIGHT = 1
    DARK = 2
    DARKEST = 3


# (plane0 bit, plane1 bit) for each shade
PLANE_BITS: Dict[Intensity, Tuple[int, int]] = {
    Intensity.LIGHTEST: (0, 0),
    Intensity.LIGHT: (1, 0),
    Intensity.DARK: (0, 1),
    Intensity.DARKEST: (1, 1),
}


class ConversionError(Exception):
    """Custom exception for conversion errors."""


class InvalidDimensionsError(ConversionError):
    """Raised when the image cannot be split into whole 8x8 tiles."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        super().__init__(
            f"Image dimensions {width}x{height} are not valid for conversion, "
            f"both must be divisible by {TILE_SIZE}"
        )


class PixelNotInPaletteError(ConversionError):
    """Raised when a pixel matches none of the four palette colors."""

    def __init__(self, rgb: Color, x: int | None = None, y: int | None = None):
        self.rgb = rgb
        self.x = x
        self.y = y
        where = f" at ({x}, {y})" if x is not None and y is not None else ""
        super().__init__(f"Pixel{where} was not in palette: {format_color(rgb)}")


class _PathError(ConversionError):
    def __init__(self, message: str, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        super().__init__(f"{message}: {path}" if path is not None else message)


class PaletteLoadError(_PathError):
    """Raised when a palette file is missing, unreadable or malformed."""


class ImageLoadError(_PathError):
    """Raised when the input image cannot be opened."""


class ImageDecodeError(_PathError):
    """Raised when the input image cannot be decoded."""


class OutputWriteError(_PathError):
    """Raised when the converted data cannot be written."""


@dataclass(frozen=True)
class Palette:
    """Four RGB colors, one per shade."""

    lightest: Color
    light: Color
    dark: Color
    darkest: Color

    def entries(self) -> Iterator[Tuple[Intensity, Color]]:
        """Yield ``(Intensity, Color)`` pairs from lightest to darkest."""
        for intensity, field_ in zip(Intensity, fields(self)):
            yield intensity, getattr(self, field_.name)


# Aseprite's Game Boy palette
DEFAULT_PALETTE = Palette(
    lightest=(0x9B, 0xBC, 0x0F),
    light=(0x8B, 0xAC, 0x0F),
    dark=(0x30, 0x62, 0x30),
    darkest=(0x0F, 0x38, 0x0F),
)

PALETTE_KEYS = tuple(field_.name for field_ in fields(Palette))


@dataclass(frozen=True)
class Tile:
    """8x8 grid of shades.

    ``data[i][j]`` holds the dot at horizontal offset ``i`` and vertical
    offset ``j`` inside the tile. :func:`encode_tile` walks the first axis as
    its line index, so the output is the tile read column by column.
    """

    data: Tuple[Tuple[Intensity, ...], ...]

    def __post_init__(self) -> None:
        if len(self.data) != TILE_SIZE or any(len(line) != TILE_SIZE for line in self.data):
            raise ValueError(f"Tile data must be {TILE_SIZE}x{TILE_SIZE}")

    @classmethod
    def filled(cls, intensity: Intensity) -> "Tile":
        return cls(tuple((intensity,) * TILE_SIZE for _ in range(TILE_SIZE)))


TileSet = List[Tile]


def format_color(color: Sequence[int]) -> str:
    r, g, b = color[:3]
    return f"#{r:02x}{g:02x}{b:02x}"


def parse_color(text: str) -> Color:
    text = text.strip()
    if text.startswith("#"):
        text = text[1:]
    if "," in text:
        parts = text.split(",")
    else:
        if len(text) != 6:
            raise PaletteLoadError(f"Hex color must have exactly six digits: {text}")
        parts = [text[i : i + 2] for i in range(0, len(text), 2)]
    if len(parts) != 3:
        raise PaletteLoadError("Color must have exactly three components")
    values = []
    for part in parts:
        part = part.strip()
        base = 16 if "," not in text else 10
        try:
            values.append(int(part, base))
        except ValueError as exc:
            raise PaletteLoadError(f"Invalid color component: {part}") from exc
    if any(not (0 <= v <= 255) for v in values):
        raise PaletteLoadError("Color components must be between 0 and 255")
    return tuple(values)  # type: ignore[return-value]


def format_palette_text(palette: Palette) -> str:
    entries = [f"{intensity.name.lower()}: {format_color(color)}" for intensity, color in palette.entries()]
    return ", ".join(entries)


def _coerce_color(name: str, value: object) -> Color:
    if isinstance(value, str):
        try:
            return parse_color(value)
        except PaletteLoadError as exc:
            raise PaletteLoadError(f"Invalid color for '{name}' ({exc})") from exc
    if isinstance(value, (list, tuple)) and len(value) == 3:
        if all(isinstance(v, int) and not isinstance(v, bool) for v in value):
            if all(0 <= v <= 255 for v in value):
                return tuple(value)  # type: ignore[return-value]
            raise PaletteLoadError(f"Color components for '{name}' must be between 0 and 255")
    raise PaletteLoadError(
        f"Color for '{name}' must be three integers or a color string, got {value!r}"
    )


def palette_from_mapping(data: Mapping[str, object]) -> Palette:
    """Build a :class:`Palette` from a mapping with exactly the four shade keys."""

    missing = [key for key in PALETTE_KEYS if key not in data]
    unknown = sorted(key for key in data if key not in PALETTE_KEYS)
    if missing:
        raise PaletteLoadError(f"Palette is missing entries: {', '.join(missing)}")
    if unknown:
        raise PaletteLoadError(f"Palette has unknown entries: {', '.join(unknown)}")
    return Palette(**{key: _coerce_color(key, data[key]) for key in PALETTE_KEYS})


def load_palette(path: str | Path) -> Palette:
    """Load a palette from a TOML file.

    The file holds four keys, ``lightest``, ``light``, ``dark`` and
    ``darkest``. Each value is either an array of three integers
    (``[155, 188, 15]``) or a color string (``"#9bbc0f"``)::

        lightest = [155, 188, 15]
        light = "#8bac0f"
        dark = "48,98,48"
        darkest = [15, 56, 15]
    """

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise PaletteLoadError("Palette file not found", path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise PaletteLoadError("Failed to read palette file", path) from exc

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise PaletteLoadError(f"Invalid TOML ({exc})", path) from exc

    try:
        return palette_from_mapping(data)
    except PaletteLoadError as exc:
        raise PaletteLoadError(str(exc), path) from exc


def classify(
    pixel: Sequence[int],
    palette: Palette = DEFAULT_PALETTE,
    x: int | None = None,
    y: int | None = None,
) -> Intensity:
    """Return the shade whose palette color equals ``pixel`` exactly.

    Entries are compared from lightest to darkest and the first match wins.
    There is no nearest-color fallback: an unknown color raises
    :class:`PixelNotInPaletteError`.
    """

    rgb = tuple(pixel[:3])
    for intensity, color in palette.entries():
        if rgb == tuple(color):
            return intensity
    raise PixelNotInPaletteError(rgb, x, y)  # type: ignore[arg-type]


def check_dimensions(width: int, height: int) -> Tuple[int, int]:
    """Return the tile grid size, rejecting sizes that are not whole tiles."""

    if width < 0 or height < 0 or width % TILE_SIZE != 0 or height % TILE_SIZE != 0:
        raise InvalidDimensionsError(width, height)
    return width // TILE_SIZE, height // TILE_SIZE


def _extract_tile(pixels, origin_x: int, origin_y: int, palette: Palette) -> Tile:
    data = []
    for i in range(TILE_SIZE):
        line = []
        for j in range(TILE_SIZE):
            x = origin_x + i
            y = origin_y + j
            line.append(classify(pixels[x, y], palette, x, y))
        data.append(tuple(line))
    return Tile(tuple(data))


def extract_tiles(image: Image.Image, palette: Palette = DEFAULT_PALETTE) -> TileSet:
    """Split ``image`` into 8x8 tiles of shades.

    Tiles are visited column by column: the outer loop walks tile columns
    left to right and the inner loop walks tile rows top to bottom. The
    first pixel that is not in the palette aborts the whole extraction.
    """

    tiles_x, tiles_y = check_dimensions(*image.size)
    if not tiles_x or not tiles_y:
        return []
    pixels = image.convert("RGB").load()

    tiles: TileSet = []
    for tx in range(tiles_x):
        for ty in range(tiles_y):
            tiles.append(_extract_tile(pixels, tx * TILE_SIZE, ty * TILE_SIZE, palette))
    return tiles


def encode_tile(tile: Tile) -> bytes:
    out = bytearray()
    for j in range(TILE_SIZE):
        plane0 = 0
        plane1 = 0
        for k in range(TILE_SIZE):
            bit0, bit1 = PLANE_BITS[tile.data[j][k]]
            plane0 |= bit0 << k
            plane1 |= bit1 << k
        out.append(plane0)
        out.append(plane1)
    return bytes(out)


def encode_tiles(tiles: Sequence[Tile]) -> bytes:
    return b"".join(encode_tile(tile) for tile in tiles)


def convert_image_to_2bpp(image: Image.Image, palette: Palette | None = None) -> bytes:
    """Convert an in-memory image to 2bpp tile bytes (16 bytes per tile)."""

    palette = palette or DEFAULT_PALETTE
    tiles = extract_tiles(image, palette)
    return encode_tiles(tiles)


def convert_png_to_2bpp(path: str | Path, palette: Palette | None = None) -> bytes:
    path = Path(path)
    try:
        img = Image.open(path)
    except FileNotFoundError as exc:
        raise ImageLoadError("Input file not found", path) from exc
    except UnidentifiedImageError as exc:
        raise ImageDecodeError("Unrecognized image format", path) from exc
    except Image.DecompressionBombError as exc:
        raise ImageDecodeError("Image is too large to decode", path) from exc
    except OSError as exc:
        raise ImageLoadError("Failed to open image", path) from exc

    with img:
        # the header is enough to reject bad sizes before decoding pixels
        check_dimensions(*img.size)
        try:
            rgb = img.convert("RGB")
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise ImageDecodeError("Failed to decode image", path) from exc
        return convert_image_to_2bpp(rgb, palette)


def default_output_path(input_path: str | Path) -> Path:
    return Path(input_path).with_suffix(OUTPUT_SUFFIX)


def write_2bpp(path: str | Path, data: bytes) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise OutputWriteError("Failed to write output", path) from exc
    return path
