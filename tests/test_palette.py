from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from c2bpp.converter import (  # noqa: E402
    DEFAULT_PALETTE,
    Intensity,
    Palette,
    PaletteLoadError,
    format_palette_text,
    load_palette,
    palette_from_mapping,
    parse_color,
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "palette.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_default_palette_values() -> None:
    assert DEFAULT_PALETTE == Palette(
        lightest=(0x9B, 0xBC, 0x0F),
        light=(0x8B, 0xAC, 0x0F),
        dark=(0x30, 0x62, 0x30),
        darkest=(0x0F, 0x38, 0x0F),
    )


def test_entries_follow_intensity_order() -> None:
    entries = list(DEFAULT_PALETTE.entries())
    assert [intensity for intensity, _ in entries] == list(Intensity)
    assert entries[0][1] == DEFAULT_PALETTE.lightest
    assert entries[3][1] == DEFAULT_PALETTE.darkest


def test_palette_is_immutable() -> None:
    with pytest.raises(AttributeError):
        DEFAULT_PALETTE.light = (0, 0, 0)  # type: ignore[misc]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("#9bbc0f", (0x9B, 0xBC, 0x0F)),
        ("0F380F", (0x0F, 0x38, 0x0F)),
        ("48, 98, 48", (48, 98, 48)),
    ],
)
def test_parse_color(text, expected) -> None:
    assert parse_color(text) == expected


@pytest.mark.parametrize("text", ["#fff", "#12345", "1234567", "1,2", "zz0000", "256,0,0"])
def test_parse_color_rejects_bad_input(text) -> None:
    with pytest.raises(PaletteLoadError):
        parse_color(text)


def test_format_palette_text() -> None:
    assert format_palette_text(DEFAULT_PALETTE) == (
        "lightest: #9bbc0f, light: #8bac0f, dark: #306230, darkest: #0f380f"
    )


def test_load_palette_arrays(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "lightest = [255, 255, 255]\n"
        "light = [170, 170, 170]\n"
        "dark = [85, 85, 85]\n"
        "darkest = [0, 0, 0]\n",
    )

    palette = load_palette(path)

    assert palette == Palette((255, 255, 255), (170, 170, 170), (85, 85, 85), (0, 0, 0))


def test_load_palette_mixed_forms(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        'lightest = "#9bbc0f"\n'
        'light = "8bac0f"\n'
        'dark = "48,98,48"\n'
        "darkest = [15, 56, 15]\n",
    )

    assert load_palette(path) == DEFAULT_PALETTE


def test_load_palette_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "nope.toml"
    with pytest.raises(PaletteLoadError) as excinfo:
        load_palette(missing)
    assert excinfo.value.path == missing
    assert "not found" in str(excinfo.value)


def test_load_palette_invalid_toml(tmp_path: Path) -> None:
    path = _write(tmp_path, "lightest = [1, 2, \n")
    with pytest.raises(PaletteLoadError) as excinfo:
        load_palette(path)
    assert excinfo.value.path == path


def test_load_palette_missing_entry(tmp_path: Path) -> None:
    path = _write(tmp_path, "lightest = [1, 2, 3]\nlight = [4, 5, 6]\ndark = [7, 8, 9]\n")
    with pytest.raises(PaletteLoadError, match="darkest"):
        load_palette(path)


@pytest.mark.parametrize(
    "data",
    [
        {"lightest": [1, 2], "light": [4, 5, 6], "dark": [7, 8, 9], "darkest": [0, 0, 0]},
        {"lightest": [1, 2, 300], "light": [4, 5, 6], "dark": [7, 8, 9], "darkest": [0, 0, 0]},
        {"lightest": [1.5, 2, 3], "light": [4, 5, 6], "dark": [7, 8, 9], "darkest": [0, 0, 0]},
        {"lightest": True, "light": [4, 5, 6], "dark": [7, 8, 9], "darkest": [0, 0, 0]},
        {"lightest": "nope", "light": [4, 5, 6], "dark": [7, 8, 9], "darkest": [0, 0, 0]},
        {"lightest": [1, 2, 3], "light": [4, 5, 6], "dark": [7, 8, 9], "darkest": [0, 0, 0], "extra": [1, 1, 1]},
    ],
)
def test_palette_from_mapping_rejects_malformed(data) -> None:
    with pytest.raises(PaletteLoadError):
        palette_from_mapping(data)
