from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.brands import get_brand_info, get_brand_palette, list_brands
from beadkit.palette import Palette, PaletteColor, load_palette_csv


def test_brand_palettes_are_unique_and_shared():
    for brand in list_brands():
        palette = get_brand_palette(brand)
        ids = [color.id for color in palette]
        assert len(ids) == len(set(ids))
        assert all(color.brand == brand for color in palette)
        assert get_brand_palette(brand) is palette


def test_known_hama_colors():
    palette = get_brand_palette("HAMA")
    white = palette.get("hama-01")
    assert white.name == "White"
    assert white.hex == "#ffffff"
    assert palette.by_code("18").name == "Black"
    assert palette.index_of("hama-01") == 0


def test_unknown_brand_is_rejected():
    with pytest.raises(ValueError):
        get_brand_palette("lego")


def test_brand_info_lists_colors():
    info = get_brand_info("nabbi")
    assert info["nabbi"]["color_count"] == len(info["nabbi"]["colors"])


def test_duplicate_ids_are_rejected():
    color = PaletteColor("x", "X", "1", (1, 2, 3))
    with pytest.raises(ValueError):
        Palette([color, PaletteColor("x", "Other", "2", (4, 5, 6))])


def test_invalid_rgb_is_rejected():
    with pytest.raises(ValueError):
        PaletteColor("x", "X", "1", (0, 0, 256))


def test_palette_arrays_are_read_only():
    palette = get_brand_palette("hama")
    assert palette.lab_array.shape == (len(palette), 3)
    with pytest.raises(ValueError):
        palette.rgb_array[0, 0] = 1


def test_load_palette_csv(tmp_path):
    path = tmp_path / "palette.csv"
    path.write_text(
        "id,name,code,r,g,b\n"
        "c1,Coral,C1,255,127,80\n"
        "bad,Broken,B,abc,0,0\n"
        "c2,Navy,C2,0,0,128\n"
        "c1,Again,C3,1,1,1\n",
        encoding="utf-8",
    )
    palette = load_palette_csv(str(path), brand="mine")
    assert [color.id for color in palette] == ["c1", "c2"]
    assert palette.brand == "mine"
    assert palette.get("c2").rgb == (0, 0, 128)


def test_missing_palette_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_palette_csv(str(tmp_path / "missing.csv"))
