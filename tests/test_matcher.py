import numpy as np
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.brands import get_brand_palette
from beadkit.matcher import SENTINEL_COLOR, ColorMatcher, find_closest, match_colors
from beadkit.palette import Palette, PaletteColor


def _palette(*entries):
    return Palette([PaletteColor(cid, cid.upper(), cid, rgb) for cid, rgb in entries])


def test_exact_palette_color_matches_with_zero_distance():
    palette = get_brand_palette("hama")
    for metric in ("rgb", "lab", "ciede2000"):
        matcher = ColorMatcher(metric)
        for color in palette:
            result = matcher.find_closest(color.rgb, palette)
            assert result.color is color
            assert result.distance == 0.0


def test_closest_color_is_selected():
    palette = _palette(("r", (255, 0, 0)), ("b", (0, 0, 255)))
    assert find_closest((250, 10, 10), palette).color.id == "r"
    assert find_closest((10, 10, 240), palette, precise=False).color.id == "b"


def test_tie_resolves_to_lowest_palette_index():
    palette = _palette(("x", (0, 0, 0)), ("y", (0, 0, 0)))
    for precise in (True, False):
        result = find_closest((10, 10, 10), palette, precise=precise)
        assert result.color.id == "x"


def test_empty_palette_returns_sentinel():
    empty = Palette([])
    result = find_closest((12, 34, 56), empty)
    assert result.color == SENTINEL_COLOR
    assert result.color.id == "default"
    assert result.color.rgb == (128, 128, 128)
    assert result.distance == 0.0
    assert [m.color.id for m in match_colors([(1, 2, 3), (4, 5, 6)], empty)] == ["default", "default"]


def test_nearest_indices_rejects_empty_palette():
    with pytest.raises(ValueError):
        ColorMatcher().nearest_indices(np.zeros((2, 3)), Palette([]))


def test_batch_matches_equal_single_matches():
    palette = get_brand_palette("perler")
    rng = np.random.default_rng(7)
    targets = [tuple(int(v) for v in row) for row in rng.integers(0, 256, size=(300, 3))]

    for metric in ("rgb", "lab", "ciede2000"):
        matcher = ColorMatcher(metric)
        batch = matcher.match_colors(targets, palette)
        single = [matcher.find_closest(t, palette) for t in targets]
        assert [m.color.id for m in batch] == [m.color.id for m in single]
        assert [m.distance for m in batch] == [m.distance for m in single]


def test_match_colors_of_nothing_is_empty():
    assert match_colors([], get_brand_palette("hama")) == []


def test_nearest_indices_keeps_leading_shape():
    palette = _palette(("k", (0, 0, 0)), ("w", (255, 255, 255)))
    targets = np.array([[[0, 0, 0], [250, 250, 250]], [[240, 255, 240], [5, 5, 5]]])
    indices, distances = ColorMatcher("lab").nearest_indices(targets, palette)
    assert indices.shape == (2, 2)
    assert indices.tolist() == [[0, 1], [1, 0]]
    assert distances[0, 0] == 0.0


def test_optimize_match_threshold():
    palette = _palette(("r", (255, 0, 0)))
    matcher = ColorMatcher("lab")
    assert matcher.optimize_match((254, 0, 0), palette).id == "r"
    assert matcher.optimize_match((0, 0, 255), palette) is None


def test_precise_flag_maps_to_metric():
    assert ColorMatcher.from_precise(True).metric == "lab"
    assert ColorMatcher.from_precise(False).metric == "rgb"
    assert not ColorMatcher("rgb").is_precise


def test_unknown_metric_is_rejected():
    with pytest.raises(ValueError):
        ColorMatcher("cie94")


def test_borderline_hama_matches():
    palette = get_brand_palette("hama")
    matcher = ColorMatcher("lab")
    assert matcher.find_closest((2, 166, 166), palette).color.id == "hama-47"
    assert matcher.find_closest((203, 104, 198), palette).color.id == "hama-07"
