import numpy as np
import math
from fractions import Fraction
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.brands import get_brand_palette
from beadkit.color_math import rgb_to_lab
from beadkit.config import Config
from beadkit.dither import FS_WEIGHTS, DitherEngine, floyd_steinberg
from beadkit.palette import Palette, PaletteColor

BLACK_WHITE = Palette([
    PaletteColor("k", "Black", "K", (0, 0, 0)),
    PaletteColor("w", "White", "W", (255, 255, 255)),
])


def _palette_rgbs(palette):
    return {color.rgb for color in palette}


def test_weights_sum_to_one():
    assert sum(weight for _, _, weight in FS_WEIGHTS) == Fraction(1)
    assert [(dx, dy) for dx, dy, _ in FS_WEIGHTS] == [(1, 0), (-1, 1), (0, 1), (1, 1)]


def test_output_uses_palette_colors_only_and_input_is_untouched():
    rng = np.random.default_rng(5)
    raster = rng.integers(0, 256, size=(16, 12, 3)).astype(np.uint8)
    original = raster.copy()
    palette = get_brand_palette("hama")

    out = floyd_steinberg(raster, palette)

    assert out.shape == (16, 12, 3)
    assert out.dtype == np.uint8
    assert np.array_equal(raster, original)
    assert {tuple(int(v) for v in px) for px in out.reshape(-1, 3)} <= _palette_rgbs(palette)


def test_palette_colored_image_passes_through():
    raster = np.zeros((3, 4, 3), dtype=np.uint8)
    raster[:, :2] = (255, 255, 255)
    out = floyd_steinberg(raster, BLACK_WHITE)
    assert np.array_equal(out, raster)


def test_error_is_carried_to_the_east_neighbour():
    raster = np.full((1, 2, 3), 128, dtype=np.uint8)
    out = floyd_steinberg(raster, BLACK_WHITE)
    # 128 snaps to white; the -127 error pulls the next pixel down to black
    assert tuple(out[0, 0]) == (255, 255, 255)
    assert tuple(out[0, 1]) == (0, 0, 0)


def test_mid_gray_dithers_to_a_mix():
    raster = np.full((8, 8, 3), 128, dtype=np.uint8)
    out = floyd_steinberg(raster, BLACK_WHITE)
    whites = int((out[:, :, 0] == 255).sum())
    assert 16 <= whites <= 48


def test_single_pixel_and_rgba_input():
    rgba = np.array([[[250, 5, 5, 0]]], dtype=np.uint8)
    out = floyd_steinberg(rgba, BLACK_WHITE)
    assert out.shape == (1, 1, 3)


def test_empty_palette_fills_with_sentinel():
    raster = np.zeros((2, 3, 3), dtype=np.uint8)
    out = floyd_steinberg(raster, Palette([]))
    assert (out == 128).all()


def test_dither_engine_respects_config():
    config = Config()
    raster = np.full((2, 2, 3), 100, dtype=np.uint8)

    engine = DitherEngine(config)
    assert not engine.enabled
    assert np.array_equal(engine.apply(raster, BLACK_WHITE), raster)

    config.dither.enabled = True
    assert engine.enabled
    dithered = engine.apply(raster, BLACK_WHITE)
    assert {tuple(int(v) for v in px) for px in dithered.reshape(-1, 3)} <= _palette_rgbs(BLACK_WHITE)

    info = engine.get_dithering_info()
    assert info["enabled"] is True
    assert info["metric"] == "lab"


def test_dither_engine_uses_perceptual_metric_for_rgb_config():
    config = Config()
    config.matching.metric = "rgb"
    assert DitherEngine(config).matcher.metric == "lab"


def _reference_dither(raster, palette):
    """Plain per-pixel Floyd-Steinberg with a strict first-minimum palette scan."""
    h, w = len(raster), len(raster[0])
    work = [[[float(v) for v in raster[y][x][:3]] for x in range(w)] for y in range(h)]
    labs = [tuple(float(v) for v in lab) for lab in palette.lab_array]
    shares = [(1, 0, 7 / 16), (-1, 1, 3 / 16), (0, 1, 5 / 16), (1, 1, 1 / 16)]
    out = [[None] * w for _ in range(h)]

    for y in range(h):
        for x in range(w):
            old = work[y][x]
            lab = rgb_to_lab(old)
            best, best_dist = 0, None
            for i, (pl, pa, pb) in enumerate(labs):
                d0, d1, d2 = lab[0] - pl, lab[1] - pa, lab[2] - pb
                dist = math.sqrt(d0 * d0 + d1 * d1 + d2 * d2)
                if best_dist is None or dist < best_dist:
                    best, best_dist = i, dist
            new = palette[best].rgb
            out[y][x] = new
            err = [old[c] - new[c] for c in range(3)]
            for dx, dy, share in shares:
                nx, ny = x + dx, y + dy
                if 0 <= nx < w and 0 <= ny < h:
                    work[ny][nx] = [
                        float(round(min(max(work[ny][nx][c] + err[c] * share, 0.0), 255.0)))
                        for c in range(3)
                    ]
    return np.array(out, dtype=np.uint8)


def test_matches_reference_loop_on_random_raster():
    rng = np.random.default_rng(21)
    raster = rng.integers(0, 256, size=(9, 7, 3)).astype(np.uint8)
    palette = get_brand_palette("hama")
    expected = _reference_dither(raster.tolist(), palette)
    assert np.array_equal(floyd_steinberg(raster, palette), expected)


def test_matches_reference_loop_with_clamping():
    # Saturated values against a two-color palette push neighbours past 0 and 255
    rng = np.random.default_rng(8)
    raster = rng.choice(np.array([0, 40, 128, 215, 255], dtype=np.uint8), size=(6, 6, 3))
    expected = _reference_dither(raster.tolist(), BLACK_WHITE)
    assert np.array_equal(floyd_steinberg(raster, BLACK_WHITE), expected)


def test_two_by_two_worked_example():
    # 128 -> white: 200 becomes 144, 60 becomes 20, 100 becomes 92.
    # 144 -> white: its south-west share takes 20 to 0, its south share takes 92 to 57.
    raster = np.array([
        [[128] * 3, [200] * 3],
        [[60] * 3, [100] * 3],
    ], dtype=np.uint8)
    out = floyd_steinberg(raster, BLACK_WHITE)
    assert out[:, :, 0].tolist() == [[255, 255], [0, 0]]
    assert np.array_equal(out, _reference_dither(raster.tolist(), BLACK_WHITE))
