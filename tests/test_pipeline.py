import numpy as np
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadkit.config import Config
from beadkit.palette import Palette, PaletteColor
from beadkit.pipeline import (
    PatternPipeline,
    calculate_a4_grid_size,
    calculate_total_pages,
    derive_grid_size,
    generate_pattern,
)
from beadkit.stats import filter_poor_matches, match_accuracy, required_beads

RGB_PALETTE = Palette([
    PaletteColor("r", "Red", "R", (255, 0, 0)),
    PaletteColor("g", "Green", "G", (0, 255, 0)),
    PaletteColor("b", "Blue", "B", (0, 0, 255)),
])


def _solid(height, width, color):
    raster = np.empty((height, width, 3), dtype=np.uint8)
    raster[:, :] = color
    return raster


def test_solid_image_maps_to_single_color():
    result = generate_pattern(_solid(4, 4, (255, 0, 0)), RGB_PALETTE, 2, 2)

    assert result.grid.shape == (2, 2)
    assert result.grid.color_matrix() == [["r", "r"], ["r", "r"]]
    assert all(m.distance == 0.0 for row in result.matches for m in row)
    assert [(c.id, n) for c, n in result.statistics] == [("r", 4)]
    assert not result.dithered


def test_dithering_on_palette_colors_changes_nothing():
    raster = _solid(4, 4, (0, 0, 255))
    raster[:2] = (0, 255, 0)
    result = generate_pattern(raster, RGB_PALETTE, 2, 2, dithering=True)
    assert result.dithered
    assert result.grid.color_matrix() == [["g", "g"], ["b", "b"]]


def test_cells_keep_their_sampled_color():
    raster = _solid(2, 2, (250, 10, 10))
    result = generate_pattern(raster, RGB_PALETTE, 1, 1, metric="rgb")
    cell = result.grid.cell(0, 0)
    assert cell.sampled_color == (250, 10, 10)
    assert cell.matched_color.id == "r"
    assert result.match_at(0, 0).distance > 0


def test_rgba_raster_and_edge_sampling():
    raster = np.zeros((6, 6, 4), dtype=np.uint8)
    raster[:, :, 1] = 255
    raster[:, :, 3] = 255
    result = generate_pattern(raster, RGB_PALETTE, 3, 3, sampling_mode="edge")
    assert {cell.matched_color.id for cell in result.grid} == {"g"}


def test_empty_palette_produces_sentinel_grid():
    result = generate_pattern(_solid(2, 2, (1, 2, 3)), Palette([]), 2, 1)
    assert result.grid.color_matrix() == [["default", "default"]]


def test_pipeline_with_brand_palette_from_config():
    config = Config()
    config.grid.width = 4
    config.grid.height = 3
    config.palette.brand = "artkal"
    result = PatternPipeline(config).run(_solid(9, 8, (255, 255, 255)))
    assert result.palette.brand == "artkal"
    assert (result.grid_width, result.grid_height) == (4, 3)
    assert result.total_pages == 1
    assert result.metadata["metric"] == "lab"


def test_derive_grid_size():
    assert derive_grid_size(100, 50) == (20, 10)
    assert derive_grid_size(100, 50, "maxi") == (10, 5)
    assert derive_grid_size(100, 50, width=7) == (7, 10)
    assert derive_grid_size(3, 3, "mega") == (1, 1)
    with pytest.raises(ValueError):
        derive_grid_size(0, 10)
    with pytest.raises(ValueError):
        derive_grid_size(10, 10, "jumbo")


def test_page_math():
    # (1123 - 40) // 5 rows, (794 - 40) // 5 cols
    assert calculate_a4_grid_size("regular") == (216, 150)
    assert calculate_total_pages(216, 150, 216, 150) == 1
    assert calculate_total_pages(217, 150, 216, 150) == 2
    assert calculate_total_pages(300, 300, 216, 150) == 4
    with pytest.raises(ValueError):
        calculate_total_pages(1, 1, 0, 1)


def test_accuracy_and_filters():
    raster = _solid(2, 4, (255, 0, 0))
    raster[:, 2:] = (200, 60, 60)
    result = generate_pattern(raster, RGB_PALETTE, 2, 1)

    accuracy = result.accuracy()
    assert accuracy["min"] == 0.0
    assert accuracy["max"] > 0.0
    assert accuracy["median"] == accuracy["max"]

    flat = [m for row in result.matches for m in row]
    assert len(filter_poor_matches(flat, max_distance=0.0)) == 1
    assert match_accuracy([]) == {"average": 0.0, "min": 0.0, "max": 0.0, "median": 0.0}

    needed = required_beads(result.statistics, owned_ids=["r"])
    assert needed[0]["color"].id == "r"
    assert needed[0]["needed"] == 2
    assert needed[0]["owned"] == 2


def test_page_margin_from_config_changes_page_count():
    raster = _solid(216, 150, (255, 0, 0))

    config = Config()
    config.grid.width, config.grid.height = 150, 216
    assert PatternPipeline(config, RGB_PALETTE).run(raster).total_pages == 1

    # 100px margins leave room for 184 rows and 118 columns per page
    config.export.page_margin = 100
    assert PatternPipeline(config, RGB_PALETTE).run(raster).total_pages == 4


def test_editor_history_capacity_from_config():
    config = Config()
    config.grid.width, config.grid.height = 2, 2
    config.history.capacity = 3
    pipeline = PatternPipeline(config, RGB_PALETTE)
    result = pipeline.run(_solid(4, 4, (255, 0, 0)))

    editor = pipeline.create_editor(result)
    assert len(editor.history) == 1
    assert editor.history.capacity == 3

    for color in RGB_PALETTE:
        editor.flood_fill(0, 0, color)
        editor.commit(color.id)
    assert len(editor.history) == 3
    assert [s.label for s in editor.history.snapshots] == ["r", "g", "b"]


def test_editor_can_undo_back_to_generated_grid():
    config = Config()
    config.grid.width, config.grid.height = 2, 2
    pipeline = PatternPipeline(config, RGB_PALETTE)
    editor = pipeline.create_editor(pipeline.run(_solid(4, 4, (0, 255, 0))))

    editor.set_cell(1, 1, RGB_PALETTE[0])
    editor.commit("paint")
    assert editor.undo()
    assert editor.grid.color_matrix() == [["g", "g"], ["g", "g"]]
