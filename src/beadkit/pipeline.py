"""
Raster to bead pattern pipeline.
Runs optional dithering, grid sampling and palette matching to build a Grid.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .brands import get_brand_palette
from .config import Config
from .dither import DitherEngine
from .editor import PatternEditor
from .grid import Cell, Grid
from .history import HistoryManager
from .matcher import ColorMatcher, MatchResult
from .palette import BEAD_SIZE_SPECS, Palette, load_palette_csv
from .sampler import GridSampler, to_rgb_array
from .stats import ColorCount, color_statistics, match_accuracy

# A4 page in pixels at 96 DPI
A4_SIZE_PX = (794, 1123)


def derive_grid_size(raster_w: int, raster_h: int, bead_size: str = "regular",
                     width: Optional[int] = None,
                     height: Optional[int] = None) -> Tuple[int, int]:
    """
    Resolve target grid dimensions.

    Explicit dimensions win; a missing side is the raster size divided by the
    bead diameter, never less than one cell.
    """
    if raster_w <= 0 or raster_h <= 0:
        raise ValueError(f"Raster dimensions must be positive, got {raster_w}x{raster_h}")
    if bead_size not in BEAD_SIZE_SPECS:
        raise ValueError(f"Unknown bead size '{bead_size}'. Available: {list(BEAD_SIZE_SPECS)}")

    diameter = BEAD_SIZE_SPECS[bead_size]
    grid_w = width or max(1, int(raster_w // diameter))
    grid_h = height or max(1, int(raster_h // diameter))
    return grid_w, grid_h


def calculate_grid_size(paper_width: float, paper_height: float,
                        bead_size: str, margin: float = 20) -> Tuple[int, int]:
    """Rows and columns of beads that fit on a sheet."""
    diameter = BEAD_SIZE_SPECS[bead_size]
    cols = int((paper_width - margin * 2) // diameter)
    rows = int((paper_height - margin * 2) // diameter)
    return rows, cols


def calculate_a4_grid_size(bead_size: str, margin: float = 20) -> Tuple[int, int]:
    return calculate_grid_size(A4_SIZE_PX[0], A4_SIZE_PX[1], bead_size, margin)


def calculate_total_pages(total_rows: int, total_cols: int,
                          rows_per_page: int, cols_per_page: int) -> int:
    """Pages needed to tile the whole pattern."""
    if rows_per_page < 1 or cols_per_page < 1:
        raise ValueError("Page must hold at least one row and one column")
    return math.ceil(total_rows / rows_per_page) * math.ceil(total_cols / cols_per_page)


@dataclass
class PatternResult:
    """Finalized grid plus per-cell match diagnostics."""
    grid: Grid
    matches: List[List[MatchResult]]
    grid_width: int
    grid_height: int
    dithered: bool
    total_pages: int
    palette: Palette
    metadata: Dict = field(default_factory=dict)

    @property
    def statistics(self) -> List[ColorCount]:
        return color_statistics(self.grid)

    def match_at(self, row: int, col: int) -> MatchResult:
        return self.matches[row][col]

    def accuracy(self) -> Dict[str, float]:
        return match_accuracy([m for row in self.matches for m in row])


def load_configured_palette(config: Config) -> Palette:
    """Palette from the configured CSV file, else the configured brand."""
    if config.palette.csv_file:
        return load_palette_csv(config.palette.csv_file, brand=config.palette.brand)
    return get_brand_palette(config.palette.brand)


class PatternPipeline:
    """Converts decoded rasters into bead pattern grids."""

    def __init__(self, config: Optional[Config] = None, palette: Optional[Palette] = None):
        """
        Args:
            config: Pipeline configuration, defaults to Config()
            palette: Active palette; loaded from the configuration when omitted
        """
        self.config = config or Config()
        self.palette = palette if palette is not None else load_configured_palette(self.config)
        self.matcher = ColorMatcher(self.config.matching.metric)
        self.sampler = GridSampler(self.config.sampling.mode, self.config.sampling.edge_weight)
        self.dither_engine = DitherEngine(self.config)

    def build_grid(self, sampled: np.ndarray) -> Tuple[Grid, List[List[MatchResult]]]:
        """Match every sampled cell color against the palette."""
        rows, cols = sampled.shape[:2]
        if len(self.palette) == 0:
            results = self.matcher.match_colors(sampled.reshape(-1, 3), self.palette)
        else:
            indices, distances = self.matcher.nearest_indices(sampled, self.palette)
            results = [
                MatchResult(self.palette[int(i)], float(d))
                for i, d in zip(indices.ravel(), distances.ravel())
            ]

        cells = []
        matches = []
        for r in range(rows):
            cell_row = []
            match_row = results[r * cols:(r + 1) * cols]
            for c, match in enumerate(match_row):
                source = tuple(int(v) for v in sampled[r, c])
                cell_row.append(Cell(r, c, match.color, source))
            cells.append(cell_row)
            matches.append(match_row)
        return Grid(cells), matches

    def run(self, raster) -> PatternResult:
        """
        Convert a raster into a finalized pattern.

        Args:
            raster: Decoded image, (H, W, 3) or (H, W, 4)

        Returns:
            PatternResult with the grid and match diagnostics
        """
        rgb = to_rgb_array(raster)
        h, w = rgb.shape[:2]
        grid_w, grid_h = derive_grid_size(
            w, h, self.config.grid.bead_size,
            self.config.grid.width, self.config.grid.height
        )

        print(f"Creating {grid_w}x{grid_h} bead pattern from {w}x{h} image "
              f"({len(self.palette)} {self.palette.brand or 'custom'} colors)...")

        source = rgb
        if self.dither_engine.enabled:
            print("  Applying Floyd-Steinberg dithering...")
            source = self.dither_engine.apply(rgb, self.palette)

        sampled = self.sampler.sample(source, grid_w, grid_h)
        grid, matches = self.build_grid(sampled)

        rows_per_page, cols_per_page = calculate_a4_grid_size(
            self.config.grid.bead_size, self.config.export.page_margin
        )
        total_pages = calculate_total_pages(grid_h, grid_w, rows_per_page, cols_per_page)

        result = PatternResult(
            grid=grid,
            matches=matches,
            grid_width=grid_w,
            grid_height=grid_h,
            dithered=self.dither_engine.enabled,
            total_pages=total_pages,
            palette=self.palette,
            metadata={
                'source_size': (w, h),
                'bead_size': self.config.grid.bead_size,
                'brand': self.palette.brand,
                'metric': self.matcher.metric,
                'sampling_mode': self.sampler.mode,
            },
        )

        print(f"[OK] Pattern created: {grid.total_cells:,} cells, "
              f"{len(result.statistics)} colors used, {total_pages} page(s)")
        return result

    def create_editor(self, result: PatternResult) -> PatternEditor:
        """
        Start an editing session on a generated pattern.

        The history is sized from the configuration and already holds the
        generated grid, so every later edit can be undone back to it.
        """
        editor = PatternEditor(result.grid, HistoryManager(self.config.history.capacity))
        editor.commit("generated")
        return editor


def generate_pattern(raster, palette: Palette, grid_width: int, grid_height: int,
                     dithering: bool = False, metric: str = "lab",
                     sampling_mode: str = "plain", edge_weight: float = 2.0) -> PatternResult:
    """Convenience wrapper: run the pipeline with explicit settings."""
    config = Config()
    config.grid.width = grid_width
    config.grid.height = grid_height
    config.dither.enabled = dithering
    config.matching.metric = metric
    config.sampling.mode = sampling_mode
    config.sampling.edge_weight = edge_weight
    config.validate()
    return PatternPipeline(config, palette).run(raster)

