"""
Bead Pattern Generator

Converts images into bead craft patterns drawn from a fixed brand palette, with
optional Floyd-Steinberg dithering, edge-aware cell sampling and an editing
session with bounded undo/redo.
"""

__version__ = "1.0.0"
__author__ = "Bead Pattern Generator"

from .config import Config
from .palette import BEAD_SIZE_SPECS, Palette, PaletteColor, load_palette_csv
from .brands import get_brand_palette, list_brands
from .color_math import rgb_to_lab
from .matcher import ColorMatcher, MatchResult, find_closest, match_colors
from .sampler import GridSampler
from .dither import DitherEngine, floyd_steinberg
from .grid import Cell, Grid
from .editor import PatternEditor
from .history import HistoryManager, HistorySnapshot
from .pipeline import PatternPipeline, PatternResult, generate_pattern

__all__ = [
    "Config",
    "BEAD_SIZE_SPECS",
    "Palette",
    "PaletteColor",
    "load_palette_csv",
    "get_brand_palette",
    "list_brands",
    "rgb_to_lab",
    "ColorMatcher",
    "MatchResult",
    "find_closest",
    "match_colors",
    "GridSampler",
    "DitherEngine",
    "floyd_steinberg",
    "Cell",
    "Grid",
    "PatternEditor",
    "HistoryManager",
    "HistorySnapshot",
    "PatternPipeline",
    "PatternResult",
    "generate_pattern",
]
