"""
Nearest palette color matching.

Distances are computed against the palette's precomputed Lab/RGB arrays and the
winner is taken with ``np.argmin``, which returns the first minimum: when two
palette entries are equally close, the lower palette index wins.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .color_math import delta_e76, delta_e2000, rgb_distance, rgb_to_lab
from .palette import Palette, PaletteColor

METRICS = ("rgb", "lab", "ciede2000")

# Returned for an empty palette so interactive matching never crashes
SENTINEL_COLOR = PaletteColor(
    id="default", name="Default", code="00", rgb=(128, 128, 128), brand="hama"
)

# Rows of targets compared at once in batch mode
_BATCH_ROWS = 4096


@dataclass(frozen=True)
class MatchResult:
    """Closest palette color and its metric-dependent distance."""
    color: PaletteColor
    distance: float


class ColorMatcher:
    """Finds the closest palette entry for target RGB colors."""

    def __init__(self, metric: str = "lab"):
        """
        Args:
            metric: "lab" (precise, Euclidean in Lab), "rgb" (Euclidean in RGB)
                or "ciede2000"
        """
        if metric not in METRICS:
            raise ValueError(f"Unknown metric '{metric}'. Available: {list(METRICS)}")
        self.metric = metric

    @classmethod
    def from_precise(cls, precise: bool = True) -> "ColorMatcher":
        return cls("lab" if precise else "rgb")

    @property
    def is_precise(self) -> bool:
        return self.metric != "rgb"

    def __repr__(self) -> str:
        return f"ColorMatcher(metric={self.metric!r})"

    def distance_matrix(self, targets: np.ndarray, palette: Palette) -> np.ndarray:
        """Distances from each target (M, 3) RGB row to every palette entry -> (M, N)."""
        targets = np.asarray(targets, dtype=np.float64).reshape(-1, 3)
        if self.metric == "rgb":
            return rgb_distance(targets[:, None, :], palette.rgb_array[None, :, :])

        target_lab = rgb_to_lab(targets)
        if self.metric == "lab":
            return delta_e76(target_lab[:, None, :], palette.lab_array[None, :, :])
        return delta_e2000(target_lab[:, None, :], palette.lab_array[None, :, :])

    def nearest_indices(self, targets, palette: Palette) -> Tuple[np.ndarray, np.ndarray]:
        """
        Vectorised nearest search.

        Args:
            targets: RGB values shaped (..., 3)
            palette: Non-empty palette

        Returns:
            Tuple of (palette indices, distances), both shaped like targets[..., 0]
        """
        if len(palette) == 0:
            raise ValueError("Cannot compute palette indices for an empty palette")

        targets = np.asarray(targets, dtype=np.float64)
        if targets.shape[-1:] != (3,):
            raise ValueError("Targets must have three channels")
        lead_shape = targets.shape[:-1]
        flat = targets.reshape(-1, 3)

        indices = np.empty(len(flat), dtype=np.intp)
        distances = np.empty(len(flat), dtype=np.float64)
        for start in range(0, len(flat), _BATCH_ROWS):
            chunk = flat[start:start + _BATCH_ROWS]
            dist = self.distance_matrix(chunk, palette)
            best = np.argmin(dist, axis=1)
            indices[start:start + len(chunk)] = best
            distances[start:start + len(chunk)] = dist[np.arange(len(chunk)), best]

        return indices.reshape(lead_shape), distances.reshape(lead_shape)

    def find_closest(self, target: Sequence[float], palette: Palette) -> MatchResult:
        """Find the closest palette color to a single RGB target."""
        if len(palette) == 0:
            return MatchResult(SENTINEL_COLOR, 0.0)

        indices, distances = self.nearest_indices(np.asarray([target]), palette)
        return MatchResult(palette[int(indices[0])], float(distances[0]))

    def match_colors(self, targets: Iterable[Sequence[float]],
                     palette: Palette) -> List[MatchResult]:
        """Match every target independently; equivalent to mapping find_closest."""
        targets = list(targets)
        if not targets:
            return []
        if len(palette) == 0:
            return [MatchResult(SENTINEL_COLOR, 0.0) for _ in targets]

        indices, distances = self.nearest_indices(np.asarray(targets), palette)
        return [
            MatchResult(palette[int(i)], float(d))
            for i, d in zip(indices, distances)
        ]

    def optimize_match(self, target: Sequence[float], palette: Palette,
                       max_distance: float = 10.0) -> Optional[PaletteColor]:
        """Closest color, or None when nothing lies within ``max_distance``."""
        match = self.find_closest(target, palette)
        if match.distance > max_distance:
            return None
        return match.color


def find_closest(target: Sequence[float], palette: Palette,
                 precise: bool = True) -> MatchResult:
    """Find nearest palette color using Lab (precise) or RGB distance."""
    return ColorMatcher.from_precise(precise).find_closest(target, palette)


def match_colors(targets: Iterable[Sequence[float]], palette: Palette,
                 precise: bool = True) -> List[MatchResult]:
    """Batch variant of :func:`find_closest`."""
    return ColorMatcher.from_precise(precise).match_colors(targets, palette)
