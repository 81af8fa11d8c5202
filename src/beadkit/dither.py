"""
Palette-aware Floyd-Steinberg error diffusion, applied to the full raster
before grid sampling.
"""

from fractions import Fraction
from typing import Dict, Optional, Tuple

import numpy as np

from .config import Config
from .matcher import ColorMatcher
from .palette import Palette
from .sampler import to_rgb_array

# (dx, dy, weight) in the order error is handed out
FS_WEIGHTS: Tuple[Tuple[int, int, Fraction], ...] = (
    (1, 0, Fraction(7, 16)),
    (-1, 1, Fraction(3, 16)),
    (0, 1, Fraction(5, 16)),
    (1, 1, Fraction(1, 16)),
)


def floyd_steinberg(raster, palette: Palette,
                    matcher: Optional[ColorMatcher] = None) -> np.ndarray:
    """
    Dither a raster onto a palette.

    Pixels are visited row-major, top-to-bottom and left-to-right; each one is
    snapped to its nearest palette color and the signed per-channel error is
    pushed to the east, south-west, south and south-east neighbours, clamping
    each neighbour to [0, 255] as soon as it receives its share.

    Args:
        raster: Decoded image, (H, W, 3) or (H, W, 4); not modified
        palette: Target palette
        matcher: Quantisation step, defaults to the precise Lab matcher

    Returns:
        New uint8 raster shaped (H, W, 3) holding palette colors only
    """
    matcher = matcher or ColorMatcher("lab")
    work = np.rint(np.clip(to_rgb_array(raster), 0, 255))
    h, w = work.shape[:2]

    if len(palette) == 0:
        # Every pixel snaps to the sentinel with no error to carry
        sentinel = matcher.find_closest((0, 0, 0), palette).color.rgb
        out = np.empty((h, w, 3), dtype=np.uint8)
        out[:, :] = sentinel
        return out

    weights = [(dx, dy, float(weight)) for dx, dy, weight in FS_WEIGHTS]
    matched: Dict[Tuple[int, int, int], Tuple[int, int, int]] = {}
    out = np.empty((h, w, 3), dtype=np.uint8)

    for y in range(h):
        for x in range(w):
            old = work[y, x]
            key = (int(old[0]), int(old[1]), int(old[2]))
            new = matched.get(key)
            if new is None:
                new = matcher.find_closest(key, palette).color.rgb
                matched[key] = new

            out[y, x] = new
            err = old - np.asarray(new, dtype=np.float64)
            if not err.any():
                continue

            for dx, dy, weight in weights:
                nx, ny = x + dx, y + dy
                if 0 <= nx < w and 0 <= ny < h:
                    # Working pixels behave like a clamped byte buffer
                    work[ny, nx] = np.rint(np.clip(work[ny, nx] + err * weight, 0, 255))

    return out


class DitherEngine:
    """Applies error diffusion according to the dithering configuration."""

    def __init__(self, config: Config, matcher: Optional[ColorMatcher] = None):
        """Initialize dither engine with configuration."""
        self.config = config
        # Quantisation always uses a perceptual metric
        metric = config.matching.metric
        self.matcher = matcher or ColorMatcher(metric if metric != "rgb" else "lab")

    @property
    def enabled(self) -> bool:
        return self.config.dither.enabled

    def apply(self, raster, palette: Palette) -> np.ndarray:
        """
        Dither the raster when enabled, otherwise return its RGB channels.

        Args:
            raster: Decoded image
            palette: Active palette

        Returns:
            uint8 raster shaped (H, W, 3)
        """
        if not self.enabled:
            return to_rgb_array(raster).astype(np.uint8)
        return floyd_steinberg(raster, palette, self.matcher)

    def get_dithering_info(self) -> dict:
        """Get information about current dithering configuration."""
        return {
            'enabled': self.enabled,
            'metric': self.matcher.metric,
            'weights': [(dx, dy, str(weight)) for dx, dy, weight in FS_WEIGHTS],
            'description': self._get_dither_description(),
        }

    def _get_dither_description(self) -> str:
        """Get human-readable description of dithering mode."""
        if not self.enabled:
            return "No dithering - cells average the source pixels directly"
        return "Floyd-Steinberg error diffusion onto the bead palette"
