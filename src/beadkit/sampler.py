"""
Grid sampling: downsample a raster into one representative color per cell.
"""

from typing import Tuple

import numpy as np
from scipy import ndimage

from .color_math import LUMA_WEIGHTS

SAMPLING_MODES = ("plain", "edge")

EMPTY_CELL_COLOR = (255, 255, 255)


def to_rgb_array(raster) -> np.ndarray:
    """
    Validate a decoded raster and return its RGB channels as float64 (H, W, 3).

    Accepts (H, W, 3) RGB or (H, W, 4) RGBA data in the 0-255 range; alpha is
    ignored.
    """
    arr = np.asarray(raster)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(
            f"Raster must be shaped (height, width, 3|4), got {arr.shape}"
        )
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValueError(f"Raster must not be empty, got {arr.shape[1]}x{arr.shape[0]}")
    return arr[:, :, :3].astype(np.float64)


def raster_from_rgba_bytes(width: int, height: int, data: bytes) -> np.ndarray:
    """Build a (height, width, 4) uint8 raster from flat RGBA bytes."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Raster dimensions must be positive, got {width}x{height}")
    expected = width * height * 4
    if len(data) != expected:
        raise ValueError(f"Expected {expected} RGBA bytes, got {len(data)}")
    return np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4).copy()


def round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def edge_strength_map(rgb: np.ndarray) -> np.ndarray:
    """
    Sobel gradient magnitude of the luma channel.

    Pixels without a full 3x3 neighbourhood (the outer ring) get 0.
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    gray = rgb[:, :, :3] @ LUMA_WEIGHTS
    h, w = gray.shape

    strength = np.zeros((h, w), dtype=np.float64)
    if h < 3 or w < 3:
        return strength

    gx = ndimage.sobel(gray, axis=1)
    gy = ndimage.sobel(gray, axis=0)
    strength[1:-1, 1:-1] = np.hypot(gx, gy)[1:-1, 1:-1]
    return strength


class GridSampler:
    """Partitions a raster into grid cells and averages each cell's color."""

    def __init__(self, mode: str = "plain", edge_weight: float = 2.0):
        """
        Args:
            mode: "plain" arithmetic mean or "edge" Sobel-weighted mean
            edge_weight: Extra weight per unit of normalised edge strength
        """
        if mode not in SAMPLING_MODES:
            raise ValueError(f"Unknown sampling mode '{mode}'. Available: {list(SAMPLING_MODES)}")
        if edge_weight < 0:
            raise ValueError("Edge weight must be non-negative")
        self.mode = mode
        self.edge_weight = edge_weight

    @staticmethod
    def cell_extent(raster_w: int, raster_h: int,
                    grid_width: int, grid_height: int) -> Tuple[int, int]:
        """Pixel size (cell_w, cell_h) of one cell; trailing pixels are dropped."""
        return raster_w // grid_width, raster_h // grid_height

    def sample(self, raster, grid_width: int, grid_height: int) -> np.ndarray:
        """
        Compute the averaged source color of every grid cell.

        Args:
            raster: Decoded image, (H, W, 3) or (H, W, 4)
            grid_width: Number of cells horizontally
            grid_height: Number of cells vertically

        Returns:
            uint8 array shaped (grid_height, grid_width, 3)
        """
        if grid_width < 1 or grid_height < 1:
            raise ValueError(
                f"Grid dimensions must be positive, got {grid_width}x{grid_height}"
            )

        rgb = to_rgb_array(raster)
        h, w = rgb.shape[:2]
        cell_w, cell_h = self.cell_extent(w, h, grid_width, grid_height)

        if cell_w == 0 or cell_h == 0:
            # No pixel falls inside any cell
            result = np.empty((grid_height, grid_width, 3), dtype=np.uint8)
            result[:, :] = EMPTY_CELL_COLOR
            return result

        if self.mode == "edge":
            weights = 1.0 + (edge_strength_map(rgb) / 255.0) * self.edge_weight
        else:
            weights = np.ones((h, w), dtype=np.float64)

        used_h, used_w = grid_height * cell_h, grid_width * cell_w
        blocks = rgb[:used_h, :used_w].reshape(grid_height, cell_h, grid_width, cell_w, 3)
        block_weights = weights[:used_h, :used_w].reshape(grid_height, cell_h, grid_width, cell_w)

        weighted_sum = (blocks * block_weights[..., None]).sum(axis=(1, 3))
        total_weight = block_weights.sum(axis=(1, 3))

        averaged = round_half_up(weighted_sum / total_weight[..., None])
        return np.clip(averaged, 0, 255).astype(np.uint8)

