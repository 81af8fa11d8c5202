"""
Bead color palette management.

A Palette is an ordered, read-only collection of PaletteColor entries that is
unique by id. Order matters: nearest-color ties resolve to the lowest index and
legends iterate in palette order.
"""

import csv
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .color_math import rgb_to_hex, rgb_to_lab

BEAD_BRANDS = ("hama", "perler", "artkal", "nabbi")

# Bead diameters in mm
BEAD_SIZE_SPECS: Dict[str, float] = {
    "mini": 2.6,
    "regular": 5.0,
    "maxi": 10.0,
    "mega": 15.0,
}


@dataclass(frozen=True)
class PaletteColor:
    """Represents a single bead color with all necessary information."""
    id: str
    name: str
    code: str
    rgb: Tuple[int, int, int]
    brand: str = "hama"
    hex: str = field(init=False, compare=False)

    def __post_init__(self):
        """Normalize the RGB triple and derive the hex string."""
        rgb = tuple(int(c) for c in self.rgb)
        if len(rgb) != 3 or any(c < 0 or c > 255 for c in rgb):
            raise ValueError(f"Color {self.id!r} has invalid RGB value {self.rgb!r}")
        object.__setattr__(self, "rgb", rgb)
        object.__setattr__(self, "hex", rgb_to_hex(rgb))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "rgb": list(self.rgb),
            "hex": self.hex,
            "brand": self.brand,
        }


class Palette:
    """Ordered bead palette with precomputed Lab coordinates."""

    def __init__(self, colors: Iterable[PaletteColor], brand: Optional[str] = None):
        """Build a palette, rejecting duplicate ids."""
        self._colors: Tuple[PaletteColor, ...] = tuple(colors)
        self.brand = brand or (self._colors[0].brand if self._colors else None)

        self._by_id: Dict[str, PaletteColor] = {}
        self._index: Dict[str, int] = {}
        for i, color in enumerate(self._colors):
            if color.id in self._by_id:
                raise ValueError(f"Duplicate color id in palette: {color.id!r}")
            self._by_id[color.id] = color
            self._index[color.id] = i

        self._rgb_array = np.array(
            [color.rgb for color in self._colors], dtype=np.float64
        ).reshape(-1, 3)
        self._lab_array = rgb_to_lab(self._rgb_array).reshape(-1, 3)
        self._rgb_array.setflags(write=False)
        self._lab_array.setflags(write=False)

    def __len__(self) -> int:
        return len(self._colors)

    def __iter__(self) -> Iterator[PaletteColor]:
        return iter(self._colors)

    def __getitem__(self, index: int) -> PaletteColor:
        return self._colors[index]

    def __contains__(self, color: object) -> bool:
        return isinstance(color, PaletteColor) and self._by_id.get(color.id) is color

    def __repr__(self) -> str:
        return f"Palette(brand={self.brand!r}, colors={len(self._colors)})"

    @property
    def colors(self) -> Tuple[PaletteColor, ...]:
        return self._colors

    @property
    def rgb_array(self) -> np.ndarray:
        """(N, 3) float64 RGB values in palette order."""
        return self._rgb_array

    @property
    def lab_array(self) -> np.ndarray:
        """(N, 3) float64 Lab values in palette order."""
        return self._lab_array

    def get(self, color_id: str) -> Optional[PaletteColor]:
        """Get color by id."""
        return self._by_id.get(color_id)

    def index_of(self, color_id: str) -> Optional[int]:
        return self._index.get(color_id)

    def by_code(self, code: str) -> Optional[PaletteColor]:
        """Get the first color carrying a palette code."""
        for color in self._colors:
            if color.code == code:
                return color
        return None

    def to_list(self) -> List[dict]:
        return [color.to_dict() for color in self._colors]


def _read_palette_rows(f, brand: str) -> List[PaletteColor]:
    colors = []
    seen = set()
    reader = csv.DictReader(f)
    for row in reader:
        try:
            # Skip empty rows
            if not row or not row.get("id"):
                continue

            color_id = row["id"].strip()
            if color_id in seen:
                print(f"Warning: Skipping duplicate palette id: {color_id}")
                continue

            name = (row.get("name") or "").strip()
            code = (row.get("code") or color_id).strip()
            rgb = (int(row["r"]), int(row["g"]), int(row["b"]))

            colors.append(PaletteColor(color_id, name, code, rgb, brand))
            seen.add(color_id)
        except (ValueError, KeyError, TypeError) as e:
            print(f"Warning: Skipping invalid palette entry: {row} - {e}")
    return colors


def load_palette_csv(csv_path: str, brand: str = "custom") -> Palette:
    """
    Load a palette from a CSV file with ``id,name,code,r,g,b`` columns.

    Args:
        csv_path: Path to the CSV file
        brand: Brand tag stored on every loaded color

    Returns:
        Palette in file order
    """
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Palette file not found: {csv_path}")

    try:
        with open(csv_path, "r", encoding="utf-8", newline="") as f:
            colors = _read_palette_rows(f, brand)
    except UnicodeDecodeError:
        # Fallback to latin-1 encoding if utf-8 fails
        with open(csv_path, "r", encoding="latin-1", newline="") as f:
            colors = _read_palette_rows(f, brand)

    print(f"Loaded {len(colors)} {brand} colors from {csv_path}")
    return Palette(colors, brand=brand)
