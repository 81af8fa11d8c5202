"""
Export manager for bead pattern files (JSON, CSV, PNG).
"""

import csv
import json
import os
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .color_math import text_color_for
from .config import Config
from .grid import Grid
from .palette import Palette
from .pipeline import PatternResult
from .stats import ColorCount, color_statistics, pairs_to_stats, sort_by_usage, stats_to_pairs

GRID_LINE_COLOR = (204, 204, 204)

# Smallest cell that still fits a readable color code
MIN_LABEL_CELL_SIZE = 10


def pattern_to_dict(grid: Grid, palette: Palette, name: str = "pattern",
                    bead_size: str = "regular", total_pages: int = 1,
                    pattern_id: Optional[str] = None,
                    created_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Serializable template; color counts travel as an ordered pair list."""
    created_at = created_at or datetime.now()
    return {
        'id': pattern_id or f"template_{uuid.uuid4().hex[:8]}",
        'name': name,
        'createdAt': created_at.isoformat(),
        'width': grid.cols,
        'height': grid.rows,
        'beadSize': bead_size,
        'brand': palette.brand,
        'grid': grid.to_dict(),
        'colorCounts': stats_to_pairs(color_statistics(grid)),
        'totalPages': total_pages,
    }


def pattern_from_dict(data: Dict[str, Any],
                      palette: Palette) -> Tuple[Grid, List[ColorCount], Dict[str, Any]]:
    """
    Rebuild a template against a palette.

    Returns:
        Tuple of (grid, stored color counts, remaining template fields)
    """
    try:
        grid = Grid.from_dict(data['grid'], palette)
        counts = pairs_to_stats(data.get('colorCounts', []), palette)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed pattern data: {e}") from e

    info = {k: v for k, v in data.items() if k not in ('grid', 'colorCounts')}
    if 'createdAt' in info:
        info['createdAt'] = datetime.fromisoformat(info['createdAt'])
    return grid, counts, info


def export_json(grid: Grid, palette: Palette, path: str, **fields) -> str:
    """Write a pattern template to ``path``."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(pattern_to_dict(grid, palette, **fields), f, indent=2)
    return path


def import_json(path: str, palette: Palette) -> Tuple[Grid, List[ColorCount], Dict[str, Any]]:
    """Read a pattern template written by :func:`export_json`."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Pattern file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse pattern file {path}: {e}") from e
    return pattern_from_dict(data, palette)


def export_inventory_csv(stats: List[ColorCount], path: str) -> str:
    """Bead shopping list, most used color first."""
    total = sum(count for _, count in stats) or 1
    with open(path, 'w', newline='', encoding='utf-8') as csvfile:
        fieldnames = ['code', 'name', 'hex_color', 'bead_count', 'percentage']
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
        writer.writeheader()
        for color, count in sort_by_usage(stats):
            writer.writerow({
                'code': color.code,
                'name': color.name,
                'hex_color': color.hex,
                'bead_count': count,
                'percentage': f"{count / total * 100:.2f}%",
            })
    return path


def render_preview(grid: Grid, cell_size: int = 12, show_grid: bool = True,
                   show_codes: bool = False) -> Image.Image:
    """
    Draw the pattern as square cells on a white background.

    With ``show_codes`` each cell is labelled with its palette code in black or
    white, whichever reads better on the bead color. Cells smaller than
    MIN_LABEL_CELL_SIZE stay unlabelled.
    """
    if cell_size < 1:
        raise ValueError("Cell size must be at least 1")

    image = Image.new('RGB', (grid.cols * cell_size, grid.rows * cell_size), (255, 255, 255))
    draw = ImageDraw.Draw(image)
    for cell in grid:
        x0, y0 = cell.col * cell_size, cell.row * cell_size
        box = [x0, y0, x0 + cell_size - 1, y0 + cell_size - 1]
        outline = GRID_LINE_COLOR if show_grid and cell_size > 2 else None
        draw.rectangle(box, fill=cell.rgb, outline=outline)

    if show_codes and cell_size >= MIN_LABEL_CELL_SIZE:
        font = ImageFont.load_default()
        for cell in grid:
            left, top, right, bottom = draw.textbbox((0, 0), cell.matched_color.code, font=font)
            x = cell.col * cell_size + (cell_size - (right - left)) // 2 - left
            y = cell.row * cell_size + (cell_size - (bottom - top)) // 2 - top
            draw.text((x, y), cell.matched_color.code,
                      fill=text_color_for(cell.rgb), font=font)
    return image


class ExportManager:
    """Writes every pattern output into the configured directory."""

    def __init__(self, config: Config):
        """Initialize export manager with configuration."""
        self.config = config
        self.output_dir = config.output_dir
        os.makedirs(self.output_dir, exist_ok=True)

    def export_pattern(self, result: PatternResult, name: str = "pattern") -> Dict[str, str]:
        """
        Export JSON template, CSV inventory and PNG preview.

        Returns:
            Mapping of output kind to written path
        """
        print(f"Exporting bead pattern to {self.output_dir}...")

        outputs = {
            'pattern': export_json(
                result.grid, result.palette,
                os.path.join(self.output_dir, "pattern.json"),
                name=name,
                bead_size=self.config.grid.bead_size,
                total_pages=result.total_pages,
            ),
            'inventory': export_inventory_csv(
                result.statistics, os.path.join(self.output_dir, "inventory.csv")
            ),
        }

        preview_path = os.path.join(self.output_dir, "preview.png")
        export_cfg = self.config.export
        render_preview(result.grid, export_cfg.cell_size,
                       export_cfg.show_grid, export_cfg.show_codes).save(preview_path)
        outputs['preview'] = preview_path

        for kind, path in outputs.items():
            print(f"  [OK] {kind}: {os.path.basename(path)}")
        return outputs
