"""
Configuration management for the bead pattern generator.
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Literal, Optional

from .palette import BEAD_BRANDS, BEAD_SIZE_SPECS


@dataclass
class GridConfig:
    """Target grid dimensions; unset sides are derived from the bead size."""
    width: Optional[int] = None
    height: Optional[int] = None
    bead_size: Literal["mini", "regular", "maxi", "mega"] = "regular"

    @property
    def bead_diameter_mm(self) -> float:
        return BEAD_SIZE_SPECS[self.bead_size]


@dataclass
class PaletteConfig:
    """Palette and brand configuration."""
    brand: str = "hama"
    csv_file: Optional[str] = None


@dataclass
class DitherConfig:
    """Dithering configuration."""
    enabled: bool = False


@dataclass
class SamplingConfig:
    """Cell averaging configuration."""
    mode: Literal["plain", "edge"] = "plain"
    edge_weight: float = 2.0


@dataclass
class MatchingConfig:
    """Color distance configuration."""
    metric: Literal["rgb", "lab", "ciede2000"] = "lab"


@dataclass
class HistoryConfig:
    """Undo/redo configuration."""
    capacity: int = 50


@dataclass
class ExportConfig:
    """Export configuration."""
    cell_size: int = 12
    show_grid: bool = True
    show_codes: bool = False
    page_margin: int = 20


@dataclass
class Config:
    """Main configuration class."""
    # File paths
    input: str = ""
    output_dir: str = "out"
    config_file: Optional[str] = None

    # Component configurations
    grid: GridConfig = field(default_factory=GridConfig)
    palette: PaletteConfig = field(default_factory=PaletteConfig)
    dither: DitherConfig = field(default_factory=DitherConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    def _sections(self):
        return (self.grid, self.palette, self.dither, self.sampling,
                self.matching, self.history, self.export)

    @classmethod
    def from_yaml(cls, config_path: str, **overrides) -> "Config":
        """Load configuration from YAML file with optional overrides."""
        if not os.path.exists(config_path):
            # Return default config if file doesn't exist
            config = cls()
            config.config_file = config_path
            config.apply_overrides(**overrides)
            config.validate()
            return config

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except UnicodeDecodeError:
            # Fallback to latin-1 encoding if utf-8 fails
            with open(config_path, 'r', encoding='latin-1') as f:
                data = yaml.safe_load(f) or {}

        try:
            config = cls(
                input=data.get('input', ''),
                output_dir=data.get('output_dir', 'out'),
                config_file=config_path,
                grid=GridConfig(**data.get('grid', {})),
                palette=PaletteConfig(**data.get('palette', {})),
                dither=DitherConfig(**data.get('dither', {})),
                sampling=SamplingConfig(**data.get('sampling', {})),
                matching=MatchingConfig(**data.get('matching', {})),
                history=HistoryConfig(**data.get('history', {})),
                export=ExportConfig(**data.get('export', {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

        config.apply_overrides(**overrides)
        config.validate()

        return config

    def apply_overrides(self, **overrides):
        """Route each override to the first section that defines the key."""
        for key, value in overrides.items():
            if value is None:
                continue
            if hasattr(self, key) and key not in ('grid', 'palette', 'dither', 'sampling',
                                                  'matching', 'history', 'export'):
                setattr(self, key, value)
                continue
            for section in self._sections():
                if hasattr(section, key):
                    setattr(section, key, value)
                    break

    def validate(self):
        """Validate configuration parameters."""
        if self.grid.width is not None and self.grid.width < 1:
            raise ValueError("Grid width must be positive")

        if self.grid.height is not None and self.grid.height < 1:
            raise ValueError("Grid height must be positive")

        if self.grid.bead_size not in BEAD_SIZE_SPECS:
            raise ValueError(f"Unknown bead size: {self.grid.bead_size}")

        if self.palette.csv_file is None and self.palette.brand not in BEAD_BRANDS:
            raise ValueError(f"Unknown brand: {self.palette.brand}")

        if self.sampling.mode not in ("plain", "edge"):
            raise ValueError(f"Unknown sampling mode: {self.sampling.mode}")

        if self.sampling.edge_weight < 0:
            raise ValueError("Edge weight must be non-negative")

        if self.matching.metric not in ("rgb", "lab", "ciede2000"):
            raise ValueError(f"Unknown matching metric: {self.matching.metric}")

        if self.history.capacity < 1:
            raise ValueError("History capacity must be at least 1")

        if self.export.cell_size < 1:
            raise ValueError("Export cell size must be at least 1")

        if self.export.page_margin < 0:
            raise ValueError("Page margin must be non-negative")

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            'input': self.input,
            'output_dir': self.output_dir,
            'grid': {
                'width': self.grid.width,
                'height': self.grid.height,
                'bead_size': self.grid.bead_size
            },
            'palette': {
                'brand': self.palette.brand,
                'csv_file': self.palette.csv_file
            },
            'dither': {
                'enabled': self.dither.enabled
            },
            'sampling': {
                'mode': self.sampling.mode,
                'edge_weight': self.sampling.edge_weight
            },
            'matching': {
                'metric': self.matching.metric
            },
            'history': {
                'capacity': self.history.capacity
            },
            'export': {
                'cell_size': self.export.cell_size,
                'show_grid': self.export.show_grid,
                'show_codes': self.export.show_codes,
                'page_margin': self.export.page_margin
            }
        }

    def save_yaml(self, path: Optional[str] = None):
        """Save configuration to YAML file."""
        if path is None:
            path = self.config_file or "config.yaml"

        # Ensure directory exists
        dir_path = os.path.dirname(path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2)
