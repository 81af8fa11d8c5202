"""
Command-line interface for the bead pattern generator.
"""

import argparse
import os
import sys

from .brands import get_brand_info, list_brands
from .config import Config
from .export import ExportManager
from .image_io import load_image
from .palette import BEAD_SIZE_SPECS
from .pipeline import PatternPipeline
from .stats import sort_by_usage


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="Convert an image into a bead pattern using a fixed brand palette",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 50x50 Hama pattern
  python -m beadkit.cli photo.jpg out/ --brand hama --width 50 --height 50

  # Perler pattern sized from the image, with dithering
  python -m beadkit.cli photo.jpg out/ --brand perler --dither

  # Keep fine detail with edge-weighted sampling
  python -m beadkit.cli logo.png out/ --edge-weighted --edge-weight 3

  # List available brands and their palettes
  python -m beadkit.cli --list-brands
        """
    )

    parser.add_argument("input", nargs="?", help="Input image file (JPG/PNG)")
    parser.add_argument("output", nargs="?", help="Output directory for pattern files")

    parser.add_argument("--config", "-c", help="YAML configuration file")
    parser.add_argument("--brand", "-b", choices=list_brands(), help="Bead brand palette")
    parser.add_argument("--width", type=int, help="Grid width in beads")
    parser.add_argument("--height", type=int, help="Grid height in beads")
    parser.add_argument(
        "--bead-size",
        choices=list(BEAD_SIZE_SPECS),
        help="Bead size used to derive missing grid dimensions"
    )
    parser.add_argument(
        "--dither",
        action="store_true",
        default=None,
        help="Apply Floyd-Steinberg dithering before sampling"
    )
    parser.add_argument(
        "--edge-weighted",
        action="store_true",
        help="Weight cell averages toward high-contrast pixels"
    )
    parser.add_argument("--edge-weight", type=float, help="Edge weighting strength (default: 2.0)")
    parser.add_argument(
        "--metric",
        choices=["rgb", "lab", "ciede2000"],
        help="Color distance metric (default: lab)"
    )
    parser.add_argument("--max-size", type=int, help="Shrink the image to fit this many pixels per side")
    parser.add_argument("--name", default=None, help="Pattern name stored in pattern.json")
    parser.add_argument(
        "--show-codes",
        action="store_true",
        default=None,
        help="Label every bead in preview.png with its color code"
    )

    parser.add_argument("--list-brands", action="store_true", help="List available brands and colors")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    return parser


def validate_arguments(args: argparse.Namespace) -> bool:
    """Validate command-line arguments."""
    if args.list_brands:
        return True

    if not args.input:
        print("Error: Input image file is required")
        return False

    if not args.output:
        print("Error: Output directory is required")
        return False

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}")
        return False

    for name in ("width", "height", "max_size"):
        value = getattr(args, name)
        if value is not None and value < 1:
            print(f"Error: --{name.replace('_', '-')} must be at least 1")
            return False

    if args.edge_weight is not None and args.edge_weight < 0:
        print("Error: --edge-weight must be non-negative")
        return False

    return True


def build_config(args: argparse.Namespace) -> Config:
    """Merge the optional YAML file with command-line overrides."""
    overrides = {
        'output_dir': args.output,
        'input': args.input,
        'brand': args.brand,
        'width': args.width,
        'height': args.height,
        'bead_size': args.bead_size,
        'enabled': args.dither,
        'edge_weight': args.edge_weight,
        'metric': args.metric,
        'show_codes': args.show_codes,
    }
    if args.edge_weighted:
        overrides['mode'] = 'edge'

    if args.config:
        return Config.from_yaml(args.config, **overrides)

    config = Config()
    config.apply_overrides(**overrides)
    config.validate()
    return config


def list_brand_palettes():
    """List all available brands with their colors."""
    print("\n" + "=" * 60)
    print("AVAILABLE BRANDS")
    print("=" * 60)

    for brand, info in get_brand_info().items():
        print(f"\n{brand.upper()} ({info['color_count']} colors):")
        for color in info['colors']:
            print(f"    {color['code']:>4}: {color['name']:<20} {color['hex']}")

    print("\n" + "=" * 60)


def run_generation(args: argparse.Namespace) -> bool:
    """Generate pattern files for one image."""
    try:
        config = build_config(args)

        print("\n" + "=" * 60)
        print("BEAD PATTERN GENERATOR")
        print("=" * 60)
        print(f"Input: {config.input}")
        print(f"Output: {config.output_dir}")
        print(f"Brand: {config.palette.brand}")
        print(f"Dithering: {'on' if config.dither.enabled else 'off'}")
        print(f"Sampling: {config.sampling.mode}")
        print(f"Metric: {config.matching.metric}")
        print("-" * 60)

        max_size = (args.max_size, args.max_size) if args.max_size else None
        raster, _ = load_image(config.input, max_size=max_size)

        result = PatternPipeline(config).run(raster)
        name = args.name or os.path.splitext(os.path.basename(config.input))[0]
        outputs = ExportManager(config).export_pattern(result, name=name)

        print("\n" + "=" * 60)
        print("[OK] PATTERN GENERATION COMPLETE")
        print("=" * 60)
        print(f"Grid size: {result.grid_width} x {result.grid_height} "
              f"({result.grid.total_cells:,} beads)")
        print(f"Pages (A4): {result.total_pages}")

        accuracy = result.accuracy()
        print(f"Match distance: mean {accuracy['average']:.2f}, max {accuracy['max']:.2f}")

        print("\nColor breakdown:")
        for color, count in sort_by_usage(result.statistics):
            print(f"  {color.name:<20} ({color.code:>4}): {count:>6,} beads")

        print("\nGenerated Files:")
        for path in outputs.values():
            print(f"  [OK] {path}")

        return True

    except Exception as e:
        print(f"\n[X] Error during pattern generation: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return False


def main(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.list_brands:
        list_brand_palettes()
        return

    if not validate_arguments(args):
        sys.exit(1)

    success = run_generation(args)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
