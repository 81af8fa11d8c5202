"""
Built-in bead palettes for the supported brands.
Each brand palette is built once and shared read-only for the session.
"""

from typing import Dict, List, Optional, Tuple

from .palette import BEAD_BRANDS, Palette, PaletteColor

# (code, name, rgb) in catalogue order
_BRAND_DATA: Dict[str, List[Tuple[str, str, Tuple[int, int, int]]]] = {
    "hama": [
        ("01", "White", (255, 255, 255)),
        ("02", "Cream", (240, 234, 195)),
        ("03", "Yellow", (236, 216, 0)),
        ("04", "Orange", (237, 97, 32)),
        ("05", "Red", (194, 29, 42)),
        ("06", "Pink", (230, 131, 168)),
        ("07", "Purple", (105, 74, 145)),
        ("08", "Dark Blue", (37, 55, 134)),
        ("09", "Light Blue", (51, 115, 192)),
        ("10", "Green", (37, 104, 71)),
        ("11", "Light Green", (73, 174, 71)),
        ("12", "Brown", (83, 46, 36)),
        ("17", "Grey", (137, 141, 145)),
        ("18", "Black", (38, 38, 38)),
        ("20", "Reddish Brown", (122, 51, 43)),
        ("21", "Light Brown", (166, 103, 60)),
        ("26", "Flesh", (223, 162, 135)),
        ("27", "Beige", (208, 178, 132)),
        ("30", "Burgundy", (111, 31, 46)),
        ("43", "Pastel Yellow", (248, 238, 125)),
        ("46", "Pastel Blue", (130, 180, 220)),
        ("47", "Pastel Green", (150, 205, 160)),
        ("48", "Pastel Lilac", (190, 160, 205)),
        ("60", "Teddy Bear Brown", (180, 120, 40)),
    ],
    "perler": [
        ("P01", "White", (241, 241, 241)),
        ("P02", "Cream", (224, 222, 169)),
        ("P03", "Yellow", (236, 216, 0)),
        ("P04", "Orange", (237, 110, 36)),
        ("P05", "Red", (191, 46, 64)),
        ("P06", "Bubblegum", (222, 103, 151)),
        ("P07", "Purple", (96, 64, 132)),
        ("P08", "Dark Blue", (43, 63, 135)),
        ("P09", "Light Blue", (51, 112, 192)),
        ("P10", "Dark Green", (28, 117, 62)),
        ("P11", "Light Green", (86, 186, 159)),
        ("P12", "Brown", (81, 57, 49)),
        ("P17", "Grey", (138, 141, 145)),
        ("P18", "Black", (46, 47, 50)),
        ("P20", "Rust", (140, 55, 44)),
        ("P21", "Light Brown", (129, 93, 52)),
        ("P33", "Peach", (238, 186, 178)),
        ("P35", "Tan", (188, 147, 113)),
        ("P38", "Magenta", (242, 41, 145)),
        ("P52", "Pastel Blue", (103, 163, 217)),
        ("P53", "Pastel Green", (118, 200, 130)),
        ("P56", "Pastel Yellow", (254, 246, 141)),
        ("P61", "Kiwi Lime", (108, 190, 19)),
        ("P62", "Turquoise", (43, 137, 198)),
    ],
    "artkal": [
        ("S01", "White", (255, 255, 255)),
        ("S02", "Black", (0, 0, 0)),
        ("S03", "Lemon", (255, 235, 60)),
        ("S04", "Sunflower", (255, 190, 30)),
        ("S05", "Tangerine", (255, 120, 40)),
        ("S06", "Scarlet", (220, 30, 40)),
        ("S07", "Rose", (240, 120, 160)),
        ("S08", "Violet", (120, 70, 160)),
        ("S09", "Navy", (20, 40, 110)),
        ("S10", "Sky", (100, 170, 230)),
        ("S11", "Emerald", (20, 130, 80)),
        ("S12", "Lime", (150, 210, 60)),
        ("S13", "Chocolate", (90, 50, 30)),
        ("S14", "Sand", (215, 190, 150)),
        ("S15", "Silver", (170, 170, 175)),
        ("S16", "Charcoal", (70, 70, 75)),
        ("S17", "Skin", (240, 200, 170)),
        ("S18", "Coral", (250, 130, 110)),
        ("S19", "Teal", (0, 128, 128)),
        ("S20", "Plum", (140, 40, 90)),
    ],
    "nabbi": [
        ("N01", "White", (250, 250, 250)),
        ("N02", "Black", (30, 30, 30)),
        ("N03", "Yellow", (250, 220, 20)),
        ("N04", "Orange", (240, 120, 30)),
        ("N05", "Red", (200, 25, 35)),
        ("N06", "Pink", (235, 150, 180)),
        ("N07", "Lilac", (150, 110, 180)),
        ("N08", "Blue", (30, 70, 160)),
        ("N09", "Turquoise", (40, 170, 200)),
        ("N10", "Green", (30, 120, 60)),
        ("N11", "Light Green", (120, 200, 90)),
        ("N12", "Brown", (100, 60, 35)),
        ("N13", "Beige", (220, 195, 150)),
        ("N14", "Grey", (140, 140, 140)),
        ("N15", "Dark Grey", (85, 85, 90)),
        ("N16", "Peach", (245, 190, 160)),
    ],
}

_palette_cache: Dict[str, Palette] = {}


def list_brands() -> List[str]:
    """Get list of available brand names."""
    return list(BEAD_BRANDS)


def _build_palette(brand: str) -> Palette:
    colors = [
        PaletteColor(id=f"{brand}-{code}", name=name, code=code, rgb=rgb, brand=brand)
        for code, name, rgb in _BRAND_DATA[brand]
    ]
    return Palette(colors, brand=brand)


def get_brand_palette(brand: str) -> Palette:
    """Get the shared palette for a brand, building it on first use."""
    brand = brand.lower()
    if brand not in _BRAND_DATA:
        raise ValueError(f"Unknown brand '{brand}'. Available: {list_brands()}")

    palette = _palette_cache.get(brand)
    if palette is None:
        palette = _build_palette(brand)
        _palette_cache[brand] = palette
    return palette


def get_brand_info(brand: Optional[str] = None) -> Dict[str, Dict]:
    """Get summary information about one or all brands."""
    names = [brand.lower()] if brand else list_brands()
    info = {}
    for name in names:
        palette = get_brand_palette(name)
        info[name] = {
            "brand": name,
            "color_count": len(palette),
            "colors": palette.to_list(),
        }
    return info
