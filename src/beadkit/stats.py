"""
Color usage statistics and match-quality summaries.

Aggregates keyed by color id are kept as ordered lists of pairs so they cross
a persistence boundary without losing order.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from .grid import Grid
from .matcher import MatchResult
from .palette import Palette, PaletteColor

ColorCount = Tuple[PaletteColor, int]


def color_statistics(grid: Grid) -> List[ColorCount]:
    """Count cells per matched color id, in order of first encounter (row-major)."""
    counts: Dict[str, int] = {}
    colors: Dict[str, PaletteColor] = {}
    for cell in grid:
        color = cell.matched_color
        if color.id not in counts:
            counts[color.id] = 0
            colors[color.id] = color
        counts[color.id] += 1
    return [(colors[color_id], count) for color_id, count in counts.items()]


def sort_by_usage(stats: Iterable[ColorCount]) -> List[ColorCount]:
    """Most used first; equal counts keep their original order."""
    return sorted(stats, key=lambda item: item[1], reverse=True)


def required_beads(stats: Iterable[ColorCount],
                   owned_ids: Iterable[str] = ()) -> List[dict]:
    """Shopping list sorted by usage, marking colors already owned."""
    owned = set(owned_ids)
    return [
        {
            'color': color,
            'needed': count,
            'owned': count if color.id in owned else 0,
        }
        for color, count in sort_by_usage(stats)
    ]


def match_accuracy(matches: Sequence[MatchResult]) -> Dict[str, float]:
    """Average, min, max and median match distance."""
    if not matches:
        return {'average': 0.0, 'min': 0.0, 'max': 0.0, 'median': 0.0}

    distances = sorted(match.distance for match in matches)
    return {
        'average': sum(distances) / len(distances),
        'min': distances[0],
        'max': distances[-1],
        'median': distances[len(distances) // 2],
    }


def filter_poor_matches(matches: Iterable[MatchResult],
                        max_distance: float = 15.0) -> List[MatchResult]:
    """Keep matches no further than ``max_distance``."""
    return [match for match in matches if match.distance <= max_distance]


def stats_to_pairs(stats: Iterable[ColorCount]) -> List[List]:
    """Serializable ``[[color_id, count], ...]`` in the same order."""
    return [[color.id, int(count)] for color, count in stats]


def pairs_to_stats(pairs: Iterable[Sequence], palette: Palette) -> List[ColorCount]:
    """Inverse of :func:`stats_to_pairs`; unknown ids raise ValueError."""
    stats = []
    for color_id, count in pairs:
        color = palette.get(color_id)
        if color is None:
            raise ValueError(f"Unknown palette color id: {color_id!r}")
        stats.append((color, int(count)))
    return stats
