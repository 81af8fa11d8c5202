"""
Low-level color science utilities shared across the bead pattern pipeline.

Provides:
    - sRGB -> Lab conversion (D65 white point, 7.787 linear segment)
    - CIE76 and CIEDE2000 color differences with NumPy broadcasting
    - Small RGB helpers (hex conversion, luma, text contrast)

All functions accept NumPy arrays so callers can operate on entire rasters, yet
they also work with plain Python tuples for single color conversions.
"""

from __future__ import annotations

import re
from typing import Tuple

import numpy as np

RGB = Tuple[int, int, int]

SRGB_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)

D65_WHITE = np.array([0.95047, 1.0, 1.08883], dtype=np.float64)
LAB_EPSILON = 0.008856
LAB_KAPPA_SLOPE = 7.787

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

_HEX_PATTERN = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def _to_ndarray(color) -> np.ndarray:
    arr = np.asarray(color, dtype=np.float64)
    if arr.shape[-1:] != (3,):
        raise ValueError("Input color must have three channels")
    return arr


def srgb_to_linear(rgb) -> np.ndarray:
    """Convert sRGB in the 0-255 range to linear RGB (0-1)."""
    c = _to_ndarray(rgb) / 255.0
    return np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)


def rgb_to_xyz(rgb) -> np.ndarray:
    """Convert sRGB to CIE XYZ (D65), Y of white == 1.0."""
    linear = srgb_to_linear(rgb)
    r, g, b = linear[..., 0], linear[..., 1], linear[..., 2]
    # Elementwise so one pixel converts identically alone or inside a batch
    rows = [m[0] * r + m[1] * g + m[2] * b for m in SRGB_TO_XYZ]
    return np.stack(rows, axis=-1)


def xyz_to_lab(xyz) -> np.ndarray:
    """Convert XYZ to Lab relative to the D65 reference white."""
    xyz = _to_ndarray(xyz) / D65_WHITE

    def f(t):
        return np.where(
            t > LAB_EPSILON,
            np.cbrt(t),
            LAB_KAPPA_SLOPE * t + 16 / 116,
        )

    fx = f(xyz[..., 0])
    fy = f(xyz[..., 1])
    fz = f(xyz[..., 2])

    L = (116 * fy) - 16
    a = 500 * (fx - fy)
    b = 200 * (fy - fz)
    return np.stack([L, a, b], axis=-1)


def rgb_to_lab(rgb) -> np.ndarray:
    """
    Convert sRGB (0-255) to CIE L*a*b*.

    Accepts a single triple or any array shaped (..., 3) and returns a float64
    array with the same leading shape. Pure and deterministic.
    """
    return xyz_to_lab(rgb_to_xyz(rgb))


def _euclidean(v1, v2) -> np.ndarray:
    diff = _to_ndarray(v1) - _to_ndarray(v2)
    d0, d1, d2 = diff[..., 0], diff[..., 1], diff[..., 2]
    return np.sqrt(d0 * d0 + d1 * d1 + d2 * d2)


def delta_e76(lab1, lab2) -> np.ndarray:
    """Straight-line (CIE76) distance between Lab colors, with broadcasting."""
    return _euclidean(lab1, lab2)


def rgb_distance(rgb1, rgb2) -> np.ndarray:
    """Euclidean distance in raw RGB space."""
    return _euclidean(rgb1, rgb2)


def delta_e2000(lab1, lab2) -> np.ndarray:
    """
    CIEDE2000 color difference with numpy broadcasting.

    lab1 and lab2 may be:
        - matching shapes (...,3)
        - lab1 shape (...,3) and lab2 shape (3,) (broadcast)
    Returns an array with the broadcasted leading dimensions.
    """

    lab1 = _to_ndarray(lab1)
    lab2 = _to_ndarray(lab2)

    L1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    L2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    C1 = np.sqrt(a1**2 + b1**2)
    C2 = np.sqrt(a2**2 + b2**2)
    C_mean = (C1 + C2) / 2

    G = 0.5 * (1 - np.sqrt((C_mean**7) / (C_mean**7 + 25**7 + 1e-12)))
    a1_prime = (1 + G) * a1
    a2_prime = (1 + G) * a2
    C1_prime = np.sqrt(a1_prime**2 + b1**2)
    C2_prime = np.sqrt(a2_prime**2 + b2**2)
    C_mean_prime = (C1_prime + C2_prime) / 2

    def hue_angle(a_component, b_component):
        angle = np.degrees(np.arctan2(b_component, a_component))
        return np.where(angle < 0, angle + 360, angle)

    h1_prime = hue_angle(a1_prime, b1)
    h2_prime = hue_angle(a2_prime, b2)

    delta_h_prime = h2_prime - h1_prime
    delta_h_prime = np.where(
        np.abs(delta_h_prime) <= 180,
        delta_h_prime,
        delta_h_prime - 360 * np.sign(delta_h_prime),
    )

    delta_L_prime = L2 - L1
    delta_C_prime = C2_prime - C1_prime
    delta_H_prime = 2 * np.sqrt(C1_prime * C2_prime) * np.sin(
        np.radians(delta_h_prime / 2)
    )

    L_mean = (L1 + L2) / 2
    H_sum = h1_prime + h2_prime
    H_mean_prime = np.where(
        np.abs(h1_prime - h2_prime) > 180,
        np.where(H_sum < 360, (H_sum + 360) / 2, (H_sum - 360) / 2),
        H_sum / 2,
    )
    H_mean_prime = np.where((C1_prime * C2_prime) == 0, H_sum, H_mean_prime)

    T = (
        1
        - 0.17 * np.cos(np.radians(H_mean_prime - 30))
        + 0.24 * np.cos(np.radians(2 * H_mean_prime))
        + 0.32 * np.cos(np.radians(3 * H_mean_prime + 6))
        - 0.20 * np.cos(np.radians(4 * H_mean_prime - 63))
    )

    delta_theta = 30 * np.exp(-(((H_mean_prime - 275) / 25) ** 2))
    R_C = 2 * np.sqrt((C_mean_prime**7) / (C_mean_prime**7 + 25**7 + 1e-12))
    R_T = -np.sin(np.radians(2 * delta_theta)) * R_C

    S_L = 1 + ((0.015 * (L_mean - 50) ** 2) / np.sqrt(20 + (L_mean - 50) ** 2))
    S_C = 1 + 0.045 * C_mean_prime
    S_H = 1 + 0.015 * C_mean_prime * T

    return np.sqrt(
        (delta_L_prime / S_L) ** 2
        + (delta_C_prime / S_C) ** 2
        + (delta_H_prime / S_H) ** 2
        + R_T * (delta_C_prime / S_C) * (delta_H_prime / S_H)
    )


def luma(rgb) -> np.ndarray:
    """Rec. 601 luma (0.299R + 0.587G + 0.114B)."""
    return _to_ndarray(rgb) @ LUMA_WEIGHTS


def rgb_to_hex(rgb: RGB) -> str:
    """Format an RGB triple as ``#rrggbb``."""
    r, g, b = (int(c) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(hex_str: str) -> RGB:
    """Parse ``#rrggbb`` (leading '#' optional). Malformed input yields black."""
    match = _HEX_PATTERN.match(hex_str.strip())
    if not match:
        return (0, 0, 0)
    return tuple(int(part, 16) for part in match.groups())


def is_dark_color(rgb: RGB) -> bool:
    """Perceived brightness below mid-gray."""
    r, g, b = rgb
    return (r * 299 + g * 587 + b * 114) / 1000 < 128


def text_color_for(rgb: RGB) -> str:
    """Label text color with enough contrast against ``rgb``."""
    return "#ffffff" if is_dark_color(rgb) else "#000000"
