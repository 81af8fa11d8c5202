"""
Image loading for bead pattern generation.
"""

import os
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageEnhance, ImageOps


def load_image(image_path: str, max_size: Optional[Tuple[int, int]] = None,
               brightness: float = 1.0, contrast: float = 1.0) -> Tuple[np.ndarray, dict]:
    """
    Load an image file as an RGB raster.

    Args:
        image_path: Path to input image
        max_size: Optional (width, height) bound; the image is shrunk to fit,
            keeping its aspect ratio
        brightness: ImageEnhance brightness factor (1.0 = unchanged)
        contrast: ImageEnhance contrast factor (1.0 = unchanged)

    Returns:
        Tuple of (uint8 raster shaped (H, W, 3), metadata)
    """
    print(f"Loading image: {image_path}")

    if not os.path.exists(image_path):
        raise FileNotFoundError(f"Image not found: {image_path}")

    if brightness <= 0 or contrast <= 0:
        raise ValueError("Brightness and contrast factors must be positive")

    with Image.open(image_path) as pil_image:
        metadata = {
            'original_size': pil_image.size,
            'original_mode': pil_image.mode,
            'filename': os.path.basename(image_path)
        }

        # Auto-orient image based on EXIF
        pil_image = ImageOps.exif_transpose(pil_image)

        # Convert to RGB if necessary
        if pil_image.mode != 'RGB':
            pil_image = pil_image.convert('RGB')

        if max_size:
            pil_image = pil_image.copy()
            pil_image.thumbnail(max_size, Image.LANCZOS)

        if brightness != 1.0:
            pil_image = ImageEnhance.Brightness(pil_image).enhance(brightness)

        if contrast != 1.0:
            pil_image = ImageEnhance.Contrast(pil_image).enhance(contrast)

        raster = np.array(pil_image, dtype=np.uint8)

    metadata['final_size'] = (raster.shape[1], raster.shape[0])
    print(f"Image loaded: {metadata['final_size'][0]}x{metadata['final_size'][1]} pixels")

    return raster, metadata


def raster_to_image(raster: np.ndarray) -> Image.Image:
    """Wrap an (H, W, 3) raster as a Pillow image."""
    return Image.fromarray(np.ascontiguousarray(np.asarray(raster, dtype=np.uint8)[:, :, :3]))
