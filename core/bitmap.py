"""
Bitmap I/O
PNG loading and saving plus the split between the art area (sprite sheet)
and the metapixel area (columns to the right of it).

Bitmaps are numpy arrays of shape (height, width, 4), dtype uint8, RGBA.
"""

import logging
from typing import List, Tuple

import numpy as np
from PIL import Image

from .metapixels import Metapixel, columns_needed, decode_pixels, layout_positions

logger = logging.getLogger(__name__)


def read_bitmap(path) -> np.ndarray:
    """
    Load a PNG as an RGBA array

    Raises:
        OSError: The file is missing, unreadable or not a decodable image
            (PIL's UnidentifiedImageError is an OSError)
    """
    with Image.open(path) as img:
        return np.array(img.convert('RGBA'), dtype=np.uint8)


def write_bitmap(bitmap: np.ndarray, path):
    """Save an RGBA array as PNG"""
    Image.fromarray(bitmap, 'RGBA').save(path, format='PNG')


def empty_bitmap(width: int, height: int) -> np.ndarray:
    """Fully transparent bitmap"""
    return np.zeros((height, width, 4), dtype=np.uint8)


def bitmap_size(bitmap: np.ndarray) -> Tuple[int, int]:
    """(width, height) of a bitmap"""
    return bitmap.shape[1], bitmap.shape[0]


def split_areas(bitmap: np.ndarray, art_width: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Partition a bitmap into art columns [0, art_width) and metapixel columns
    [art_width, width). An art width beyond the image leaves the metapixel
    area empty.
    """
    art_width = max(0, min(art_width, bitmap.shape[1]))
    return bitmap[:, :art_width], bitmap[:, art_width:]


def read_metapixels(bitmap: np.ndarray, art_width: int) -> List[Metapixel]:
    """
    Decode the metapixel stream stored right of the art area.

    The area is read column-major: top to bottom, then left to right.
    """
    _, area = split_areas(bitmap, art_width)
    if area.size == 0:
        return []
    column_major = area.transpose(1, 0, 2).reshape(-1, 4)
    return decode_pixels(column_major)


def insert_metapixels(bitmap: np.ndarray, metapixels: List[Metapixel], art_width: int):
    """
    Write a metapixel stream into the columns starting at art_width, in place.

    Raises:
        ValueError: The bitmap is too narrow for the stream
    """
    height = bitmap.shape[0]
    positions = layout_positions(metapixels, height) if metapixels else []
    for pixel, (column, row) in zip(metapixels, positions):
        x = art_width + column
        if x >= bitmap.shape[1]:
            raise ValueError(
                f"bitmap of width {bitmap.shape[1]} cannot hold {len(metapixels)} metapixels "
                f"after column {art_width}"
            )
        bitmap[row, x] = pixel.rgba()


def compose_bitmap(source: np.ndarray, art_area_size: Tuple[int, int],
                   metapixels: List[Metapixel]) -> np.ndarray:
    """
    Build the on-disk image of an element.

    The art area is copied from the source bitmap, the old metapixel columns
    are dropped, and fresh columns are appended for the given stream:
    width = art_w + columns_needed(stream), height = source height.

    Args:
        source: Bitmap the element was loaded from (or its replacement art)
        art_area_size: (width, height) of the sprite sheet
        metapixels: Encoded stream of the element

    Returns:
        New RGBA array ready to be written
    """
    height = source.shape[0]
    art_width = art_area_size[0]
    extra_columns = columns_needed(metapixels, height) if metapixels else 0

    final = empty_bitmap(art_width + extra_columns, height)
    art, _ = split_areas(source, art_width)
    final[:, :art.shape[1]] = art
    insert_metapixels(final, metapixels, art_width)
    logger.debug("Composed %dx%d bitmap with %d metapixels in %d column(s)",
                 final.shape[1], height, len(metapixels), extra_columns)
    return final
