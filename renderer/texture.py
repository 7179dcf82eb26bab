"""
Texture
OpenGL texture handles for element sprite sheets.

A current GL context is required for every call that touches GL; the hat
codec itself never creates textures, it receives a loader such as
Texture.from_path.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np
from OpenGL.GL import *

from core.bitmap import bitmap_size, read_bitmap

logger = logging.getLogger(__name__)


def _upload(bitmap: np.ndarray) -> int:
    """Create a GL texture from an RGBA array and return its id"""
    width, height = bitmap_size(bitmap)
    if width == 0 or height == 0:
        raise ValueError(f"tried to create empty texture with size {width}x{height}")

    texture_id = glGenTextures(1)
    glBindTexture(GL_TEXTURE_2D, texture_id)

    # Pixel art: no filtering
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_NEAREST)
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_NEAREST)
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_S, GL_REPEAT)
    glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_T, GL_REPEAT)

    glTexImage2D(GL_TEXTURE_2D, 0, GL_RGBA, width, height,
                 0, GL_RGBA, GL_UNSIGNED_BYTE, np.ascontiguousarray(bitmap))
    return texture_id


class Texture:
    """GL texture owned by a hat element"""

    def __init__(self, texture_id: int, width: int, height: int, path: Optional[Path] = None):
        self.texture_id = texture_id
        self.width = width
        self.height = height
        self.path = Path(path) if path is not None else None
        self.deleted = False

    def __repr__(self) -> str:
        return f"Texture(id={self.texture_id}, {self.width}x{self.height}, path={self.path})"

    @classmethod
    def from_bitmap(cls, bitmap: np.ndarray, path: Optional[Path] = None) -> 'Texture':
        width, height = bitmap_size(bitmap)
        return cls(_upload(bitmap), width, height, path)

    @classmethod
    def from_path(cls, path) -> 'Texture':
        """
        Load a PNG into a new texture

        Raises:
            OSError: The image could not be read
            ValueError: The image is empty
        """
        return cls.from_bitmap(read_bitmap(path), Path(path))

    def replace_from_path(self, path) -> bool:
        """
        Re-upload the texture from another file, keeping this handle.

        Returns:
            False if the new file could not be loaded; the old texture stays
        """
        try:
            bitmap = read_bitmap(path)
            new_id = _upload(bitmap)
        except (OSError, ValueError) as e:
            logger.warning("Could not replace texture from %s: %s", path, e)
            return False

        if not self.deleted:
            glDeleteTextures([self.texture_id])
        self.texture_id = new_id
        self.width, self.height = bitmap_size(bitmap)
        self.path = Path(path)
        self.deleted = False
        return True

    def delete(self):
        if self.deleted:
            return
        glDeleteTextures([self.texture_id])
        self.deleted = True
