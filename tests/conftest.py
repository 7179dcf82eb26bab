"""Shared fixtures: PNG builders and a texture stand-in"""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from core.metapixels import OpCode


class FakeTexture:
    """Texture handle that records what was done to it"""

    def __init__(self, path=None):
        self.path = Path(path) if path is not None else None
        self.deleted = False
        self.delete_calls = 0
        self.replaced_from = []

    def delete(self):
        self.delete_calls += 1
        self.deleted = True

    def replace_from_path(self, path) -> bool:
        self.replaced_from.append(Path(path))
        self.path = Path(path)
        return True


class FakeTextureLoader:
    def __init__(self):
        self.created = []

    def __call__(self, path):
        texture = FakeTexture(path)
        self.created.append(texture)
        return texture


def art(width, height, color=(200, 10, 10, 255)):
    bitmap = np.zeros((height, width, 4), dtype=np.uint8)
    bitmap[:, :] = color
    return bitmap


def with_column(bitmap, pixels):
    """Append one metapixel column holding `pixels` (RGBA tuples) top-down"""
    height = bitmap.shape[0]
    column = np.zeros((height, 1, 4), dtype=np.uint8)
    for row, pixel in enumerate(pixels):
        column[row, 0] = pixel
    return np.concatenate([bitmap, column], axis=1)


def mp(op: OpCode, a=0, b=0):
    return (int(op), a, b, 255)


def write_png(path, bitmap):
    Image.fromarray(bitmap, 'RGBA').save(path, format='PNG')
    return Path(path)


def read_png(path):
    with Image.open(path) as img:
        return np.array(img.convert('RGBA'))


@pytest.fixture
def texture_loader():
    return FakeTextureLoader()
