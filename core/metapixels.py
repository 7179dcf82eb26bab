"""
Metapixels
Typed (opcode, a, b) records packed into the RGB channels of a pixel.

The opcode ordinals below are part of the on-disk format and must never be
reordered.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class OpCode(IntEnum):
    """Metapixel opcodes, stored in the red channel"""
    STRAPPED_ON = 0
    IS_BIG_HAT = 1
    FRAME_SIZE = 2
    ANIMATION_TYPE = 3
    ANIMATION_DELAY = 4
    ANIMATION_LOOP = 5
    ANIMATION_FRAME = 6
    ANIMATION_FRAME_PERIOD = 7
    LINK_FRAME_STATE = 8
    WINGS_GENERAL_OFFSET = 9
    WINGS_CROUCH_OFFSET = 10
    WINGS_RAGDOLL_OFFSET = 11
    WINGS_SLIDE_OFFSET = 12
    GENERATE_WINGS_ANIMATIONS = 13
    PET_CHANGES_ANGLE = 14
    PET_DISTANCE = 15
    PET_NO_FLIP = 16
    WINGS_AUTO_GLIDE_FRAME = 17
    WINGS_AUTO_IDLE_FRAME = 18
    WINGS_AUTO_ANIMATIONS_SPEED = 19
    CHANGE_ANIMATIONS_EVERY_LEVEL = 20
    PET_SPEED = 21
    WINGS_NET_OFFSET = 22
    ON_SPAWN_ANIMATION = 23

    @classmethod
    def from_byte(cls, value: int) -> Optional['OpCode']:
        """Map a red channel byte to an opcode, None for unknown values"""
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Metapixel:
    """One decoded metapixel record"""
    op: OpCode
    a: int = 0
    b: int = 0

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> Optional['Metapixel']:
        """Build a record from raw channel bytes, None when r is not an opcode"""
        op = OpCode.from_byte(int(r))
        if op is None:
            return None
        return cls(op, int(g), int(b))

    def rgba(self) -> Tuple[int, int, int, int]:
        return int(self.op), self.a, self.b, 255


def to_byte(value: int) -> int:
    """Wrap an integer into a channel byte"""
    return int(value) & 0xFF


class Metapixels:
    """Ordered metapixel stream builder used by the encoders"""

    def __init__(self):
        self.pixels: List[Metapixel] = []

    def push(self, op: OpCode, a: int = 0, b: int = 0):
        if not (0 <= int(a) <= 0xFF and 0 <= int(b) <= 0xFF):
            logger.warning("%s value (%d, %d) does not fit in a byte and was wrapped", op.name, a, b)
        self.pixels.append(Metapixel(op, to_byte(a), to_byte(b)))

    def push_raw(self, pixel: Metapixel):
        self.pixels.append(pixel)

    def push_many(self, pixels: Iterable[Metapixel]):
        self.pixels.extend(pixels)

    def __len__(self) -> int:
        return len(self.pixels)


def decode_pixels(pixels: np.ndarray) -> List[Metapixel]:
    """
    Decode an ordered run of RGBA pixels into metapixel records.

    Pixels with zero alpha are absent and pixels whose red channel is not a
    known opcode are skipped. Never raises on pixel content.

    Args:
        pixels: Array of shape (N, 4) in stream order

    Returns:
        Decoded records in stream order
    """
    decoded = []
    for r, g, b, a in pixels.reshape(-1, 4):
        if a == 0:
            continue
        metapixel = Metapixel.from_rgb(r, g, b)
        if metapixel is not None:
            decoded.append(metapixel)
    return decoded


def layout_positions(metapixels: List[Metapixel], height: int) -> List[Tuple[int, int]]:
    """
    Compute the (column, row) slot of every record in the metapixel area.

    Records fill columns top to bottom. One empty slot follows each
    ANIMATION_TYPE record; a column that runs out of rows continues at the
    top of the next column.

    Args:
        metapixels: Encoded stream
        height: Height of the image in pixels

    Returns:
        One position per record, columns relative to the metapixel area
    """
    if height <= 0:
        raise ValueError(f"metapixel area needs a positive height, got {height}")

    positions = []
    column, row = 0, 0
    for pixel in metapixels:
        if row >= height:
            column += 1
            row = 0
        positions.append((column, row))
        row += 1
        if pixel.op == OpCode.ANIMATION_TYPE:
            row += 1
    return positions


def columns_needed(metapixels: List[Metapixel], height: int) -> int:
    """Number of metapixel columns an encoded stream occupies"""
    positions = layout_positions(metapixels, height)
    if not positions:
        return 0
    return positions[-1][0] + 1
