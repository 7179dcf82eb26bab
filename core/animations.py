"""
Animations
Animation records of hat elements and their metapixel encoding
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from utils.ranges import frames_from_range, is_range

from .ids import FrameId, next_frame_id
from .metapixels import Metapixel, Metapixels, OpCode

logger = logging.getLogger(__name__)

MIN_DELAY = 1
MAX_DELAY = 255
DEFAULT_DELAY = 4
# Frame indices are stored in one byte
MAX_FRAMES = 256


class AnimationKind(IntEnum):
    """Trigger of an animation; ordinals are stored in ANIMATION_TYPE records"""
    ON_DEFAULT = 0
    ON_PRESS_QUACK = 1
    ON_RELEASE_QUACK = 2
    ON_STATIC = 3
    ON_APPROACH = 4
    ON_DUCK_DEATH = 5
    FLYING = 6
    START_IDLE = 7
    GLIDING = 8
    START_GLIDING = 9
    IDLE = 10
    ON_RESURRECT = 11

    @classmethod
    def from_byte(cls, value: int) -> Optional['AnimationKind']:
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return self.name.replace('_', ' ').title()


class Frame:
    """
    One entry of an animation's frame list.

    `value` is the sprite sheet index. `id` is a fresh process-wide id so
    that duplicated values remain distinguishable; copies get a new id.
    """

    __slots__ = ('value', '_id')

    def __init__(self, value: int):
        self.value = int(value)
        self._id = next_frame_id()

    @property
    def id(self) -> FrameId:
        return self._id

    def copy(self) -> 'Frame':
        return Frame(self.value)

    __copy__ = copy

    def __deepcopy__(self, memo) -> 'Frame':
        return self.copy()

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"Frame(value={self.value}, id={self._id})"


def to_frames(values) -> List[Frame]:
    return [Frame(v) for v in values]


@dataclass
class Animation:
    """A typed animation: trigger, delay in game ticks, loop flag and frames"""
    kind: AnimationKind
    delay: int = DEFAULT_DELAY
    looping: bool = False
    frames: List[Frame] = field(default_factory=list)
    # Frame list editor staging values (1-based, as shown to the user)
    new_frame: int = 0
    new_range_start: int = 1
    new_range_end: int = 1

    def __post_init__(self):
        self.delay = clamp_delay(self.delay)
        self.frames = [f if isinstance(f, Frame) else Frame(f) for f in self.frames]

    @property
    def frame_values(self) -> List[int]:
        return [f.value for f in self.frames]

    @property
    def is_playable(self) -> bool:
        return bool(self.frames)

    def set_delay(self, delay: int):
        self.delay = clamp_delay(delay)

    def gen_metapixels(self) -> List[Metapixel]:
        """
        Encode the animation as ANIMATION_TYPE, ANIMATION_DELAY, ANIMATION_LOOP
        followed by either one ANIMATION_FRAME_PERIOD record (contiguous run of
        two or more frames) or one ANIMATION_FRAME record per frame.
        """
        metapixels = Metapixels()
        metapixels.push(OpCode.ANIMATION_TYPE, int(self.kind))
        metapixels.push(OpCode.ANIMATION_DELAY, self.delay)
        metapixels.push(OpCode.ANIMATION_LOOP, int(self.looping))

        values = self.frame_values
        if len(values) > 1 and is_range(values):
            metapixels.push(OpCode.ANIMATION_FRAME_PERIOD, values[0], values[-1])
            return metapixels.pixels

        for value in values:
            metapixels.push(OpCode.ANIMATION_FRAME, value)
        return metapixels.pixels

    # Frame list editing

    def add_frame(self, frames_amount: int) -> bool:
        """
        Append the staged `new_frame` (1-based) and advance the staging value.

        Returns:
            False when the staged frame is outside [1, frames_amount] or past
            the last storable frame
        """
        if not 1 <= self.new_frame <= min(frames_amount, MAX_FRAMES):
            return False
        self.frames.append(Frame(self.new_frame - 1))
        self.new_frame += 1
        return True

    def duplicate_frame(self, index: int):
        """Insert a copy of frames[index] before it"""
        self.frames.insert(index, self.frames[index].copy())

    def remove_frame(self, index: int) -> Frame:
        return self.frames.pop(index)

    def move_frame(self, source: int, destination: int):
        """Drag-reorder: move the frame at source so it ends up at destination"""
        frame = self.frames.pop(source)
        self.frames.insert(destination, frame)

    def set_frame_range(self, frames_amount: int):
        """Replace the frame list with the staged (1-based) range"""
        start = max(self.new_range_start - 1, 0)
        last = max(min(frames_amount, MAX_FRAMES) - 1, 0)
        start = min(start, last)
        end = min(max(self.new_range_end - 1, 0), last)
        self.frames = to_frames(frames_from_range(start, end))

    def clear_frames(self):
        self.frames.clear()


def clamp_delay(delay: int) -> int:
    return max(MIN_DELAY, min(MAX_DELAY, int(delay)))


def extract_animation(metapixels: List[Metapixel], index: int) -> Optional[Animation]:
    """
    Decode the animation whose ANIMATION_TYPE record sits at `index`.

    Positions index..index+3 must be exactly ANIMATION_TYPE, ANIMATION_DELAY,
    ANIMATION_LOOP and a frame record. A period record expands to its range;
    otherwise the consecutive ANIMATION_FRAME records form the frame list.

    Args:
        metapixels: Decoded stream of one element
        index: Position of an ANIMATION_TYPE record

    Returns:
        The animation, or None if the header is malformed or the kind byte
        is out of range
    """
    header = metapixels[index:index + 4]
    if len(header) < 4:
        return None

    anim_type, delay, looping, first_frame = header
    if (anim_type.op, delay.op, looping.op) != (
            OpCode.ANIMATION_TYPE, OpCode.ANIMATION_DELAY, OpCode.ANIMATION_LOOP):
        return None
    if first_frame.op not in (OpCode.ANIMATION_FRAME, OpCode.ANIMATION_FRAME_PERIOD):
        return None

    kind = AnimationKind.from_byte(anim_type.a)
    if kind is None:
        logger.warning("Dropping animation with unknown kind byte %d", anim_type.a)
        return None

    if first_frame.op == OpCode.ANIMATION_FRAME_PERIOD:
        frames = frames_from_range(first_frame.a, first_frame.b)
    else:
        frames = []
        for pixel in metapixels[index + 3:]:
            if pixel.op != OpCode.ANIMATION_FRAME:
                break
            frames.append(pixel.a)

    return Animation(kind, delay.a, looping.a != 0, to_frames(frames))
