"""
Hat elements
The seven element kinds of a hat pack, their defaults, and the metapixel
fields each of them reads and writes.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, Type

import numpy as np

from utils.file_utils import HatNameAndSize, file_stem, parse_name_and_size
from utils.ranges import frames_from_range

from .animations import DEFAULT_DELAY, Animation, AnimationKind, extract_animation, to_frames
from .bitmap import bitmap_size, compose_bitmap, read_bitmap, read_metapixels, write_bitmap
from .errors import BundleIOError, InvalidBundleError
from .ids import ElementId, next_element_id
from .metapixels import Metapixel, Metapixels, OpCode

logger = logging.getLogger(__name__)

MIN_FRAME_SIZE = 32
MAX_FRAME_SIZE = 64
MAX_EXTRA_SIZE = (97, 56)
MAX_PETS = 5
DEFAULT_PET_DISTANCE = 10
DEFAULT_PET_SPEED = 10
DEFAULT_WINGS_IDLE_FRAME = 0
DEFAULT_AUTO_SPEED = 4
WINGS_OFFSET_BIAS = 128
DEFAULT_WINGS_OFFSET = (WINGS_OFFSET_BIAS, WINGS_OFFSET_BIAS)

# Loads a texture for a PNG path; the result must provide delete()
TextureLoader = Callable[[Path], Any]


class HatKind(IntEnum):
    """Element kinds"""
    WEARABLE = 0
    WINGS = 1
    EXTRA = 2
    FLYING_PET = 3
    WALKING_PET = 4
    ROOM = 5
    PREVIEW = 6

    @property
    def display_name(self) -> str:
        return _KIND_DISPLAY_NAMES[self]

    @property
    def save_name(self) -> str:
        return _KIND_SAVE_NAMES[self]

    @property
    def is_pet(self) -> bool:
        return self in PET_KINDS


_KIND_DISPLAY_NAMES = {
    HatKind.WEARABLE: 'Wearable Hat',
    HatKind.WINGS: 'Wings Hat',
    HatKind.EXTRA: 'Extra',
    HatKind.FLYING_PET: 'Flying Pet',
    HatKind.WALKING_PET: 'Walking Pet',
    HatKind.ROOM: 'Room',
    HatKind.PREVIEW: 'Preview',
}

_KIND_SAVE_NAMES = {
    HatKind.WEARABLE: 'hat',
    HatKind.WINGS: 'wings',
    HatKind.EXTRA: 'extrahat',
    HatKind.FLYING_PET: 'flyingpet',
    HatKind.WALKING_PET: 'walkingpet',
    HatKind.ROOM: 'room',
    HatKind.PREVIEW: 'preview',
}

PET_KINDS = frozenset({HatKind.FLYING_PET, HatKind.WALKING_PET})
UNIQUE_KINDS = frozenset(HatKind) - PET_KINDS


class LinkFrameState(IntEnum):
    """How quack-triggered animations relate to the currently shown frame"""
    DEFAULT = 0
    SAVED = 1
    INVERTED = 2

    @classmethod
    def from_byte(cls, value: int) -> 'LinkFrameState':
        try:
            return cls(value)
        except ValueError:
            return cls.DEFAULT

    @property
    def display_name(self) -> str:
        return 'None' if self is LinkFrameState.DEFAULT else self.name.title()


_AK = AnimationKind
_AVAILABLE_ANIMATIONS = {
    HatKind.WEARABLE: (_AK.ON_DEFAULT, _AK.ON_PRESS_QUACK, _AK.ON_RELEASE_QUACK,
                       _AK.ON_DUCK_DEATH, _AK.ON_RESURRECT),
    HatKind.WINGS: (_AK.FLYING, _AK.START_IDLE, _AK.GLIDING, _AK.START_GLIDING, _AK.IDLE),
    HatKind.FLYING_PET: (_AK.ON_APPROACH, _AK.ON_DUCK_DEATH, _AK.ON_STATIC,
                         _AK.ON_DEFAULT, _AK.ON_RESURRECT),
    HatKind.WALKING_PET: (_AK.ON_APPROACH, _AK.ON_DUCK_DEATH, _AK.ON_STATIC,
                          _AK.ON_DEFAULT, _AK.ON_RESURRECT),
}


def available_animations(kind: HatKind) -> Tuple[AnimationKind, ...]:
    """Animation kinds the editor offers for an element kind"""
    return _AVAILABLE_ANIMATIONS.get(kind, ())


def classify_stem(name: str) -> Optional[HatKind]:
    """
    Map an element name (file stem with the size suffix removed) to its kind.

    Matching is case-insensitive: exact names for the unique kinds, substring
    matches for pets. Returns None for files that are not hat elements.
    """
    lowered = name.lower()
    for kind in UNIQUE_KINDS:
        if lowered == kind.save_name:
            return kind
    if HatKind.FLYING_PET.save_name in lowered:
        return HatKind.FLYING_PET
    if HatKind.WALKING_PET.save_name in lowered:
        return HatKind.WALKING_PET
    return None


def _is_big(frame_size: Tuple[int, int]) -> bool:
    return frame_size[0] > MIN_FRAME_SIZE or frame_size[1] > MIN_FRAME_SIZE


@dataclass(eq=False)
class HatElement:
    """
    Shared base of all element kinds.

    `art_area_size` is the sprite sheet part of the source PNG; `bitmap` is
    the source PNG as an RGBA array and `texture` an optional handle owned by
    the element (released through release()).
    """
    kind: ClassVar[HatKind]
    ANIMATED: ClassVar[bool] = False

    frame_size: Tuple[int, int] = (MIN_FRAME_SIZE, MIN_FRAME_SIZE)
    art_area_size: Tuple[int, int] = (0, 0)
    bitmap: Optional[np.ndarray] = field(default=None, repr=False)
    texture: Optional[Any] = field(default=None, repr=False)
    name: Optional[str] = None
    animations: List[Animation] = field(default_factory=list)
    id: ElementId = field(default_factory=next_element_id)

    # Loading

    @classmethod
    def default_frame_size(cls, art_area_size: Tuple[int, int]) -> Tuple[int, int]:
        return MIN_FRAME_SIZE, MIN_FRAME_SIZE

    @classmethod
    def from_bitmap(cls, bitmap: np.ndarray,
                    name_and_size: Optional[HatNameAndSize] = None) -> 'HatElement':
        """
        Build an element from a decoded PNG.

        Args:
            bitmap: RGBA array of the whole file
            name_and_size: Parsed file stem; without it the whole image is art

        Returns:
            Element with its metapixel fields and animations populated
        """
        name_and_size = name_and_size or HatNameAndSize(cls.kind.save_name)
        size = name_and_size.size or bitmap_size(bitmap)
        name = name_and_size.name if classify_stem(name_and_size.name) == cls.kind else None
        element = cls(
            frame_size=cls.default_frame_size(size),
            art_area_size=size,
            bitmap=bitmap,
            name=name,
        )
        element.apply_metapixels(read_metapixels(bitmap, size[0]))
        return element

    @classmethod
    def load(cls, path, texture_loader: Optional[TextureLoader] = None) -> 'HatElement':
        """
        Load an element from a PNG file

        Raises:
            OSError: The file could not be read or decoded
        """
        path = Path(path)
        bitmap = read_bitmap(path)
        element = cls.from_bitmap(bitmap, parse_name_and_size(file_stem(path)))
        if texture_loader is not None:
            element.texture = texture_loader(path)
        logger.debug("Loaded %s from %s", cls.kind.display_name, path)
        return element

    def apply_metapixels(self, metapixels: List[Metapixel]):
        """Populate fields from a decoded stream"""
        for index, pixel in enumerate(metapixels):
            if self.ANIMATED and pixel.op == OpCode.ANIMATION_TYPE:
                animation = extract_animation(metapixels, index)
                if animation is not None:
                    self.animations.append(animation)
            else:
                self.apply_metapixel(pixel)

    def apply_metapixel(self, pixel: Metapixel):
        if pixel.op == OpCode.FRAME_SIZE:
            self.frame_size = (pixel.a, pixel.b)

    # Saving

    def gen_metapixels(self) -> List[Metapixel]:
        return []

    def save_name(self) -> str:
        return self.name or self.kind.save_name

    def file_name(self, save_name: Optional[str] = None) -> str:
        width, height = self.art_area_size
        return f"{save_name or self.save_name()}_{width}_{height}.png"

    def compose(self) -> np.ndarray:
        """On-disk image: art area followed by the metapixel columns"""
        if self.bitmap is None:
            raise BundleIOError(f"unable to save {self.kind.display_name}: no bitmap found")
        return compose_bitmap(self.bitmap, self.art_area_size, self.gen_metapixels())

    def save(self, dir_path, save_name: Optional[str] = None) -> Path:
        """
        Write the element into a directory

        Returns:
            Path of the written PNG
        """
        path = Path(dir_path) / self.file_name(save_name)
        write_bitmap(self.compose(), path)
        return path

    # Queries

    @classmethod
    def frame_size_limits(cls) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """((min_w, max_w), (min_h, max_h)) accepted by set_frame_size()"""
        return (MIN_FRAME_SIZE, MAX_FRAME_SIZE), (MIN_FRAME_SIZE, MAX_FRAME_SIZE)

    def set_frame_size(self, width: int, height: int):
        (min_w, max_w), (min_h, max_h) = self.frame_size_limits()
        self.frame_size = (max(min_w, min(max_w, width)), max(min_h, min(max_h, height)))

    def frames_amount(self) -> int:
        """Number of whole frames the art area holds"""
        frame_w, frame_h = self.frame_size
        if frame_w <= 0 or frame_h <= 0:
            return 0
        art_w, art_h = self.art_area_size
        return (art_w // frame_w) * (art_h // frame_h)

    def available_animations(self) -> Tuple[AnimationKind, ...]:
        return available_animations(self.kind)

    def animation(self, kind: AnimationKind) -> Optional[Animation]:
        return next((a for a in self.animations if a.kind == kind), None)

    def can_add_animation(self) -> bool:
        available = self.available_animations()
        return any(self.animation(kind) is None for kind in available)

    def add_animation(self, kind: AnimationKind) -> Animation:
        if kind not in self.available_animations():
            raise ValueError(f"{kind.display_name} is not available for {self.kind.display_name}")
        if self.animation(kind) is not None:
            raise ValueError(f"{self.kind.display_name} already has a {kind.display_name} animation")
        animation = Animation(kind, DEFAULT_DELAY, False, [])
        self.animations.append(animation)
        return animation

    def remove_animation(self, kind: AnimationKind) -> Optional[Animation]:
        animation = self.animation(kind)
        if animation is not None:
            self.animations.remove(animation)
        return animation

    def replace_image(self, bitmap: np.ndarray, art_area_size: Optional[Tuple[int, int]] = None):
        """
        Swap the art of the element while keeping every parsed field.

        The metapixel columns are rebuilt from the new height on save, so any
        height holds the existing stream.

        Raises:
            InvalidBundleError: The art area does not fit in the new image
        """
        width, height = bitmap_size(bitmap)
        size = tuple(art_area_size) if art_area_size else (width, height)
        if size[0] > width or size[1] > height:
            raise InvalidBundleError(
                f"art area {size[0]}x{size[1]} does not fit in a {width}x{height} image")
        self.bitmap = bitmap
        self.art_area_size = size

    # Resources

    def release(self):
        """Release the texture handle; safe to call more than once"""
        texture, self.texture = self.texture, None
        if texture is not None:
            texture.delete()

    def _animations_metapixels(self, metapixels: Metapixels):
        for animation in self.animations:
            metapixels.push_many(animation.gen_metapixels())


@dataclass(eq=False)
class Wearable(HatElement):
    kind: ClassVar[HatKind] = HatKind.WEARABLE
    ANIMATED: ClassVar[bool] = True

    strapped_on: bool = False
    is_big: bool = False
    on_spawn_animation: Optional[AnimationKind] = None
    link_frame_state: LinkFrameState = LinkFrameState.DEFAULT

    def apply_metapixel(self, pixel: Metapixel):
        op = pixel.op
        if op == OpCode.STRAPPED_ON:
            self.strapped_on = True
        elif op == OpCode.IS_BIG_HAT:
            self.is_big = True
        elif op == OpCode.ON_SPAWN_ANIMATION:
            self.on_spawn_animation = AnimationKind.from_byte(pixel.a)
        elif op == OpCode.LINK_FRAME_STATE:
            self.link_frame_state = LinkFrameState.from_byte(pixel.a)
        else:
            super().apply_metapixel(pixel)

    def gen_metapixels(self) -> List[Metapixel]:
        metapixels = Metapixels()
        if self.strapped_on:
            metapixels.push(OpCode.STRAPPED_ON)
        if self.is_big or _is_big(self.frame_size):
            metapixels.push(OpCode.IS_BIG_HAT)
        metapixels.push(OpCode.FRAME_SIZE, *self.frame_size)
        if self.on_spawn_animation is not None:
            metapixels.push(OpCode.ON_SPAWN_ANIMATION, int(self.on_spawn_animation))
        if self.link_frame_state != LinkFrameState.DEFAULT:
            metapixels.push(OpCode.LINK_FRAME_STATE, int(self.link_frame_state))
        self._animations_metapixels(metapixels)
        return metapixels.pixels


# Emit order of the wings offsets
WINGS_OFFSETS = (
    ('general_offset', OpCode.WINGS_GENERAL_OFFSET),
    ('crouch_offset', OpCode.WINGS_CROUCH_OFFSET),
    ('ragdoll_offset', OpCode.WINGS_RAGDOLL_OFFSET),
    ('slide_offset', OpCode.WINGS_SLIDE_OFFSET),
    ('net_offset', OpCode.WINGS_NET_OFFSET),
)
_WINGS_OFFSET_BY_OP = {op: attr for attr, op in WINGS_OFFSETS}


@dataclass(eq=False)
class Wings(HatElement):
    """
    Wings element. Offsets hold the raw wire bytes (128 means no offset);
    use signed_offset() for the centred view. auto_glide_frame and
    auto_idle_frame are 1-based, 0 idle frame meaning unset.
    """
    kind: ClassVar[HatKind] = HatKind.WINGS
    ANIMATED: ClassVar[bool] = True

    general_offset: Tuple[int, int] = DEFAULT_WINGS_OFFSET
    crouch_offset: Tuple[int, int] = DEFAULT_WINGS_OFFSET
    ragdoll_offset: Tuple[int, int] = DEFAULT_WINGS_OFFSET
    slide_offset: Tuple[int, int] = DEFAULT_WINGS_OFFSET
    net_offset: Tuple[int, int] = DEFAULT_WINGS_OFFSET
    gen_animations: bool = False
    auto_glide_frame: Optional[int] = None
    auto_idle_frame: int = DEFAULT_WINGS_IDLE_FRAME
    auto_anim_speed: int = DEFAULT_AUTO_SPEED
    changes_animations: bool = False
    size_state: bool = False

    def __post_init__(self):
        if self.auto_glide_frame is None:
            self.auto_glide_frame = self.frames_amount()

    def signed_offset(self, attr: str) -> Tuple[int, int]:
        x, y = getattr(self, attr)
        return x - WINGS_OFFSET_BIAS, y - WINGS_OFFSET_BIAS

    def set_signed_offset(self, attr: str, offset: Tuple[int, int]):
        setattr(self, attr, (offset[0] + WINGS_OFFSET_BIAS, offset[1] + WINGS_OFFSET_BIAS))

    def set_auto_anim_speed(self, speed: int):
        """Change the generated animation speed, keeping the preview animation in sync"""
        self.auto_anim_speed = speed
        for animation in self.animations:
            animation.set_delay(speed)

    def apply_metapixels(self, metapixels: List[Metapixel]):
        has_glide_frame = False
        for pixel in metapixels:
            op = pixel.op
            if op in _WINGS_OFFSET_BY_OP:
                setattr(self, _WINGS_OFFSET_BY_OP[op], (pixel.a, pixel.b))
            elif op == OpCode.GENERATE_WINGS_ANIMATIONS:
                self.gen_animations = True
            elif op == OpCode.WINGS_AUTO_GLIDE_FRAME:
                self.auto_glide_frame = min(pixel.a + 1, 255)
                has_glide_frame = True
            elif op == OpCode.WINGS_AUTO_IDLE_FRAME:
                self.auto_idle_frame = min(pixel.a + 1, 255)
            elif op == OpCode.WINGS_AUTO_ANIMATIONS_SPEED:
                self.auto_anim_speed = pixel.a
            elif op == OpCode.CHANGE_ANIMATIONS_EVERY_LEVEL:
                self.changes_animations = True
            elif op == OpCode.IS_BIG_HAT:
                self.size_state = True
            else:
                self.apply_metapixel(pixel)

        if not has_glide_frame:
            self.auto_glide_frame = self.frames_amount()
        frames_amount = self.frames_amount()
        frames = frames_from_range(0, frames_amount - 1) if frames_amount else []
        self.animations = [
            Animation(AnimationKind.ON_DEFAULT, self.auto_anim_speed, False, to_frames(frames))
        ]

    def gen_metapixels(self) -> List[Metapixel]:
        metapixels = Metapixels()
        for attr, op in WINGS_OFFSETS:
            offset = getattr(self, attr)
            if tuple(offset) != DEFAULT_WINGS_OFFSET:
                metapixels.push(op, *offset)
        if self.size_state or _is_big(self.frame_size):
            metapixels.push(OpCode.IS_BIG_HAT)
        if self.gen_animations:
            metapixels.push(OpCode.GENERATE_WINGS_ANIMATIONS)
        if self.changes_animations:
            metapixels.push(OpCode.CHANGE_ANIMATIONS_EVERY_LEVEL)
        if self.auto_anim_speed != DEFAULT_AUTO_SPEED:
            metapixels.push(OpCode.WINGS_AUTO_ANIMATIONS_SPEED, self.auto_anim_speed)
        # glide and idle frames are 1-based in the model, 0-based on the wire
        if self.auto_glide_frame != self.frames_amount():
            metapixels.push(OpCode.WINGS_AUTO_GLIDE_FRAME, max(self.auto_glide_frame - 1, 0))
        if self.auto_idle_frame != DEFAULT_WINGS_IDLE_FRAME:
            metapixels.push(OpCode.WINGS_AUTO_IDLE_FRAME, max(self.auto_idle_frame - 1, 0))
        metapixels.push(OpCode.FRAME_SIZE, *self.frame_size)
        return metapixels.pixels


@dataclass(eq=False)
class Extra(HatElement):
    kind: ClassVar[HatKind] = HatKind.EXTRA
    ANIMATED: ClassVar[bool] = True

    @classmethod
    def default_frame_size(cls, art_area_size: Tuple[int, int]) -> Tuple[int, int]:
        return min(art_area_size[0], MAX_EXTRA_SIZE[0]), min(art_area_size[1], MAX_EXTRA_SIZE[1])

    @classmethod
    def frame_size_limits(cls) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        return (MIN_FRAME_SIZE, MAX_EXTRA_SIZE[0]), (MIN_FRAME_SIZE, MAX_EXTRA_SIZE[1])

    def apply_metapixels(self, metapixels: List[Metapixel]):
        for pixel in metapixels:
            self.apply_metapixel(pixel)
        frames_amount = self.frames_amount()
        frames = frames_from_range(0, frames_amount - 1) if frames_amount else []
        self.animations = [
            Animation(AnimationKind.ON_DEFAULT, DEFAULT_DELAY, False, to_frames(frames))
        ]

    def gen_metapixels(self) -> List[Metapixel]:
        metapixels = Metapixels()
        metapixels.push(OpCode.FRAME_SIZE, *self.frame_size)
        return metapixels.pixels


@dataclass(eq=False)
class PetElement(HatElement):
    """Fields shared by flying and walking pets"""
    ANIMATED: ClassVar[bool] = True

    distance: int = DEFAULT_PET_DISTANCE
    flipped: bool = True
    is_big: bool = False
    link_frame_state: LinkFrameState = LinkFrameState.DEFAULT

    def apply_metapixel(self, pixel: Metapixel):
        op = pixel.op
        if op == OpCode.PET_DISTANCE:
            self.distance = pixel.a
        elif op == OpCode.PET_NO_FLIP:
            self.flipped = False
        elif op == OpCode.IS_BIG_HAT:
            self.is_big = True
        elif op == OpCode.LINK_FRAME_STATE:
            self.link_frame_state = LinkFrameState.from_byte(pixel.a)
        else:
            super().apply_metapixel(pixel)

    def _pet_metapixels(self, metapixels: Metapixels):
        if self.distance != DEFAULT_PET_DISTANCE:
            metapixels.push(OpCode.PET_DISTANCE, self.distance)
        if not self.flipped:
            metapixels.push(OpCode.PET_NO_FLIP)
        if self.is_big or _is_big(self.frame_size):
            metapixels.push(OpCode.IS_BIG_HAT)
        metapixels.push(OpCode.FRAME_SIZE, *self.frame_size)
        if self.link_frame_state != LinkFrameState.DEFAULT:
            metapixels.push(OpCode.LINK_FRAME_STATE, int(self.link_frame_state))

    def gen_metapixels(self) -> List[Metapixel]:
        metapixels = Metapixels()
        self._pet_metapixels(metapixels)
        self._animations_metapixels(metapixels)
        return metapixels.pixels


@dataclass(eq=False)
class FlyingPet(PetElement):
    kind: ClassVar[HatKind] = HatKind.FLYING_PET

    changes_angle: bool = False
    speed: int = DEFAULT_PET_SPEED

    def apply_metapixel(self, pixel: Metapixel):
        if pixel.op == OpCode.PET_CHANGES_ANGLE:
            self.changes_angle = True
        elif pixel.op == OpCode.PET_SPEED:
            self.speed = pixel.a
        else:
            super().apply_metapixel(pixel)

    def gen_metapixels(self) -> List[Metapixel]:
        metapixels = Metapixels()
        self._pet_metapixels(metapixels)
        if self.changes_angle:
            metapixels.push(OpCode.PET_CHANGES_ANGLE)
        if self.speed != DEFAULT_PET_SPEED:
            metapixels.push(OpCode.PET_SPEED, self.speed)
        self._animations_metapixels(metapixels)
        return metapixels.pixels


@dataclass(eq=False)
class WalkingPet(PetElement):
    kind: ClassVar[HatKind] = HatKind.WALKING_PET


@dataclass(eq=False)
class Room(HatElement):
    kind: ClassVar[HatKind] = HatKind.ROOM

    @classmethod
    def default_frame_size(cls, art_area_size: Tuple[int, int]) -> Tuple[int, int]:
        return tuple(art_area_size)

    def apply_metapixels(self, metapixels: List[Metapixel]):
        pass

    def replace_image(self, bitmap: np.ndarray, art_area_size: Optional[Tuple[int, int]] = None):
        super().replace_image(bitmap, art_area_size)
        self.frame_size = self.art_area_size


@dataclass(eq=False)
class Preview(HatElement):
    kind: ClassVar[HatKind] = HatKind.PREVIEW

    @classmethod
    def from_bitmap(cls, bitmap: np.ndarray,
                    name_and_size: Optional[HatNameAndSize] = None) -> 'HatElement':
        # the whole image is the preview, size suffixes are ignored
        name = name_and_size.name if name_and_size else None
        return super().from_bitmap(bitmap, HatNameAndSize(name or cls.kind.save_name))

    def apply_metapixels(self, metapixels: List[Metapixel]):
        pass


ELEMENT_CLASSES: Dict[HatKind, Type[HatElement]] = {
    cls.kind: cls for cls in (Wearable, Wings, Extra, FlyingPet, WalkingPet, Room, Preview)
}


def element_class(kind: HatKind) -> Type[HatElement]:
    return ELEMENT_CLASSES[kind]


def load_element(kind: HatKind, path,
                 texture_loader: Optional[TextureLoader] = None) -> HatElement:
    """Load a PNG as an element of the given kind, whatever its file name"""
    return element_class(kind).load(path, texture_loader)
