"""
Core module for the Hat Pack Editor
Contains the metapixel codec, hat elements, bundles and the editor session
"""

from .errors import HatPackError, BundleIOError, InvalidBundleError
from .metapixels import OpCode, Metapixel, Metapixels
from .animations import AnimationKind, Animation, Frame
from .hats import (
    HatKind,
    LinkFrameState,
    HatElement,
    Wearable,
    Wings,
    Extra,
    FlyingPet,
    WalkingPet,
    Room,
    Preview,
    load_element,
)
from .bundle import HatBundle
from .animation_player import AnimationPlayer, QuackInput, QuackState
from .session import HatSession

__all__ = [
    'HatPackError',
    'BundleIOError',
    'InvalidBundleError',
    'OpCode',
    'Metapixel',
    'Metapixels',
    'AnimationKind',
    'Animation',
    'Frame',
    'HatKind',
    'LinkFrameState',
    'HatElement',
    'Wearable',
    'Wings',
    'Extra',
    'FlyingPet',
    'WalkingPet',
    'Room',
    'Preview',
    'load_element',
    'HatBundle',
    'AnimationPlayer',
    'QuackInput',
    'QuackState',
    'HatSession',
]
