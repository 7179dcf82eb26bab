"""
Animation Player
Headless playback of element animations for previews: frame timing at the
game's tick rate and animation switching driven by the quack key.
"""

from enum import Enum
from typing import List, Optional

from .animations import Animation, AnimationKind
from .hats import LinkFrameState

GAME_HERTZ = 60.0


class QuackState(Enum):
    """Key state seen by the preview on each frame"""
    NONE = "none"
    PRESSED = "pressed"
    DOWN = "down"
    RELEASED = "released"


class QuackInput:
    """Tracks the quack key through NONE -> PRESSED -> DOWN -> RELEASED"""

    def __init__(self):
        self.state = QuackState.NONE

    def update(self, pressed: bool, down: bool) -> QuackState:
        """
        Advance one frame

        Args:
            pressed: The key went down this frame
            down: The key is currently held
        """
        state = self.state
        if state in (QuackState.NONE, QuackState.RELEASED):
            self.state = QuackState.PRESSED if pressed else QuackState.NONE
        else:
            self.state = QuackState.DOWN if down else QuackState.RELEASED
        return self.state


class AnimChangeBehaviour(Enum):
    """What happens to the frame index when the animation changes"""
    RESET = "reset"
    KEEP = "keep"
    REVERSE = "reverse"


def behaviour_for(link_frame_state: LinkFrameState) -> AnimChangeBehaviour:
    return {
        LinkFrameState.DEFAULT: AnimChangeBehaviour.RESET,
        LinkFrameState.SAVED: AnimChangeBehaviour.KEEP,
        LinkFrameState.INVERTED: AnimChangeBehaviour.REVERSE,
    }[link_frame_state]


class AnimationPlayer:
    """Steps through the frames of one element's animations"""

    def __init__(self, animations: Optional[List[Animation]] = None):
        self.animations: List[Animation] = list(animations or [])
        self.anim_index: int = 0
        self.frame_index: int = 0
        self.frame_timer: float = 0.0
        self.paused: bool = False

    @property
    def animation(self) -> Optional[Animation]:
        if not self.animations:
            return None
        self.anim_index = min(self.anim_index, len(self.animations) - 1)
        return self.animations[self.anim_index]

    def current_frame(self) -> int:
        """Sprite sheet index currently shown (0 without frames)"""
        animation = self.animation
        if animation is None or not animation.frames:
            return 0
        return animation.frames[min(self.frame_index, len(animation.frames) - 1)].value

    def set_animation(self, kind: AnimationKind, behaviour: AnimChangeBehaviour) -> bool:
        """
        Switch to the animation of a kind

        Returns:
            False if there is no animation of that kind
        """
        for index, animation in enumerate(self.animations):
            if animation.kind == kind:
                break
        else:
            return False

        if behaviour == AnimChangeBehaviour.RESET:
            self.frame_index = 0
        elif behaviour == AnimChangeBehaviour.REVERSE:
            self.frame_index = max(len(animation.frames) - 1 - self.frame_index, 0)
        self.paused = False
        self.anim_index = index
        return True

    def on_quack(self, state: QuackState, link_frame_state: LinkFrameState) -> bool:
        """Apply the animation change a quack key state triggers"""
        behaviour = behaviour_for(link_frame_state)
        if state == QuackState.PRESSED:
            return self.set_animation(AnimationKind.ON_PRESS_QUACK, behaviour)
        if state == QuackState.RELEASED:
            return self.set_animation(AnimationKind.ON_RELEASE_QUACK, behaviour)
        return False

    def update(self, hertz: float = GAME_HERTZ):
        """
        Advance by one rendered frame

        Args:
            hertz: Display refresh rate; game delays are in 60 Hz ticks
        """
        animation = self.animation
        if animation is None or self.paused:
            return
        if not animation.frames:
            self.frame_index = 0
            return

        last = len(animation.frames) - 1
        self.frame_index = min(self.frame_index, last)
        if self.frame_index == last and not animation.looping:
            self.paused = True
            return

        self.frame_timer += GAME_HERTZ / max(hertz, 0.01)
        if self.frame_timer >= animation.delay:
            self.frame_timer = 0.0
            self.frame_index = (self.frame_index + 1) % len(animation.frames)
