"""
Id registries
Process-wide monotonic counters for frame and element identifiers.

The identifiers are never serialized. They only exist so that a UI can
track list items (frames) and bundle members (elements) across edits.
"""

import itertools
import threading
from typing import NewType

FrameId = NewType('FrameId', int)
ElementId = NewType('ElementId', int)


class IdSource:
    """Monotonic id counter, safe to share between threads"""

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


_FRAME_IDS = IdSource()
_ELEMENT_IDS = IdSource()


def next_frame_id() -> FrameId:
    return FrameId(_FRAME_IDS.next())


def next_element_id() -> ElementId:
    return ElementId(_ELEMENT_IDS.next())
