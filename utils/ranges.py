"""
Frame ranges
Helpers for contiguous frame runs used by range compression
"""

from typing import List, Sequence


def is_range(frames: Sequence[int]) -> bool:
    """
    Check whether the values form one run stepping by +1 or by -1 throughout.

    Ascending (1, 2, 3) and descending (4, 3, 2) runs count, a direction
    change such as (1, 2, 1) does not. Lists with fewer than two values are
    trivially a range.
    """
    if len(frames) < 2:
        return True
    step = frames[1] - frames[0]
    if step not in (1, -1):
        return False
    return all(b - a == step for a, b in zip(frames, frames[1:]))


def frames_from_range(start: int, end: int) -> List[int]:
    """
    Expand range endpoints into a frame list

    Args:
        start: First frame (inclusive)
        end: Last frame (inclusive)

    Returns:
        Ascending list when start <= end, descending otherwise
    """
    if start > end:
        return list(range(start, end - 1, -1))
    return list(range(start, end + 1))
