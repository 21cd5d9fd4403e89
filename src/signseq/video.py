from __future__ import annotations
from typing import List, Sequence, TypeVar

T = TypeVar("T")

def sample_indices(n_frames: int, target: int) -> List[int]:
    """Evenly spaced indices floor(i * n_frames / target) for i in [0, target)."""
    if target <= 0:
        return []
    if n_frames <= target:
        return list(range(n_frames))
    return [(i * n_frames) // target for i in range(target)]

def resample(frames: Sequence[T], target: int) -> List[T]:
    """Pick `target` frames evenly across a clip, keeping temporal order.

    Clips with at most `target` frames come back unchanged; raw frames are never
    padded, the caller reports the shortfall instead.
    """
    if len(frames) <= target:
        return list(frames)
    return [frames[i] for i in sample_indices(len(frames), target)]
