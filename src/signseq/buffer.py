from __future__ import annotations
import threading
from collections import deque
from typing import Deque, List, Optional, Sequence

import numpy as np

from .features import fit_vector

class FrameWindow:
    """Bounded FIFO of the most recent feature vectors.

    A single lock guards the deque, so a consumer calling `snapshot` never sees a
    half-applied push. Stored vectors are read-only copies.
    """

    def __init__(self, capacity: int, feat_dim: Optional[int] = None):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = int(capacity)
        self.feat_dim = feat_dim
        self._items: Deque[np.ndarray] = deque(maxlen=self.capacity)
        self._lock = threading.Lock()

    def push(self, vector: Sequence[float] | np.ndarray) -> int:
        """Append to the tail, evicting from the head past capacity. Returns the new size."""
        if self.feat_dim is not None:
            v = fit_vector(vector, self.feat_dim)
        else:
            v = np.array(vector, dtype=np.float32).reshape(-1)
        v.setflags(write=False)
        with self._lock:
            self._items.append(v)
            return len(self._items)

    def snapshot(self) -> List[np.ndarray]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._items)

    def is_full(self) -> bool:
        return self.size() >= self.capacity

    def progress(self) -> float:
        return self.size() / float(self.capacity)

    def __len__(self) -> int:
        return self.size()
