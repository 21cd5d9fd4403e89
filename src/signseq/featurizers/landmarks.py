from __future__ import annotations
import logging
from typing import Any, Callable, Optional

import numpy as np

from ..config import FallbackConfig
from ..features import fallback_vector, fit_vector

LOGGER = logging.getLogger(__name__)

class LandmarkFeaturizer:
    """Interface for the per-frame landmark extractor.

    Implement `extract` to turn one raw frame into a flat feature vector. The
    pipeline never inspects frames itself; detection failures are handled by
    `safe_extract` with the configured fallback vector.
    """
    def __init__(self, feat_dim: int, fallback: Optional[FallbackConfig] = None):
        self.feat_dim = feat_dim
        self.fallback = fallback or FallbackConfig()
        self._rng = np.random.default_rng(self.fallback.seed)

    def extract(self, frame: Any) -> np.ndarray:
        """Return the feature vector for one frame."""
        raise NotImplementedError

    def fallback_features(self) -> np.ndarray:
        return fallback_vector(self.feat_dim, mode=self.fallback.mode,
                               scale=self.fallback.noise_scale, rng=self._rng)

    def safe_extract(self, frame: Any) -> np.ndarray:
        try:
            v = self.extract(frame)
        except Exception as e:
            LOGGER.warning("feature extraction failed (%s); using %s fallback", e, self.fallback.mode)
            return self.fallback_features()
        if v is None:
            return self.fallback_features()
        return fit_vector(v, self.feat_dim)

class CallableFeaturizer(LandmarkFeaturizer):
    """Adapt a plain `frame -> vector` function."""
    def __init__(self, fn: Callable[[Any], Any], feat_dim: int, fallback: Optional[FallbackConfig] = None):
        super().__init__(feat_dim, fallback)
        self.fn = fn

    def extract(self, frame: Any) -> np.ndarray:
        return np.asarray(self.fn(frame), dtype=np.float32)

class PassthroughFeaturizer(LandmarkFeaturizer):
    """Frames that are already feature vectors (e.g. rows of a recorded .npy)."""
    def extract(self, frame: Any) -> np.ndarray:
        return np.asarray(frame, dtype=np.float32)
