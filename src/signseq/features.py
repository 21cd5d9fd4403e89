from __future__ import annotations
import numpy as np
from typing import Optional, Sequence

# pose (25 kept landmarks x [x,y,z,visibility]) + left/right hand (21 x [x,y,z])
POSE_KEPT_LM = 25
HAND_LM = 21
POSE_HANDS_DIM = POSE_KEPT_LM * 4 + HAND_LM * 3 * 2      # 226

# full holistic: pose 33x4 + face 468x3 + hands 2x21x3
HOLISTIC_DIM = 33 * 4 + 468 * 3 + HAND_LM * 3 * 2        # 1662

FALLBACK_MODES = ("zeros", "noise")

def fit_vector(values: Sequence[float] | np.ndarray, feat_dim: int) -> np.ndarray:
    """Zero-pad on the right or truncate so the result has exactly feat_dim values."""
    x = np.asarray(values, dtype=np.float32).reshape(-1)
    out = np.zeros(feat_dim, dtype=np.float32)
    m = min(x.shape[0], feat_dim)
    out[:m] = x[:m]
    return out

def fallback_vector(
    feat_dim: int,
    mode: str = "zeros",
    scale: float = 0.1,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Placeholder vector used when landmark extraction fails.

    'zeros' is an all-zero frame. 'noise' draws uniform values in [-scale, scale],
    which keeps recurrent models from seeing a perfectly flat input.
    """
    if mode == "zeros":
        return np.zeros(feat_dim, dtype=np.float32)
    if mode == "noise":
        rng = rng or np.random.default_rng()
        return rng.uniform(-scale, scale, size=feat_dim).astype(np.float32)
    raise ValueError(f"unknown fallback mode '{mode}', expected one of {FALLBACK_MODES}")
