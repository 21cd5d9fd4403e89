from __future__ import annotations
from typing import Sequence

import numpy as np

from .features import fit_vector
from .model.contract import ModelContract, TensorLayout

def pad_sequence(sequence: Sequence[np.ndarray], seq_len: int, feat_dim: int) -> np.ndarray:
    """Fit a variable-length sequence to exactly (seq_len, feat_dim).

    Longer sequences keep their most recent seq_len frames. Shorter ones repeat the
    last available frame; an empty sequence becomes all zeros.
    """
    out = np.zeros((seq_len, feat_dim), dtype=np.float32)
    tail = list(sequence)[-seq_len:]
    for i, v in enumerate(tail):
        out[i] = fit_vector(v, feat_dim)
    if tail and len(tail) < seq_len:
        out[len(tail):] = out[len(tail) - 1]
    return out

def assemble(sequence: Sequence[np.ndarray], contract: ModelContract) -> np.ndarray:
    """Pack a window into the tensor layout the model expects.

    RANK2 -> [N, F], RANK3 -> [1, N, F], RANK4 -> [1, N, F, 1]. An UNSUPPORTED
    layout is packed as [N, F]; the contract carries the warning for the caller.
    """
    x = pad_sequence(sequence, contract.seq_len, contract.feat_dim)
    layout = contract.layout
    if layout is TensorLayout.RANK3:
        return x[None, :, :]
    if layout is TensorLayout.RANK4:
        return x[None, :, :, None]
    if layout in (TensorLayout.RANK2, TensorLayout.UNSUPPORTED):
        return x
    raise AssertionError(f"unhandled layout {layout}")
