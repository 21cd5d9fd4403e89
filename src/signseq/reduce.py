from __future__ import annotations
import logging
from typing import List, Sequence, Tuple, Union

import numpy as np

from .results import OutputSizeMismatch, Prediction

LOGGER = logging.getLogger(__name__)

def flatten_scores(output) -> np.ndarray:
    """Per-class score vector from a raw model output.

    Leading batch dims and trailing channel dims of size 1 are stripped, so
    [C], [1, C] and [1, C, 1] all give C scores. If more than one row remains,
    the first row is used and a warning is logged.
    """
    y = np.asarray(output, dtype=np.float32)
    while y.ndim > 1 and y.shape[0] == 1:
        y = y[0]
    while y.ndim > 1 and y.shape[-1] == 1:
        y = y[..., 0]
    if y.ndim > 1:
        LOGGER.warning("output shape %s has %d rows; reducing the first", list(y.shape), y.shape[0])
        y = y.reshape(y.shape[0], -1)[0]
    return y.reshape(-1)

def stable_argmax(scores: np.ndarray) -> int:
    # np.argmax returns the first occurrence on ties
    if scores.size == 0:
        return -1
    return int(np.argmax(scores))

def reduce_output(output, labels: Sequence[str]) -> Union[Prediction, OutputSizeMismatch]:
    scores = flatten_scores(output)
    idx = stable_argmax(scores)
    if idx < 0 or idx >= len(labels):
        LOGGER.warning("arg-max index %d outside label table (outputs=%d, labels=%d)",
                       idx, scores.size, len(labels))
        return OutputSizeMismatch(index=idx, output_size=int(scores.size), label_count=len(labels))
    return Prediction(label=labels[idx], confidence=float(scores[idx]), index=idx)

def top_k(output, labels: Sequence[str], k: int = 3) -> List[Tuple[str, float]]:
    """Highest-scoring (label, score) pairs; indices without a label are reported as '#<idx>'."""
    scores = flatten_scores(output)
    order = np.argsort(-scores, kind="stable")[:max(0, k)]
    return [(labels[i] if i < len(labels) else f"#{i}", float(scores[i])) for i in order]
