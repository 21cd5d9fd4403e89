from __future__ import annotations
import os
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .results import ClassifyResult, InsufficientFrames, OutputSizeMismatch, Prediction, result_kind

def load_feature_sequence(npy_path: str) -> np.ndarray:
    """(T, F) float32 array of per-frame feature vectors. A 1-D array is one frame."""
    arr = np.load(npy_path)
    if arr.ndim == 1:
        arr = arr[None, :]
    elif arr.ndim != 2:
        raise ValueError(f"{npy_path}: expected shape (T, F), got {arr.shape}")
    return arr.astype(np.float32)

def format_alternatives(pred: Prediction) -> str:
    return "|".join(f"{label}:{score:.3f}" for label, score in pred.alternatives)

def result_row(result: ClassifyResult, **extra) -> dict:
    row = dict(extra)
    row.update(kind=result_kind(result), label=None, confidence=np.nan, index=np.nan, status=str(result))
    if isinstance(result, Prediction):
        row.update(label=result.label, confidence=result.confidence, index=result.index,
                   top3=format_alternatives(result))
    elif isinstance(result, OutputSizeMismatch):
        row.update(index=result.index)
    elif isinstance(result, InsufficientFrames):
        row.update(progress=result.progress)
    return row

def results_frame(results: Iterable[ClassifyResult], start: int = 0) -> pd.DataFrame:
    return pd.DataFrame([result_row(r, frame=start + i) for i, r in enumerate(results)])

def save_predictions(df: pd.DataFrame, path: Optional[str]) -> None:
    if not path:
        return
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    df.to_csv(path, index=False)
