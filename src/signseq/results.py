"""Result values returned by a classification call.

Every call resolves to exactly one of these; none of them is raised.
`InsufficientFrames` is the expected state while a window fills and is not
an error. The others except `Prediction` are terminal for that call only.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union

@dataclass(frozen=True)
class Prediction:
    label: str
    confidence: float
    index: int = -1
    warnings: Tuple[str, ...] = ()
    alternatives: Tuple[Tuple[str, float], ...] = ()   # top-ranked (label, score) pairs
    ok = True

    def __str__(self) -> str:
        return f"{self.label} ({self.confidence * 100:.2f}%)"

@dataclass(frozen=True)
class InsufficientFrames:
    have: int
    need: int
    ok = False

    @property
    def progress(self) -> float:
        return self.have / float(self.need) if self.need else 1.0

    def __str__(self) -> str:
        return f"Collecting frames... ({self.have}/{self.need})"

@dataclass(frozen=True)
class ModelUnavailable:
    reason: str = "model not loaded"
    ok = False

    def __str__(self) -> str:
        return f"Model unavailable: {self.reason}"

@dataclass(frozen=True)
class OutputSizeMismatch:
    index: int
    output_size: int
    label_count: int
    ok = False

    def __str__(self) -> str:
        return (f"Unknown prediction (index: {self.index}, predictions: {self.output_size}, "
                f"labels: {self.label_count})")

@dataclass(frozen=True)
class RuntimeFailure:
    cause: str
    error_type: str = "Exception"
    ok = False

    def __str__(self) -> str:
        return f"Classification error: {self.error_type}: {self.cause}"

ClassifyResult = Union[Prediction, InsufficientFrames, ModelUnavailable, OutputSizeMismatch, RuntimeFailure]

def result_kind(result: ClassifyResult) -> str:
    return type(result).__name__
