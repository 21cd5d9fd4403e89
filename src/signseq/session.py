from __future__ import annotations
import dataclasses
import enum
import logging
from typing import Any, List, Optional, Sequence

import numpy as np

from .assemble import assemble
from .buffer import FrameWindow
from .config import DEFAULT_FEAT_DIM, DEFAULT_LABELS, DEFAULT_SEQ_LEN, FallbackConfig
from .featurizers.landmarks import LandmarkFeaturizer, PassthroughFeaturizer
from .invoke import Invoker
from .model.contract import ModelContract
from .model.runtime import ModelRuntime
from .reduce import reduce_output, top_k
from .results import ClassifyResult, InsufficientFrames, ModelUnavailable, Prediction
from .video import resample

LOGGER = logging.getLogger(__name__)

class SessionState(enum.Enum):
    EMPTY = "empty"
    COLLECTING = "collecting"
    READY = "ready"

class ClassificationSession:
    """One caller-owned classification session: live window + model + labels.

    `push`/`process` may be called from a producer thread while `classify` or
    `classify_video` run elsewhere; the window is the only shared mutable state
    and inference never holds its lock.
    """

    n_alternatives = 3

    def __init__(
        self,
        runtime: Optional[ModelRuntime],
        contract: ModelContract,
        labels: Sequence[str] = DEFAULT_LABELS,
        featurizer: Optional[LandmarkFeaturizer] = None,
        fallback: Optional[FallbackConfig] = None,
    ):
        self.contract = contract
        self.labels = tuple(labels)
        self.window = FrameWindow(contract.seq_len, contract.feat_dim)
        self.invoker = Invoker(runtime, contract)
        self.featurizer = featurizer or PassthroughFeaturizer(contract.feat_dim, fallback)
        self.config_warnings: List[str] = list(contract.warnings)
        if contract.output_size is not None and contract.output_size != len(self.labels):
            self.config_warnings.append(
                f"model declares {contract.output_size} outputs but label table has {len(self.labels)} entries")
        for w in self.config_warnings[len(contract.warnings):]:
            LOGGER.warning(w)
        self._closed = False

    @classmethod
    def create(
        cls,
        runtime: Optional[ModelRuntime],
        labels: Sequence[str] = DEFAULT_LABELS,
        featurizer: Optional[LandmarkFeaturizer] = None,
        seq_len: int = DEFAULT_SEQ_LEN,
        feat_dim: int = DEFAULT_FEAT_DIM,
        fallback: Optional[FallbackConfig] = None,
    ) -> "ClassificationSession":
        """Derive the contract from the runtime's declared shapes, falling back to seq_len/feat_dim."""
        if runtime is None:
            contract = ModelContract.default(seq_len, feat_dim)
        else:
            contract = ModelContract.from_shapes(runtime.input_shape, runtime.output_shape,
                                                 default_seq_len=seq_len, default_feat_dim=feat_dim)
        return cls(runtime, contract, labels=labels, featurizer=featurizer, fallback=fallback)

    # ---------- window ----------

    @property
    def seq_len(self) -> int:
        return self.contract.seq_len

    @property
    def state(self) -> SessionState:
        n = self.window.size()
        if n == 0:
            return SessionState.EMPTY
        if n < self.seq_len:
            return SessionState.COLLECTING
        return SessionState.READY

    def progress(self) -> InsufficientFrames:
        return InsufficientFrames(have=self.window.size(), need=self.seq_len)

    def push(self, vector) -> int:
        return self.window.push(vector)

    def push_frame(self, frame: Any) -> int:
        return self.window.push(self.featurizer.safe_extract(frame))

    def clear(self) -> None:
        self.window.clear()

    # ---------- classification ----------

    def classify(self) -> ClassifyResult:
        """Classify the current window; partial windows are reported, never submitted."""
        if not self.invoker.available:
            return self._unavailable()
        seq = self.window.snapshot()
        if len(seq) < self.seq_len:
            return InsufficientFrames(have=len(seq), need=self.seq_len)
        return self._run(seq)

    def process(self, vector) -> ClassifyResult:
        """Live per-frame call: push one feature vector, then classify."""
        if not self.invoker.available:
            return self._unavailable()
        self.window.push(vector)
        return self.classify()

    def process_frame(self, frame: Any) -> ClassifyResult:
        if not self.invoker.available:
            return self._unavailable()
        self.push_frame(frame)
        return self.classify()

    def classify_video(self, frames: Sequence[Any],
                       featurizer: Optional[LandmarkFeaturizer] = None) -> ClassifyResult:
        """Classify a pre-collected clip without touching the live window."""
        if not self.invoker.available:
            return self._unavailable()
        if len(frames) < self.seq_len:
            LOGGER.info("clip too short: %d frames, need %d", len(frames), self.seq_len)
            return InsufficientFrames(have=len(frames), need=self.seq_len)
        featurizer = featurizer or self.featurizer
        selected = resample(frames, self.seq_len)
        LOGGER.debug("clip: %d frames -> %d selected", len(frames), len(selected))
        clip = FrameWindow(self.seq_len, self.contract.feat_dim)
        for frame in selected:
            clip.push(featurizer.safe_extract(frame))
        return self._run(clip.snapshot())

    def assemble(self, sequence: Optional[Sequence[np.ndarray]] = None) -> np.ndarray:
        """Tensor for `sequence`, or for the current window when omitted."""
        return assemble(self.window.snapshot() if sequence is None else sequence, self.contract)

    def _run(self, sequence: Sequence[np.ndarray]) -> ClassifyResult:
        tensor = assemble(sequence, self.contract)
        out = self.invoker.infer(tensor)
        if not isinstance(out, np.ndarray):
            return out
        result = reduce_output(out, self.labels)
        if isinstance(result, Prediction):
            result = dataclasses.replace(
                result,
                warnings=tuple(self.config_warnings),
                alternatives=tuple(top_k(out, self.labels, k=self.n_alternatives)),
            )
        return result

    def _unavailable(self) -> ModelUnavailable:
        return ModelUnavailable("session closed" if self._closed else "model not loaded")

    # ---------- lifecycle ----------

    def close(self) -> None:
        self.invoker.close()
        self.window.clear()
        self._closed = True

    def __enter__(self) -> "ClassificationSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
