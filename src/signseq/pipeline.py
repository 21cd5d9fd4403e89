from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .config import PipelineConfig
from .io import load_feature_sequence, result_row, results_frame, save_predictions
from .labels import load_labels, parse_labels
from .model.runtime import ModelRuntime, load_runtime, read_meta
from .results import ClassifyResult
from .session import ClassificationSession

@dataclass
class SignPipeline:
    cfg: PipelineConfig

    def load_runtime(self) -> Optional[ModelRuntime]:
        p = self.cfg.paths
        return load_runtime(p.model_path, device=self.cfg.device, meta_path=p.meta_path)

    def load_labels(self) -> list[str]:
        p = self.cfg.paths
        if p.labels_path:
            return load_labels(p.labels_path)
        meta = read_meta(p.meta_path or f"{p.model_path}.meta.json") if p.model_path else {}
        if "labels" in meta:
            return parse_labels(meta["labels"])
        return load_labels(None)

    def build_session(self, runtime: Optional[ModelRuntime] = None, load: bool = True) -> ClassificationSession:
        if runtime is None and load:
            runtime = self.load_runtime()
        w = self.cfg.window
        # no featurizer: recorded rows are already feature vectors
        return ClassificationSession.create(
            runtime,
            labels=self.load_labels(),
            seq_len=w.seq_len,
            feat_dim=w.feat_dim,
            fallback=self.cfg.fallback,
        )

    def replay(self, session: ClassificationSession, npy_path: str,
               out_csv: Optional[str] = None) -> pd.DataFrame:
        """Feed a recorded (T, F) sequence frame by frame, one result row per frame."""
        seq = load_feature_sequence(npy_path)
        df = results_frame(session.process(v) for v in seq)
        save_predictions(df, out_csv)
        return df

    def classify_clip(self, session: ClassificationSession, npy_path: str) -> ClassifyResult:
        """Whole recording as one clip, resampled to the window length."""
        seq = load_feature_sequence(npy_path)
        return session.classify_video(list(seq))

    def clip_row(self, session: ClassificationSession, npy_path: str) -> dict:
        return result_row(self.classify_clip(session, npy_path), path=npy_path)
