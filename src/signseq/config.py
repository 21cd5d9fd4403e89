from __future__ import annotations
from dataclasses import dataclass, field

DEFAULT_SEQ_LEN = 30
DEFAULT_FEAT_DIM = 1662

DEFAULT_LABELS = [
    "hello", "i", "you", "yes", "no", "how", "help", "good", "thanks", "goodbye",
]

@dataclass
class WindowConfig:
    seq_len: int = DEFAULT_SEQ_LEN      # frames per prediction window (N)
    feat_dim: int = DEFAULT_FEAT_DIM    # values per frame (F)

@dataclass
class FallbackConfig:
    mode: str = "zeros"     # 'zeros' or 'noise' when extraction fails
    noise_scale: float = 0.1
    seed: int | None = None

@dataclass
class ModelPaths:
    model_path: str | None = "models/sign_language_model.pt"
    labels_path: str | None = None      # json/txt; default table when unset
    meta_path: str | None = None        # defaults to <model_path>.meta.json

@dataclass
class PipelineConfig:
    window: WindowConfig = field(default_factory=WindowConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    paths: ModelPaths = field(default_factory=ModelPaths)
    device: str = "cpu"
