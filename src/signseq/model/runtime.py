from __future__ import annotations
import json
import logging
import os
from typing import Any, Callable, List, Optional, Tuple

import joblib
import numpy as np
import torch

LOGGER = logging.getLogger(__name__)

TORCH_SUFFIXES = (".pt", ".pth", ".ts")
JOBLIB_SUFFIXES = (".joblib", ".pkl")

class ModelRuntime:
    """Opaque execution engine: one input tensor in, one output tensor out."""

    input_shape: Optional[Tuple] = None
    output_shape: Optional[Tuple] = None
    input_dtype: str = "float32"

    def run(self, x: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def close(self) -> None:
        pass

class TorchRuntime(ModelRuntime):
    def __init__(self, module: torch.nn.Module, device: str = "cpu",
                 input_shape=None, output_shape=None):
        self.device = torch.device(device if (device == "cpu" or torch.cuda.is_available()) else "cpu")
        self.module = module.to(self.device).eval()
        self.input_shape = input_shape
        self.output_shape = output_shape

    @torch.inference_mode()
    def run(self, x: np.ndarray) -> np.ndarray:
        t = torch.from_numpy(np.ascontiguousarray(x, dtype=np.float32)).to(self.device)
        out = self.module(t)
        if isinstance(out, (tuple, list)):
            out = out[0]
        return out.detach().cpu().numpy()

    def close(self) -> None:
        self.module = None
        if self.device.type == "cuda":
            torch.cuda.empty_cache()

class CallableRuntime(ModelRuntime):
    """Wrap a plain callable or an estimator-like object (predict_proba / predict)."""

    def __init__(self, model: Any, input_shape=None, output_shape=None):
        self.model = model
        self.input_shape = input_shape if input_shape is not None else getattr(model, "input_shape", None)
        self.output_shape = output_shape if output_shape is not None else getattr(model, "output_shape", None)
        self._fn = self._resolve(model)

    @staticmethod
    def _resolve(model: Any) -> Callable[[np.ndarray], Any]:
        if hasattr(model, "predict_proba"):
            return model.predict_proba
        if hasattr(model, "predict"):
            return model.predict
        if callable(model):
            return model
        raise TypeError(f"{type(model).__name__} is not callable and has no predict/predict_proba")

    def run(self, x: np.ndarray) -> np.ndarray:
        return np.asarray(self._fn(x), dtype=np.float32)

# ---------- loading ----------

def read_meta(meta_path: str) -> dict:
    """Sidecar metadata: {"input_shape": [...], "output_shape": [...], "labels": [...]}"""
    if not meta_path or not os.path.isfile(meta_path):
        return {}
    try:
        with open(meta_path, "r", encoding="utf-8") as f:
            meta = json.load(f)
    except (OSError, ValueError) as e:
        LOGGER.warning("ignoring unreadable metadata %s: %s", meta_path, e)
        return {}
    if not isinstance(meta, dict):
        LOGGER.warning("ignoring metadata %s: expected a JSON object, got %s",
                       meta_path, type(meta).__name__)
        return {}
    return meta

def _torch_loaders(path: str, device: str) -> List[Tuple[str, Callable[[], Any]]]:
    return [
        ("torchscript", lambda: torch.jit.load(path, map_location=device)),
        ("pickled module", lambda: torch.load(path, map_location=device, weights_only=False)),
    ]

def load_runtime(model_path: Optional[str], device: str = "cpu",
                 meta_path: Optional[str] = None) -> Optional[ModelRuntime]:
    """Load a model file into a runtime. Returns None when no loader succeeds.

    Declared shapes come from the model itself when it has them, else from
    `<model_path>.meta.json` (or meta_path).
    """
    if not model_path:
        LOGGER.error("no model path configured")
        return None
    if not os.path.isfile(model_path):
        LOGGER.error("model file '%s' not found", model_path)
        return None

    meta = read_meta(meta_path or model_path + ".meta.json")
    in_shape = meta.get("input_shape")
    out_shape = meta.get("output_shape")

    suffix = os.path.splitext(model_path)[1].lower()
    if suffix in TORCH_SUFFIXES:
        attempts = _torch_loaders(model_path, device)
    elif suffix in JOBLIB_SUFFIXES:
        attempts = [("joblib", lambda: joblib.load(model_path))]
    else:
        raise ValueError(f"unknown model format '{suffix}' for {model_path}")

    for name, loader in attempts:
        try:
            obj = loader()
        except Exception as e:
            LOGGER.warning("%s loader failed for %s: %s", name, model_path, e)
            continue
        if isinstance(obj, torch.nn.Module):
            rt = TorchRuntime(obj, device=device, input_shape=in_shape, output_shape=out_shape)
        else:
            rt = CallableRuntime(obj, input_shape=in_shape, output_shape=out_shape)
        LOGGER.info("loaded %s via %s loader (input=%s, output=%s)",
                    model_path, name, rt.input_shape, rt.output_shape)
        return rt

    LOGGER.error("all loaders failed for %s", model_path)
    return None
