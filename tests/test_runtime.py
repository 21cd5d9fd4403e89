import json

import joblib
import numpy as np
import pytest
import torch
import torch.nn as nn

from signseq.model.runtime import CallableRuntime, TorchRuntime, load_runtime, read_meta
from signseq.session import ClassificationSession
from signseq.utils.model_report import describe_model, module_tree

class MeanHead(nn.Module):
    """Average over time, then a linear head with softmax."""
    def __init__(self, feat_dim=8, n_classes=3, favored=1):
        super().__init__()
        self.fc = nn.Linear(feat_dim, n_classes)
        with torch.no_grad():
            self.fc.weight.zero_()
            self.fc.bias.zero_()
            self.fc.bias[favored] = 5.0

    def forward(self, x):
        return torch.softmax(self.fc(x.mean(dim=1)), dim=-1)

class ProbaModel:
    """Estimator-like object exposing predict_proba."""
    def predict_proba(self, x):
        return np.array([[0.2, 0.3, 0.5]])

def _save_scripted(path, seq_len=30, feat_dim=8, meta=None):
    traced = torch.jit.trace(MeanHead(feat_dim).eval(), torch.zeros(1, seq_len, feat_dim))
    traced.save(str(path))
    if meta is not None:
        with open(str(path) + ".meta.json", "w") as f:
            json.dump(meta, f)
    return path

def test_torch_runtime_runs_numpy():
    rt = TorchRuntime(MeanHead())
    out = rt.run(np.zeros((1, 30, 8), dtype=np.float32))
    assert isinstance(out, np.ndarray) and out.shape == (1, 3)
    assert int(out.argmax()) == 1

def test_load_torchscript_with_meta(tmp_path):
    p = _save_scripted(tmp_path / "model.pt",
                       meta={"input_shape": [1, 30, 8], "output_shape": [1, 3]})
    rt = load_runtime(str(p))
    assert isinstance(rt, TorchRuntime)
    assert rt.input_shape == [1, 30, 8]
    s = ClassificationSession.create(rt, labels=["idle", "hello", "good"])
    assert s.contract.feat_dim == 8
    for _ in range(30):
        res = s.process(np.ones(8))
    assert res.label == "hello"
    assert 0.0 <= res.confidence <= 1.0

def test_load_torchscript_without_meta_uses_defaults(tmp_path):
    p = _save_scripted(tmp_path / "model.pt")
    rt = load_runtime(str(p))
    s = ClassificationSession.create(rt, labels=["idle", "hello", "good"], feat_dim=8)
    assert s.contract.tensor_shape() == (1, 30, 8)
    assert not s.contract.introspected

def test_load_joblib_estimator(tmp_path):
    p = tmp_path / "model.joblib"
    joblib.dump(ProbaModel(), p)
    rt = load_runtime(str(p))
    assert isinstance(rt, CallableRuntime)
    assert rt.run(np.zeros((30, 4))).tolist() == pytest.approx([[0.2, 0.3, 0.5]])

def test_callable_runtime_reads_declared_shapes():
    class KerasLike:
        input_shape = (None, 30, 226)
        output_shape = (None, 10)
        def __call__(self, x):
            return np.zeros((1, 10))
    rt = CallableRuntime(KerasLike())
    s = ClassificationSession.create(rt)
    assert s.contract.tensor_shape() == (1, 30, 226)
    assert s.contract.output_size == 10 and not s.config_warnings

def test_missing_model_is_unavailable(tmp_path):
    assert load_runtime(str(tmp_path / "nope.pt")) is None
    assert load_runtime(None) is None

def test_corrupt_model_is_unavailable(tmp_path):
    p = tmp_path / "broken.pt"
    p.write_bytes(b"not a model")
    assert load_runtime(str(p)) is None

def test_unreadable_meta_falls_back_to_defaults(tmp_path):
    p = tmp_path / "m.joblib"
    joblib.dump(ProbaModel(), p)
    meta = tmp_path / "m.joblib.meta.json"
    meta.write_text("{not json")
    rt = load_runtime(str(p))
    assert isinstance(rt, CallableRuntime) and rt.input_shape is None
    meta.write_text("[1, 30, 8]")
    assert read_meta(str(meta)) == {}
    s = ClassificationSession.create(load_runtime(str(p)))
    assert s.contract.tensor_shape() == (1, 30, 1662)

def test_unknown_format_raises(tmp_path):
    p = tmp_path / "model.onnx"
    p.write_bytes(b"")
    with pytest.raises(ValueError):
        load_runtime(str(p))

def test_callable_runtime_rejects_non_callable():
    with pytest.raises(TypeError):
        CallableRuntime(object())

def test_model_report():
    rt = TorchRuntime(MeanHead(), input_shape=[1, 30, 1662], output_shape=[1, 3])
    s = ClassificationSession.create(rt, labels=["a", "b", "c"])
    lines = describe_model(rt, s.contract, labels=list(s.labels))
    text = "\n".join(lines)
    assert "RANK3" in text and "match with rank3 layout" in text
    assert any(l.strip().startswith("fc : Linear") for l in lines)
    assert module_tree(MeanHead())[0] == "<root> : MeanHead"
    assert describe_model(None, s.contract)[0] == "model not loaded"
