import numpy as np
import pytest

from signseq.reduce import flatten_scores, reduce_output, stable_argmax, top_k
from signseq.results import OutputSizeMismatch, Prediction

LABELS = ["idle", "hello", "good"]

def test_hello_scenario():
    res = reduce_output(np.array([0.1, 0.7, 0.2]), LABELS)
    assert isinstance(res, Prediction)
    assert res.label == "hello"
    assert res.confidence == pytest.approx(0.7)
    assert res.index == 1

def test_batch_dim_is_stripped():
    res = reduce_output(np.array([[[0.2, 0.1, 0.7]]]), LABELS)
    assert res.label == "good"

def test_ties_resolve_to_lowest_index():
    assert stable_argmax(np.array([0.4, 0.4, 0.2], dtype=np.float32)) == 0
    res = reduce_output(np.array([0.1, 0.45, 0.45]), LABELS)
    assert res.index == 1

def test_index_outside_labels_is_reported():
    scores = np.array([0.0, 0.1, 0.1, 0.1, 0.1, 0.6])
    res = reduce_output(scores, LABELS)
    assert res == OutputSizeMismatch(index=5, output_size=6, label_count=3)
    assert not res.ok
    assert "index: 5" in str(res)

def test_no_softmax_applied():
    res = reduce_output(np.array([3.0, 1.0, -2.0]), LABELS)
    assert res.confidence == 3.0

def test_empty_output_is_mismatch():
    res = reduce_output(np.zeros((1, 0)), LABELS)
    assert isinstance(res, OutputSizeMismatch) and res.index == -1

def test_multi_row_output_uses_first_row():
    y = flatten_scores(np.array([[0.1, 0.9], [0.8, 0.2]]))
    assert y.tolist() == pytest.approx([0.1, 0.9])

def test_top_k_order():
    ranked = top_k(np.array([[0.2, 0.5, 0.3, 0.0]]), LABELS, k=3)
    assert [r[0] for r in ranked] == ["hello", "good", "idle"]
    assert top_k(np.array([0.0, 0.0, 0.0, 1.0]), LABELS, k=1) == [("#3", 1.0)]

def test_prediction_str():
    assert str(Prediction("hello", 0.7)) == "hello (70.00%)"

def test_trailing_channel_dim_is_stripped():
    out = np.array([0.1, 0.7, 0.2]).reshape(1, 3, 1)
    assert flatten_scores(out).shape == (3,)
    res = reduce_output(out, LABELS)
    assert res.label == "hello"
    assert res.confidence == pytest.approx(0.7)
