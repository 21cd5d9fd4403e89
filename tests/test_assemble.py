import numpy as np
import pytest

from signseq.assemble import assemble, pad_sequence
from signseq.buffer import FrameWindow
from signseq.model.contract import ModelContract, TensorLayout

def _contract(layout, N=30, F=226):
    return ModelContract(layout=layout, seq_len=N, feat_dim=F)

@pytest.mark.parametrize("layout,shape", [
    (TensorLayout.RANK2, (30, 226)),
    (TensorLayout.RANK3, (1, 30, 226)),
    (TensorLayout.RANK4, (1, 30, 226, 1)),
    (TensorLayout.UNSUPPORTED, (30, 226)),
])
def test_rank_mapping(layout, shape):
    seq = [np.random.rand(226).astype("float32") for _ in range(30)]
    x = assemble(seq, _contract(layout))
    assert x.shape == shape
    assert x.dtype == np.float32

def test_full_window_rank3_scenario():
    win = FrameWindow(30, feat_dim=226)
    for i in range(30):
        win.push(np.full(226, i, dtype=np.float32))
    contract = ModelContract.from_shapes([1, 30, 226], [1, 10])
    x = assemble(win.snapshot(), contract)
    assert x.shape == (1, 30, 226)
    assert x[0, 0, 0] == 0 and x[0, 29, 0] == 29

def test_padding_replicates_last_frame():
    N, F, m = 6, 3, 2
    seq = [np.full(F, 1.0), np.full(F, 2.0)]
    x = pad_sequence(seq, N, F)
    assert x.shape == (N, F)
    assert (x[0] == 1.0).all()
    assert (x[m - 1:] == 2.0).all()   # last frame repeated N - m times

def test_empty_window_is_zeros():
    x = assemble([], _contract(TensorLayout.RANK3, N=5, F=4))
    assert x.shape == (1, 5, 4)
    assert not x.any()

def test_long_sequence_uses_tail():
    seq = [np.full(2, float(i)) for i in range(10)]
    x = pad_sequence(seq, 4, 2)
    assert x[:, 0].tolist() == [6, 7, 8, 9]

def test_per_frame_pad_and_truncate():
    seq = [np.array([1, 2]), np.array([1, 2, 3, 4, 5])]
    x = pad_sequence(seq, 2, 3)
    assert x.tolist() == [[1, 2, 0], [1, 2, 3]]

def test_assemble_is_deterministic():
    win = FrameWindow(30, feat_dim=226)
    rng = np.random.default_rng(0)
    for _ in range(17):
        win.push(rng.random(226))
    c = _contract(TensorLayout.RANK4)
    a = assemble(win.snapshot(), c)
    b = assemble(win.snapshot(), c)
    assert a.tobytes() == b.tobytes()
