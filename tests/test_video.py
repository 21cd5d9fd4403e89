from signseq.video import resample, sample_indices

def test_equal_length_unchanged():
    frames = list(range(30))
    assert resample(frames, 30) == frames

def test_shorter_clip_unchanged():
    frames = ["a", "b", "c"]
    assert resample(frames, 30) == frames

def test_double_length_takes_every_other_frame():
    frames = list(range(60))
    assert resample(frames, 30) == list(range(0, 60, 2))

def test_floor_spacing_preserves_order():
    idx = sample_indices(45, 30)
    assert len(idx) == 30
    assert idx == [(i * 45) // 30 for i in range(30)]
    assert idx == sorted(idx) and len(set(idx)) == 30
    assert idx[:4] == [0, 1, 3, 4]

def test_non_positive_target():
    assert sample_indices(10, 0) == []
