import math

import numpy as np
import pytest

from wgml.norms import layer_norm, rms_norm, silu, softmax

LEN = 1757


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


# ---- layer_norm -------------------------------------------------------------


def test_layer_norm_pinned_values():
    out = layer_norm([1.0, 2.0, 3.0])
    expected = 1.0 / math.sqrt(2.0 / 3.0 + 1.0e-5)
    np.testing.assert_allclose(out, [-expected, 0.0, expected], rtol=1e-5)
    assert out.dtype == np.float32


def test_layer_norm_zero_mean_unit_variance(rng):
    v = rng.random(LEN, dtype=np.float32)
    out = layer_norm(v)
    assert out.shape == (LEN,)
    assert abs(float(out.mean())) < 1e-4
    assert float(out.var()) == pytest.approx(1.0, rel=1e-3)


def test_layer_norm_constant_vector_gives_zeros():
    np.testing.assert_array_equal(layer_norm([5.0] * 8), np.zeros(8, dtype=np.float32))


def test_layer_norm_leaves_input_untouched():
    v = np.array([1.0, 4.0, 9.0], dtype=np.float32)
    layer_norm(v)
    np.testing.assert_array_equal(v, [1.0, 4.0, 9.0])


def test_layer_norm_rejects_empty():
    with pytest.raises(ValueError):
        layer_norm([])


# ---- rms_norm ---------------------------------------------------------------


def test_rms_norm_pinned_values():
    out = rms_norm([3.0, 4.0], [1.0, 1.0])
    rms = 1.0 / math.sqrt(12.5 + 1.0e-5)
    np.testing.assert_allclose(out, [3.0 * rms, 4.0 * rms], rtol=1e-5)


def test_rms_norm_weights_scale_elementwise():
    out = rms_norm([3.0, 4.0], [2.0, -1.0])
    base = rms_norm([3.0, 4.0], [1.0, 1.0])
    np.testing.assert_allclose(out, [2.0 * base[0], -base[1]], rtol=1e-6)


def test_rms_norm_unit_rms(rng):
    a = rng.random(LEN, dtype=np.float32)
    out = rms_norm(a, np.ones(LEN, dtype=np.float32))
    assert float(np.sqrt(np.mean(out.astype(np.float64) ** 2))) == pytest.approx(1.0, rel=1e-3)


def test_rms_norm_dimension_mismatch():
    with pytest.raises(ValueError):
        rms_norm([1.0, 2.0, 3.0], [1.0, 2.0])


# ---- softmax ----------------------------------------------------------------


def test_softmax_pinned_values():
    out = softmax([0.0, math.log(3.0)])
    np.testing.assert_allclose(out, [0.25, 0.75], rtol=1e-6)


def test_softmax_is_distribution(rng):
    v = rng.random(LEN, dtype=np.float32)
    out = softmax(v)
    assert float(out.sum(dtype=np.float64)) == pytest.approx(1.0, abs=1e-5)
    assert bool(np.all(out > 0.0))
    assert int(np.argmax(out)) == int(np.argmax(v))


def test_softmax_shift_invariant(rng):
    v = rng.random(32, dtype=np.float32)
    np.testing.assert_allclose(softmax(v), softmax(v + 10.0), rtol=1e-4)


def test_softmax_large_values_do_not_overflow():
    np.testing.assert_allclose(softmax([1000.0, 1000.0]), [0.5, 0.5])


def test_softmax_rejects_matrix():
    with pytest.raises(ValueError):
        softmax([[1.0, 2.0], [3.0, 4.0]])


# ---- silu -------------------------------------------------------------------


def test_silu_pinned_values():
    out = silu([1.0, 0.0, -1.0], [2.0, 5.0, 1.0])
    sig1 = 1.0 / (1.0 + math.exp(-1.0))
    np.testing.assert_allclose(out, [2.0 * sig1, 0.0, -(1.0 - sig1)], rtol=1e-6, atol=1e-7)


def test_silu_unit_gate_matches_swish_limits():
    out = silu([20.0, -20.0], [1.0, 1.0])
    assert float(out[0]) == pytest.approx(20.0, rel=1e-6)
    assert abs(float(out[1])) < 1e-6


def test_silu_linear_in_gate(rng):
    h1 = rng.random(LEN, dtype=np.float32)
    h2 = rng.random(LEN, dtype=np.float32)
    np.testing.assert_allclose(silu(h1, 2.0 * h2), 2.0 * silu(h1, h2), rtol=1e-6)


def test_silu_dimension_mismatch():
    with pytest.raises(ValueError):
        silu([1.0, 2.0], [1.0])