"""Normalisation and activation kernels on float32 vectors.

Every function leaves its inputs untouched and returns a new ``float32`` array.
"""

from __future__ import annotations

import numpy as np

__all__ = ["layer_norm", "rms_norm", "softmax", "silu"]

_NUDGE_FACTOR = np.float32(1.0e-5)


def _vector(values, name: str) -> np.ndarray:
    arr = np.array(values, dtype=np.float32)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be a vector, got {arr.ndim} dimensions")
    if arr.size == 0:
        raise ValueError(f"{name} must not be empty")
    return arr


def _same_length(a: np.ndarray, b: np.ndarray, what: str) -> None:
    if a.shape != b.shape:
        raise ValueError(f"{what}: dimension mismatch ({a.shape[0]} vs {b.shape[0]})")


def layer_norm(v) -> np.ndarray:
    """Centre ``v`` on zero and scale it to unit variance (without affine weights)."""
    v = _vector(v, "v")
    centred = v - v.mean(dtype=np.float32)
    variance = np.dot(centred, centred) / np.float32(centred.size)
    scale = np.float32(1.0) / np.sqrt(np.float32(variance) + _NUDGE_FACTOR)
    return (centred * scale).astype(np.float32)


def rms_norm(a, w) -> np.ndarray:
    """Divide ``a`` by its root mean square, then multiply element-wise by ``w``."""
    a = _vector(a, "a")
    w = _vector(w, "w")
    _same_length(a, w, "RmsNorm")
    mean_sq = np.float32(np.dot(a, a)) / np.float32(a.size)
    rms = np.float32(1.0) / np.sqrt(mean_sq + _NUDGE_FACTOR)
    return ((a * rms) * w).astype(np.float32)


def softmax(vals) -> np.ndarray:
    """Turn ``vals`` into a probability distribution.

    The maximum is subtracted before exponentiation for numerical stability.
    """
    vals = _vector(vals, "vals")
    exps = np.exp(vals - vals.max())
    return (exps / exps.sum(dtype=np.float32)).astype(np.float32)


def silu(h1, h2) -> np.ndarray:
    """SwiGLU gating: ``h2 * swish(h1)`` with ``swish(x) = x / (1 + exp(-x))``."""
    h1 = _vector(h1, "h1")
    h2 = _vector(h2, "h2")
    _same_length(h1, h2, "Silu")
    swish = h1 / (np.float32(1.0) + np.exp(-h1))
    return (h2 * swish).astype(np.float32)