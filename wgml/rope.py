"""Rotary positional encoding."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np

__all__ = ["RoPEVariant", "RoPEShape", "rope"]


class RoPEVariant(enum.Enum):
    """Which elements of a head are rotated together."""

    ORIGINAL = "original"
    """Rotated entries are adjacent."""
    NEOX = "neox"
    """Rotated entries are separated by ``head_size / 2`` elements."""


@dataclass(frozen=True)
class RoPEShape:
    """Parameters of a rotary positional encoding pass."""

    head_size: int
    kv_dim: int
    pos: int

    def __post_init__(self) -> None:
        for name in ("head_size", "kv_dim", "pos"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFFFFFF:
                raise ValueError(f"{name} must fit in 32 unsigned bits, got {value}")


def _pairs_needed(length: int) -> int:
    return ((length + 1) // 2) * 2


def rope(q, k, head_size: int, dim: int, kv_dim: int, pos: int) -> tuple[np.ndarray, np.ndarray]:
    """Rotate adjacent pairs of ``q`` and ``k`` by their position-dependent angle.

    The first ``dim`` entries of ``q`` and the first ``min(dim, kv_dim)`` entries
    of ``k`` are rotated; the inputs are left untouched and rotated copies are
    returned as ``(q, k)``.
    """
    if head_size <= 0:
        raise ValueError("head_size must be positive")
    q_out = np.array(q, dtype=np.float32)
    k_out = np.array(k, dtype=np.float32)
    if q_out.ndim != 1 or k_out.ndim != 1:
        raise ValueError("q and k must be vectors")
    if len(q_out) < _pairs_needed(dim):
        raise ValueError(f"q has {len(q_out)} entries, {_pairs_needed(dim)} needed")
    k_dim = max(0, min(dim, kv_dim))
    if len(k_out) < _pairs_needed(k_dim):
        raise ValueError(f"k has {len(k_out)} entries, {_pairs_needed(k_dim)} needed")

    i = np.arange(0, dim, 2)
    head_dim = (i % head_size).astype(np.float32)
    theta = np.power(np.float32(10000.0), -head_dim / np.float32(head_size))
    angle = np.float32(pos) * theta
    cos = np.cos(angle).astype(np.float32)
    sin = np.sin(angle).astype(np.float32)

    def rotate(vec: np.ndarray, idx: np.ndarray, c: np.ndarray, s: np.ndarray) -> None:
        a = vec[idx].copy()
        b = vec[idx + 1].copy()
        vec[idx] = c * a - s * b
        vec[idx + 1] = s * a + c * b

    rotate(q_out, i, cos, sin)
    in_k = i < kv_dim
    rotate(k_out, i[in_k], cos[in_k], sin[in_k])
    return q_out, k_out