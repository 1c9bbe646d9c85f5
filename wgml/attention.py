"""Multi-query attention over a key/value cache."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .norms import softmax

__all__ = ["AttentionParams", "multiquery_attention"]


@dataclass(frozen=True)
class AttentionParams:
    """Dimensions of one attention step.

    ``kv_mul`` is the number of query heads sharing one key/value head, and
    ``pos`` is the index of the current token: timesteps ``0..=pos`` are attended.
    """

    seq_len: int
    kv_dim: int
    kv_mul: int
    n_heads: int
    head_size: int
    pos: int

    def __post_init__(self) -> None:
        for name in ("seq_len", "kv_dim", "kv_mul", "n_heads", "head_size", "pos"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFFFFFF:
                raise ValueError(f"{name} must fit in 32 unsigned bits, got {value}")
        if self.kv_mul == 0:
            raise ValueError("kv_mul must be positive")


def _matrix(values, name: str) -> np.ndarray:
    arr = np.array(values, dtype=np.float32)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be a matrix, got {arr.ndim} dimensions")
    return arr


def multiquery_attention(
    params: AttentionParams, q, key_cache, value_cache, attn
) -> tuple[np.ndarray, np.ndarray]:
    """Run multi-query attention for every head at position ``params.pos``.

    ``q`` holds the ``n_heads`` query heads one after another. ``key_cache`` and
    ``value_cache`` hold one column per timestep, each column made of the key/value
    heads. ``attn`` has one column of attention scores per head.

    Returns ``(attn, xb)``: a copy of ``attn`` whose first ``pos + 1`` rows of each
    head's column hold the softmaxed scores (other entries are kept), and the
    weighted sums of the values for every head, laid out like ``q``.
    """
    hs = params.head_size
    n_heads = params.n_heads
    steps = params.pos + 1

    q_arr = np.array(q, dtype=np.float32)
    if q_arr.ndim != 1:
        raise ValueError("q must be a vector")
    keys = _matrix(key_cache, "key_cache")
    values = _matrix(value_cache, "value_cache")
    attn_out = _matrix(attn, "attn")

    if len(q_arr) < n_heads * hs:
        raise ValueError(f"q has {len(q_arr)} entries, {n_heads * hs} needed")

    kv_heads = np.arange(n_heads) // params.kv_mul
    n_kv = int(kv_heads[-1]) + 1 if n_heads else 0
    for name, cache in (("key_cache", keys), ("value_cache", values)):
        if cache.shape[0] < n_kv * hs:
            raise ValueError(f"{name} has {cache.shape[0]} rows, {n_kv * hs} needed")
        if cache.shape[1] < steps:
            raise ValueError(f"{name} has {cache.shape[1]} columns, {steps} needed")
    if attn_out.shape[0] < steps or attn_out.shape[1] < n_heads:
        raise ValueError(
            f"attn has shape {attn_out.shape}, at least ({steps}, {n_heads}) needed"
        )

    xb = np.zeros(len(q_arr), dtype=np.float32)
    if n_heads == 0 or hs == 0:
        attn_out[:steps, :n_heads] = (
            np.ones((steps, n_heads), dtype=np.float32) / np.float32(steps)
        )
        return attn_out, xb

    # (n_kv, head_size, steps) -> per query head (n_heads, head_size, steps)
    k_heads = keys[: n_kv * hs, :steps].reshape(n_kv, hs, steps)[kv_heads]
    v_heads = values[: n_kv * hs, :steps].reshape(n_kv, hs, steps)[kv_heads]
    q_heads = q_arr[: n_heads * hs].reshape(n_heads, hs)

    scores = np.einsum("nh,nht->nt", q_heads, k_heads).astype(np.float32)
    weights = np.stack([softmax(row) for row in scores])

    attn_out[:steps, :n_heads] = weights.T
    xb[: n_heads * hs] = np.einsum("nt,nht->nh", weights, v_heads).astype(np.float32).ravel()
    return attn_out, xb