"""Quantized tensor formats and LLM inference primitives."""

__version__ = "0.1.0"
__all__ = ["attention", "gemv", "kquants", "norms", "quantization", "rope", "unary"]