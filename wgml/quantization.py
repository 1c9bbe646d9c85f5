"""Block quantization formats with 32 elements per block, and half-float decoding.

Each block type mirrors a packed little-endian binary layout and can be
decoded from raw bytes, encoded back, and dequantized to ``float32`` values.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import ClassVar, Iterable

import numpy as np

__all__ = [
    "decode_f16",
    "BlockF16",
    "BlockQ8_0",
    "BlockQ4_0",
    "BlockQ4_1",
    "BlockQ5_0",
    "BlockQ5_1",
]


def decode_f16(half: int) -> float:
    """Decode the bits of an IEEE 754 half-precision float into a float."""
    if not 0 <= half <= 0xFFFF:
        raise ValueError(f"half-float bits out of range: {half}")
    exp = (half >> 10) & 0x1F
    mant = half & 0x3FF
    if exp == 0:
        val = mant * 2.0**-24
    elif exp != 31:
        val = (mant + 1024) * 2.0 ** (exp - 25)
    elif mant == 0:
        val = math.inf
    else:
        val = math.nan
    return -val if half & 0x8000 else val


def _f32(half: int) -> np.float32:
    return np.float32(decode_f16(half))


def _check_u16(value: int, name: str) -> int:
    value = int(value)
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"{name} must fit in 16 unsigned bits, got {value}")
    return value


def _check_array(values: Iterable[int], length: int, lo: int, hi: int, name: str) -> tuple[int, ...]:
    items = tuple(int(v) for v in values)
    if len(items) != length:
        raise ValueError(f"{name} must hold {length} values, got {len(items)}")
    for v in items:
        if not lo <= v <= hi:
            raise ValueError(f"{name} value {v} outside [{lo}, {hi}]")
    return items


def _unpack(layout: struct.Struct, data: bytes | bytearray | memoryview, name: str) -> tuple[int, ...]:
    data = bytes(data)
    if len(data) != layout.size:
        raise ValueError(f"{name} needs exactly {layout.size} bytes, got {len(data)}")
    return layout.unpack(data)


@dataclass(frozen=True)
class BlockF16:
    """A single half-precision value."""

    data: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _check_u16(self.data, "data"))

    def dequantize(self) -> float:
        return decode_f16(self.data)


@dataclass(frozen=True)
class BlockQ8_0:
    """32 signed 8-bit quants sharing one half-float scale."""

    scale: int
    data: tuple[int, ...]

    ELEMENTS_PER_BLOCK: ClassVar[int] = 32
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<H32b")

    def __post_init__(self) -> None:
        object.__setattr__(self, "scale", _check_u16(self.scale, "scale"))
        object.__setattr__(self, "data", _check_array(self.data, 32, -128, 127, "data"))

    def dequantize(self) -> np.ndarray:
        return np.array(self.data, dtype=np.int8).astype(np.float32) * _f32(self.scale)

    @classmethod
    def from_bytes(cls, data) -> "BlockQ8_0":
        fields = _unpack(cls._LAYOUT, data, cls.__name__)
        return cls(scale=fields[0], data=fields[1:])

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(self.scale, *self.data)


@dataclass(frozen=True)
class BlockQ4_0:
    """32 signed 4-bit quants (offset by 8) sharing one half-float scale."""

    d: int
    qs: tuple[int, ...]

    ELEMENTS_PER_BLOCK: ClassVar[int] = 32
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<H16B")

    def __post_init__(self) -> None:
        object.__setattr__(self, "d", _check_u16(self.d, "d"))
        object.__setattr__(self, "qs", _check_array(self.qs, 16, 0, 255, "qs"))

    def dequantize(self) -> np.ndarray:
        qs = np.array(self.qs, dtype=np.int32)
        low = (qs & 0x0F) - 8
        high = (qs >> 4) - 8
        return np.concatenate([low, high]).astype(np.float32) * _f32(self.d)

    @classmethod
    def from_bytes(cls, data) -> "BlockQ4_0":
        fields = _unpack(cls._LAYOUT, data, cls.__name__)
        return cls(d=fields[0], qs=fields[1:])

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(self.d, *self.qs)


@dataclass(frozen=True)
class BlockQ4_1:
    """32 unsigned 4-bit quants with a half-float scale and minimum."""

    d: int
    m: int
    qs: tuple[int, ...]

    ELEMENTS_PER_BLOCK: ClassVar[int] = 32
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<HH16B")

    def __post_init__(self) -> None:
        object.__setattr__(self, "d", _check_u16(self.d, "d"))
        object.__setattr__(self, "m", _check_u16(self.m, "m"))
        object.__setattr__(self, "qs", _check_array(self.qs, 16, 0, 255, "qs"))

    def dequantize(self) -> np.ndarray:
        qs = np.array(self.qs, dtype=np.int32)
        quants = np.concatenate([qs & 0x0F, qs >> 4]).astype(np.float32)
        return quants * _f32(self.d) + _f32(self.m)

    @classmethod
    def from_bytes(cls, data) -> "BlockQ4_1":
        fields = _unpack(cls._LAYOUT, data, cls.__name__)
        return cls(d=fields[0], m=fields[1], qs=fields[2:])

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(self.d, self.m, *self.qs)


def _five_bit_quants(qh_bytes: tuple[int, ...], qs: tuple[int, ...]) -> np.ndarray:
    """Combine low nibbles and the packed fifth bits into 32 unsigned quants."""
    qh = int.from_bytes(bytes(qh_bytes), "little")
    j = np.arange(16, dtype=np.uint64)
    qh_arr = np.uint64(qh)
    xh_0 = ((qh_arr >> j) << np.uint64(4)) & np.uint64(0x10)
    xh_1 = (qh_arr >> (j + np.uint64(12))) & np.uint64(0x10)
    qs_arr = np.array(qs, dtype=np.uint64)
    x0 = (qs_arr & np.uint64(0x0F)) | xh_0
    x1 = (qs_arr >> np.uint64(4)) | xh_1
    return np.concatenate([x0, x1]).astype(np.int32)


@dataclass(frozen=True)
class BlockQ5_0:
    """32 signed 5-bit quants (offset by 16) sharing one half-float scale."""

    d: int
    qh: tuple[int, ...]
    qs: tuple[int, ...]

    ELEMENTS_PER_BLOCK: ClassVar[int] = 32
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<H4B16B")

    def __post_init__(self) -> None:
        object.__setattr__(self, "d", _check_u16(self.d, "d"))
        object.__setattr__(self, "qh", _check_array(self.qh, 4, 0, 255, "qh"))
        object.__setattr__(self, "qs", _check_array(self.qs, 16, 0, 255, "qs"))

    def dequantize(self) -> np.ndarray:
        quants = _five_bit_quants(self.qh, self.qs) - 16
        return quants.astype(np.float32) * _f32(self.d)

    @classmethod
    def from_bytes(cls, data) -> "BlockQ5_0":
        fields = _unpack(cls._LAYOUT, data, cls.__name__)
        return cls(d=fields[0], qh=fields[1:5], qs=fields[5:])

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(self.d, *self.qh, *self.qs)


@dataclass(frozen=True)
class BlockQ5_1:
    """32 unsigned 5-bit quants with a half-float scale and minimum."""

    d: int
    m: int
    qh: tuple[int, ...]
    qs: tuple[int, ...]

    ELEMENTS_PER_BLOCK: ClassVar[int] = 32
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<HH4B16B")

    def __post_init__(self) -> None:
        object.__setattr__(self, "d", _check_u16(self.d, "d"))
        object.__setattr__(self, "m", _check_u16(self.m, "m"))
        object.__setattr__(self, "qh", _check_array(self.qh, 4, 0, 255, "qh"))
        object.__setattr__(self, "qs", _check_array(self.qs, 16, 0, 255, "qs"))

    def dequantize(self) -> np.ndarray:
        quants = _five_bit_quants(self.qh, self.qs).astype(np.float32)
        return quants * _f32(self.d) + _f32(self.m)

    @classmethod
    def from_bytes(cls, data) -> "BlockQ5_1":
        fields = _unpack(cls._LAYOUT, data, cls.__name__)
        return cls(d=fields[0], m=fields[1], qh=fields[2:6], qs=fields[6:])

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(self.d, self.m, *self.qh, *self.qs)