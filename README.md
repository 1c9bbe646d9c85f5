# wgml

Reference implementations of the building blocks used to run large language
model inference: block-quantized weight formats, matrix-vector products over
quantized matrices, and the usual transformer primitives.

## Installation

```
pip install .
```

## Quantized blocks

`wgml.quantization` holds the 32-element block formats (`BlockQ8_0`,
`BlockQ4_0`, `BlockQ4_1`, `BlockQ5_0`, `BlockQ5_1`) and `BlockF16`;
`wgml.kquants` holds the 256-element super-block formats (`BlockQ8_K`,
`BlockQ6_K`, `BlockQ5_K`, `BlockQ4_K`). Every block reads and writes its raw
byte layout and dequantizes to `float32` values:

```python
from wgml.quantization import BlockQ8_0, decode_f16

block = BlockQ8_0.from_bytes(raw_bytes)
values = block.dequantize()        # 32 float32 values
assert BlockQ8_0.from_bytes(block.to_bytes()) == block

decode_f16(0x3C00)                 # 1.0
```

## Matrix-vector products

```python
from wgml.gemv import QuantMatrix, gemv

m = QuantMatrix.from_blocks(blocks, nrows, ncols)
out = gemv(m, v)                   # same as m.gemv(v)
dense = m.dequantize()
```

`QuantFormat` names the supported storage formats and reports how many values
one stored element expands to.

## Transformer primitives

- `wgml.norms`: `layer_norm`, `rms_norm`, `softmax`, `silu`
- `wgml.rope`: `rope` rotary positional encoding, with `RoPEVariant` and `RoPEShape`
- `wgml.unary`: `UnaryOp` element-wise operations and `apply_unary`
- `wgml.attention`: `multiquery_attention` driven by `AttentionParams`

```python
import numpy as np
from wgml.norms import softmax
from wgml.unary import UnaryOp, apply_unary

probs = softmax(np.array([1.0, 2.0, 3.0], dtype=np.float32))
clamped = apply_unary(UnaryOp.CLAMP, values, (0.0, 1.0, 0.0, 0.0))
```

## Running the tests

```
pip install .[test]
pytest
```