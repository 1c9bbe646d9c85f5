[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wgml"
version = "0.1.0"
description = "Reference implementations of quantized tensor formats and LLM inference primitives."
requires-python = ">=3.10"
keywords = ["llm", "quantization", "gguf", "attention", "rope", "inference"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["wgml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
