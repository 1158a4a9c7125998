[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dataplotter"
version = "0.1.0"
description = "Signal processing core for a serial data plotter: FFT, measurements, averaging, channel math, XY mode, interpolation and expression-driven test signals"
requires-python = ">=3.10"
dependencies = []
keywords = ["plotter", "oscilloscope", "fft", "signal processing", "serial", "measurements"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dataplotter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
