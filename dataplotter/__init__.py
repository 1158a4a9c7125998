"""Signal processing core for a serial data plotter: spectra, measurements, averaging, channel math, XY mode, interpolation, expressions and test-signal frames."""

__version__ = "0.1.0"