"""Upsampling interpolation of channel data with a low-pass FIR filter."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from dataplotter.channels import Sample

DEFAULT_UPSAMPLING = 8
# Above this many upsampled values per upsampling factor interpolation is not worth it.
MAX_VALUES_PER_UPSAMPLING = 2000


@dataclass(frozen=True)
class InterpolationResult:
    """Interpolated data of a channel together with the data it was computed from.

    ``filtered`` is False when the data was passed through unchanged because
    there were too few or too many samples.
    """

    channel: int
    original: list[Sample]
    interpolated: list[Sample]
    from_buffer: bool
    filtered: bool


def fir_filter(x: Sequence[float], h: Sequence[float]) -> list[float]:
    """Convolve ``x`` with ``h``, leaving out the first and last len(h)-1 transient samples."""
    n, m = len(x), len(h)
    return [sum(x[i - k] * h[k] for k in range(m)) for i in range(m - 1, n)]


def _parse_coefficient(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


class Interpolator:
    """Upsamples data by inserting zeros and low-pass filtering the result."""

    def __init__(self) -> None:
        self.coefficients: tuple[float, ...] = ()
        self.upsampling = DEFAULT_UPSAMPLING

    def set_filter(self, coefficients: Sequence[float], upsampling: int) -> None:
        """Use the FIR ``coefficients`` for an upsampling factor of ``upsampling``."""
        if upsampling < 1:
            raise ValueError(f"upsampling must be at least 1, got {upsampling}")
        self.upsampling = upsampling
        self.coefficients = tuple(float(c) for c in coefficients)

    def load_filter_from_file(self, path: str | Path, upsampling: int) -> None:
        """Load comma separated FIR coefficients; ".csv" is added to a name without a dot."""
        self.upsampling = upsampling
        self.coefficients = ()
        path = Path(path)
        if "." not in path.name:
            path = path.with_name(path.name + ".csv")
        text = path.read_text()
        self.set_filter([_parse_coefficient(v) for v in text.split(",")], upsampling)

    def interpolate(
        self,
        ch_id: int,
        data: Sequence[Sample],
        visible_range: tuple[float, float],
        from_buffer: bool,
    ) -> InterpolationResult:
        """Interpolate the part of ``data`` around ``visible_range`` (lower, upper)."""
        if not self.coefficients:
            raise ValueError("no interpolation filter loaded")
        original = list(data)
        if not original:
            raise ValueError("no data to interpolate")

        upsampling = self.upsampling
        fir = self.coefficients
        m = len(fir) - 1
        half = m // 2

        lower, upper = visible_range
        sample_paddings = half // upsampling
        time_paddings = (upper - lower) / 2
        keys = [s.key for s in original]

        begin = bisect_left(keys, lower - time_paddings)
        if begin > 0:
            begin -= 1
        begin = max(begin - sample_paddings, 0)
        end = bisect_right(keys, upper + time_paddings)
        if end != len(keys):
            end += 1
        end = min(end + sample_paddings, len(keys))

        values: list[float] = []
        for sample in original[begin:end]:
            values.append(sample.value)
            values.extend([0.0] * (upsampling - 1))

        if len(values) < len(fir) or len(values) > MAX_VALUES_PER_UPSAMPLING * upsampling:
            return InterpolationResult(ch_id, original, list(original), from_buffer, False)

        span = keys[-1] - keys[0]
        if span == 0:
            raise ValueError("samples must span a non-zero time")
        fs = (len(keys) - 1) / span
        period = 1.0 / upsampling / fs

        interpolated = []
        for i, value in enumerate(fir_filter(values, fir)):
            position = i + half
            key = original[begin + position // upsampling].key + (position % upsampling) * period
            interpolated.append(Sample(key, value * upsampling))

        return InterpolationResult(ch_id, original, interpolated, from_buffer, True)