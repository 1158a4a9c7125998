"""XY (Lissajous) curve from two channels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from dataplotter.channels import Sample


@dataclass(frozen=True)
class CurvePoint:
    """A point of a parametric curve: parameter ``t`` and coordinates ``key``, ``value``."""

    t: float
    key: float
    value: float


def calculate_xy(in1: Iterable[Sample], in2: Iterable[Sample], remove_dc: bool) -> list[CurvePoint]:
    """Pair the samples of two channels into an XY curve.

    Channels of different lengths are first cut to their common time range.
    """
    first = list(in1)
    second = list(in2)
    if not first or not second:
        raise ValueError("both channels must hold samples")

    if len(first) != len(second):
        start = max(first[0].key, second[0].key)
        stop = min(first[-1].key, second[-1].key)
        first = [s for s in first if start <= s.key <= stop]
        second = [s for s in second if start <= s.key <= stop]

    pairs = list(zip(first, second))
    dc1 = dc2 = 0.0
    if remove_dc and pairs:
        dc1 = sum(a.value for a, _ in pairs) / len(first)
        dc2 = sum(b.value for _, b in pairs) / len(second)

    return [CurvePoint(a.key, a.value - dc1, b.value - dc2) for a, b in pairs]