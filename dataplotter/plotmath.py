"""Math channels combining two channels (or constants) sample by sample."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from dataplotter.channels import MATH_COUNT, MathOperation, Sample, math_channel_id


class MathError(ValueError):
    """The inputs of a math channel cannot be combined."""


@dataclass(frozen=True)
class MathResult:
    """Computed math channel data."""

    channel: int
    data: list[Sample]
    ignore_pause: bool


def _divide(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _apply(operation: MathOperation, a: float, b: float) -> float:
    if operation == MathOperation.add:
        return a + b
    if operation == MathOperation.subtract:
        return a - b
    if operation == MathOperation.multiply:
        return a * b
    return _divide(a, b)


class PlotMath:
    """Holds the settings and pending inputs of every math channel."""

    def __init__(self) -> None:
        self._firsts: list[list[Sample] | None] = [None] * MATH_COUNT
        self._seconds: list[list[Sample] | None] = [None] * MATH_COUNT
        self._operations = [MathOperation.add] * MATH_COUNT
        self._first_const = [False] * MATH_COUNT
        self._second_const = [False] * MATH_COUNT
        self._scale_first = [1.0] * MATH_COUNT
        self._scale_second = [1.0] * MATH_COUNT

    @staticmethod
    def _index(index: int) -> int:
        if not 0 <= index < MATH_COUNT:
            raise IndexError(f"math channel index must be 0..{MATH_COUNT - 1}, got {index}")
        return index

    def add_math_data(
        self, math_number: int, is_first: bool, data: Sequence[Sample] | None, ignore_pause: bool
    ) -> MathResult | None:
        """Store one input of math channel ``math_number`` (counted from 0).

        Once both inputs are available (a constant input counts as available),
        the result is computed, the inputs are dropped and the result is returned.
        Inputs of different lengths raise MathError.
        """
        i = self._index(math_number)
        stored = None if data is None else list(data)
        if is_first:
            self._firsts[i] = stored
        else:
            self._seconds[i] = stored

        first, second = self._firsts[i], self._seconds[i]
        first_const, second_const = self._first_const[i], self._second_const[i]
        if first is None and not first_const:
            return None
        if second is None and not second_const:
            return None

        if not first_const and not second_const and len(first) != len(second):
            self._firsts[i] = self._seconds[i] = None
            raise MathError("Channels have different length, can not use math")

        reference = first if first is not None else second
        if reference is None:
            return None

        operation = self._operations[i]
        result = []
        for n, sample in enumerate(reference):
            a = (1.0 if first_const else first[n].value) * self._scale_first[i]
            b = (1.0 if second_const else second[n].value) * self._scale_second[i]
            result.append(Sample(sample.key, _apply(operation, a, b)))

        self._firsts[i] = self._seconds[i] = None
        return MathResult(math_channel_id(i + 1), result, ignore_pause)

    def clear_math(self, math: int) -> None:
        """Drop the pending inputs of math channel ``math`` (counted from 1)."""
        i = self._index(math - 1)
        self._firsts[i] = None
        self._seconds[i] = None

    def reset_math(
        self,
        math_number: int,
        mode: MathOperation,
        in1: Sequence[Sample] | None,
        in2: Sequence[Sample] | None,
        first_is_const: bool,
        second_is_const: bool,
        scale_first: float,
        scale_second: float,
    ) -> MathResult | None:
        """Configure math channel ``math_number`` (counted from 1) and compute it from both inputs."""
        i = self._index(math_number - 1)
        self._operations[i] = MathOperation(mode)
        self._seconds[i] = None
        self._first_const[i] = first_is_const
        self._second_const[i] = second_is_const
        self._scale_first[i] = scale_first
        self._scale_second[i] = scale_second
        self._firsts[i] = None if in1 is None else list(in1)
        return self.add_math_data(i, False, in2, True)