"""Running average of repeated channel vectors and of single points."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable

from dataplotter.channels import ANALOG_COUNT, Sample

DEFAULT_AVERAGE_COUNT = 8


@dataclass(frozen=True)
class AveragedPoint:
    """An averaged point ready to be added to the plot."""

    channel: int
    time: float
    value: float
    append: bool


class Averager:
    """Averages the last few vectors (or points) received on each analog channel."""

    def __init__(self, default_count: int = DEFAULT_AVERAGE_COUNT) -> None:
        self._check_count(default_count)
        self._counts = [default_count] * ANALOG_COUNT
        self._vectors: list[deque[list[float]]] = [deque() for _ in range(ANALOG_COUNT)]
        self._sums: list[list[float]] = [[] for _ in range(ANALOG_COUNT)]
        self._periods: list[float | None] = [None] * ANALOG_COUNT
        self._points: list[deque[tuple[float, float]]] = [deque() for _ in range(ANALOG_COUNT)]
        self._point_sums = [0.0] * ANALOG_COUNT

    @staticmethod
    def _check_count(count: int) -> None:
        if count < 1:
            raise ValueError(f"average count must be at least 1, got {count}")

    @staticmethod
    def _channel(ch_id: int) -> int:
        if not 0 <= ch_id < ANALOG_COUNT:
            raise IndexError(f"channel must be 0..{ANALOG_COUNT - 1}, got {ch_id}")
        return ch_id

    def count(self, ch_id: int) -> int:
        """Number of vectors or points averaged on channel ``ch_id``."""
        return self._counts[self._channel(ch_id)]

    def reset(self) -> None:
        """Forget everything collected on all channels."""
        for ch in range(ANALOG_COUNT):
            self._vectors[ch].clear()
            self._sums[ch] = []
            self._points[ch].clear()
            self._point_sums[ch] = 0.0

    def set_count(self, ch_id: int, count: int) -> None:
        """Set how many vectors or points are averaged, dropping the oldest surplus."""
        ch = self._channel(ch_id)
        self._check_count(count)
        self._counts[ch] = count

        vectors = self._vectors[ch]
        sums = self._sums[ch]
        while len(vectors) > count:
            oldest = vectors.popleft()
            self._sums[ch] = sums = [total - old for total, old in zip(sums, oldest)]

        points = self._points[ch]
        while len(points) > count:
            self._point_sums[ch] -= points.popleft()[1]

    def new_data_vector(self, ch_id: int, time_step: float, data: Iterable[Sample]) -> list[Sample]:
        """Add a vector and return the average of the stored vectors, sample by sample.

        A vector of another length or sampling period starts the average again.
        """
        ch = self._channel(ch_id)
        samples = list(data)
        values = [s.value for s in samples]
        vectors = self._vectors[ch]

        if len(values) != len(self._sums[ch]) or time_step != self._periods[ch]:
            self._sums[ch] = []
            vectors.clear()
        self._periods[ch] = time_step

        sums = self._sums[ch] or [0.0] * len(values)
        vectors.append(values)
        while len(vectors) > self._counts[ch]:
            oldest = vectors.popleft()
            sums = [total - old for total, old in zip(sums, oldest)]

        sums = [total + value for total, value in zip(sums, values)]
        self._sums[ch] = sums

        stored = len(vectors)
        return [Sample(s.key, total / stored) for s, total in zip(samples, sums)]

    def new_data_point(self, ch_id: int, time: float, value: float, append: bool) -> AveragedPoint:
        """Add a point and return the average of the stored points.

        The time of the result lies midway between the oldest and newest stored point.
        Without ``append`` the stored points are discarded first.
        """
        ch = self._channel(ch_id)
        points = self._points[ch]
        if not append:
            points.clear()
            self._point_sums[ch] = 0.0

        points.append((time, value))
        while len(points) > self._counts[ch]:
            self._point_sums[ch] -= points.popleft()[1]
        self._point_sums[ch] += value

        mid_time = (points[0][0] + points[-1][0]) / 2.0
        return AveragedPoint(ch, mid_time, self._point_sums[ch] / len(points), append)