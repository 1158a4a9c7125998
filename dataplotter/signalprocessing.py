"""Spectra, periodograms and signal measurements of sampled channels."""

from __future__ import annotations

import cmath
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

from dataplotter.channels import FFTType, FFTWindow, Sample

_WINDOW_GAIN = {
    FFTWindow.rectangular: 1.0,
    FFTWindow.hamming: 0.54,
    FFTWindow.hann: 0.5,
    FFTWindow.blackman: 0.42,
}


@dataclass(frozen=True)
class Measurements:
    """Result of measuring a periodic signal."""

    period: float
    frequency: float
    amplitude: float
    minimum: float
    maximum: float
    vrms: float
    dc: float
    sample_rate: float
    rise: float
    fall: float
    samples: int


def next_pow2(n: int) -> int:
    """Smallest power of two not smaller than ``n``."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def fft(x: Iterable[complex]) -> list[complex]:
    """Radix-2 transform with kernel exp(+i*2*pi*k/N); the length must be a power of two."""
    values = [complex(v) for v in x]
    n = len(values)
    if n == 0 or n & (n - 1):
        raise ValueError(f"FFT length must be a power of two, got {n}")
    return _fft(values)


def _fft(x: list[complex]) -> list[complex]:
    n = len(x)
    if n == 1:
        return list(x)
    even = _fft(x[0::2])
    odd = _fft(x[1::2])
    half = n // 2
    out = [0j] * n
    for k, (e, o) in enumerate(zip(even, odd)):
        t = cmath.exp(2j * math.pi * k / n) * o
        out[k] = e + t
        out[k + half] = e - t
    return out


@lru_cache(maxsize=32)
def _window(window: FFTWindow, length: int) -> tuple[float, ...]:
    if window == FFTWindow.hamming:
        return tuple(0.54 - 0.46 * math.cos(2 * math.pi * n / length) for n in range(length))
    if window == FFTWindow.hann:
        return tuple(0.5 * (1 - math.cos(2 * math.pi * n / length)) for n in range(length))
    if window == FFTWindow.blackman:
        return tuple(
            0.42 - 0.5 * math.cos(2 * math.pi * n / length) + 0.08 * math.cos(4 * math.pi * n / length)
            for n in range(length)
        )
    return (1.0,) * length


def _db(power: float) -> float:
    return 10 * math.log10(power) if power > 0 else -math.inf


def _abs_squared(z: complex) -> float:
    return z.real * z.real + z.imag * z.imag


def _remove_before(data: list[Sample], key: float) -> list[Sample]:
    return [s for s in data if s.key >= key]


def _check_series(data: Sequence[Sample]) -> None:
    if len(data) < 2:
        raise ValueError("at least two samples are needed")
    if data[-1].key == data[0].key:
        raise ValueError("samples must span a non-zero time")


def strongest_frequency(data: Sequence[Sample], dc: float, fs: float) -> float:
    """Frequency of the strongest spectral component, refined by autocorrelation for low frequencies."""
    ac = [s.value - dc for s in data]
    n = len(ac)
    nfft = next_pow2(5 * n)
    spectrum = fft(ac + [0.0] * (nfft - n))

    max_index = 0
    max_value = 0.0
    for i in range(nfft // 2 + 1):
        value = abs(spectrum[i])
        if value > max_value:
            max_value = value
            max_index = i

    freq = max_index * fs / nfft

    if freq < fs * (1 + math.sqrt(4 * nfft + 1)) / (2 * nfft):
        if freq > 0:
            approx = int(fs / freq)
            low = approx * 90 // 100
            high = approx * 110 // 100
        else:
            low, high = 0, n - 1
        low = max(low, 0)
        high = min(high, n - 1)

        best_value = -math.inf
        best_index = 0
        for k in range(low, high + 1):
            value = sum(a * b for a, b in zip(ac[k:], ac))
            if value > best_value:
                best_index = k
                best_value = value
        freq = fs / best_index if best_index else math.inf
    return freq


def rise_fall(data: Sequence[Sample]) -> tuple[float, float]:
    """Last rise time and fall time (10 % to 90 %), NaN where none is found."""
    rise = math.nan
    fall = math.nan
    if not data:
        return rise, fall

    values = [s.value for s in data]
    top_value = max(values)
    bottom_value = min(values)
    top = bottom_value + 0.9 * (top_value - bottom_value)
    bottom = bottom_value + 0.1 * (top_value - bottom_value)

    rise_end = -1
    for i in range(len(data) - 1, -1, -1):
        if data[i].value >= top:
            rise_end = i
        elif rise_end != -1 and data[i].value <= bottom:
            end, begin = data[rise_end], data[i]
            slope = (end.value - begin.value) / (end.key - begin.key)
            rise = (top_value - bottom_value) / slope * 0.8
            break

    fall_end = -1
    for i in range(len(data) - 1, -1, -1):
        if data[i].value <= bottom:
            fall_end = i
        elif fall_end != -1 and data[i].value >= top:
            end, begin = data[fall_end], data[i]
            slope = (end.value - begin.value) / (end.key - begin.key)
            fall = (bottom_value - top_value) / slope * 0.8
            break

    return rise, fall


class SignalProcessor:
    """Computes spectra and measurements of channel data."""

    def calculate_spectrum(self, data: Iterable[complex], window: FFTWindow, min_nfft: int) -> list[complex]:
        """Apply the window, zero-pad to a power of two (at least ``min_nfft``) and transform."""
        values = [complex(v) for v in data]
        coefficients = _window(FFTWindow(window), len(values))
        values = [v * w for v, w in zip(values, coefficients)]
        nfft = max(next_pow2(len(values)), min_nfft)
        values.extend([0j] * (nfft - len(values)))
        return fft(values)

    def fft_plot(
        self,
        data: Sequence[Sample],
        fft_type: FFTType,
        window: FFTWindow,
        remove_dc: bool,
        segment_count: int,
        twosided: bool,
        zerocenter: bool,
        min_nfft: int,
    ) -> list[Sample]:
        """Spectrum, periodogram or Welch periodogram of ``data`` as frequency/value samples."""
        data = list(data)
        _check_series(data)
        window = FFTWindow(window)
        fft_type = FFTType(fft_type)

        if remove_dc:
            dc = sum(s.value for s in data) / len(data)
            data = [Sample(s.key, s.value - dc) for s in data]

        fs = len(data) / (data[-1].key - data[0].key)
        gain = _WINDOW_GAIN[window]

        if fft_type in (FFTType.spectrum, FFTType.periodogram):
            normalization = len(data) * gain
            spectrum = self.calculate_spectrum((s.value for s in data), window, min_nfft)
            nfft = len(spectrum)
            result = []
            for i, freq in self._frequencies(nfft, fs, twosided, zerocenter):
                if fft_type == FFTType.periodogram:
                    result.append(Sample(freq, _db(_abs_squared(spectrum[i]) / normalization**2)))
                else:
                    result.append(Sample(freq, abs(spectrum[i]) / normalization))
            return result

        if segment_count < 1:
            raise ValueError("segment count must be positive")
        half = len(data) // segment_count
        if half == 0:
            raise ValueError("not enough samples for this number of segments")
        if (len(data) // half) % 2 == 0:
            segment_count -= 1
        # Only segments that fit the data completely are used.
        segment_count = min(segment_count, len(data) // half - 1)
        if segment_count < 1:
            raise ValueError("not enough samples for this number of segments")

        segments = [
            self.calculate_spectrum((s.value for s in data[i * half : (i + 2) * half]), window, min_nfft)
            for i in range(segment_count)
        ]
        normalization = 2 * half * gain
        nfft = len(segments[0])
        result = []
        for i, freq in self._frequencies(nfft, fs, twosided, zerocenter):
            power = sum(_abs_squared(segment[i]) for segment in segments)
            result.append(Sample(freq, _db(power / normalization**2 / len(segments))))
        return result

    @staticmethod
    def _frequencies(nfft: int, fs: float, twosided: bool, zerocenter: bool):
        step = fs / nfft
        count = nfft if twosided else nfft // 2 + 1
        for i in range(count):
            freq = i * step
            if zerocenter and i > nfft // 2:
                freq -= nfft * step
            yield i, freq

    def process(self, data: Sequence[Sample]) -> Measurements:
        """Measure period, frequency, levels, RMS, DC and edge times of ``data``."""
        data = list(data)
        _check_series(data)

        values = [s.value for s in data]
        maximum = max(values)
        minimum = min(values)
        dc_full = sum(values) / len(values)
        fs = (len(data) - 1) / (data[-1].key - data[0].key)

        freq = strongest_frequency(data, dc_full, fs)
        period = 1.0 / freq
        samples = len(data)

        span = data[-1].key - data[0].key
        n_periods = math.inf if period == 0 else float(math.floor(span / period))
        if n_periods != 0 and not math.isinf(n_periods):
            data = _remove_before(data, data[-1].key - n_periods * period)

        dc = sum(s.value for s in data) / len(data)
        vrms = math.sqrt(sum(s.value * s.value for s in data) / len(data))

        # Edge times are measured on the last two periods only.
        if n_periods > 2 and not math.isinf(n_periods):
            data = _remove_before(data, data[-1].key - 2.0 * period)

        rise, fall = rise_fall(data)
        return Measurements(
            period=period,
            frequency=freq,
            amplitude=maximum - minimum,
            minimum=minimum,
            maximum=maximum,
            vrms=vrms,
            dc=dc,
            sample_rate=fs,
            rise=rise,
            fall=fall,
            samples=samples,
        )