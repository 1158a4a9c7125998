import math

import pytest

from dataplotter.channels import FFTType, FFTWindow, Sample
from dataplotter.signalprocessing import (
    SignalProcessor,
    fft,
    next_pow2,
    rise_fall,
    strongest_frequency,
)


def _sine(freq, fs, n, amplitude=1.0, offset=0.0):
    return [Sample(i / fs, offset + amplitude * math.sin(2 * math.pi * freq * i / fs)) for i in range(n)]


@pytest.mark.parametrize("n", [1, 2, 3, 5, 8, 9, 100, 1024, 1025])
def test_next_pow2_properties(n):
    p = next_pow2(n)
    assert p >= n
    assert p & (p - 1) == 0
    assert p == 1 or p // 2 < n


def test_next_pow2_value():
    assert next_pow2(5) == 8


def test_fft_of_impulse_is_flat():
    result = fft([3, 0, 0, 0, 0, 0, 0, 0])
    assert all(v == pytest.approx(3) for v in result)


def test_fft_of_constant_has_only_dc():
    result = fft([2.5] * 16)
    assert result[0] == pytest.approx(2.5 * 16)
    assert all(abs(v) < 1e-9 for v in result[1:])


def test_fft_parseval():
    x = [1.0, -2.0, 0.5, 3.0, 0.0, 1.5, -1.0, 2.0]
    result = fft(x)
    energy_time = sum(v * v for v in x)
    energy_freq = sum(abs(v) ** 2 for v in result)
    assert energy_freq == pytest.approx(len(x) * energy_time)


def test_fft_rejects_non_power_of_two():
    with pytest.raises(ValueError):
        fft([1, 2, 3])


def test_calculate_spectrum_pads_to_min_nfft():
    data = [1.0, 2.0, 3.0, 4.0, 5.0]
    spectrum = SignalProcessor().calculate_spectrum(data, FFTWindow.rectangular, 16)
    assert len(spectrum) == 16
    assert spectrum[0] == pytest.approx(sum(data))


def test_calculate_spectrum_without_min_uses_next_pow2():
    spectrum = SignalProcessor().calculate_spectrum([1.0] * 5, FFTWindow.hann, 0)
    assert len(spectrum) == next_pow2(5)


def test_spectrum_of_sine_peaks_at_its_bin():
    data = _sine(4, 64, 64)
    result = SignalProcessor().fft_plot(data, FFTType.spectrum, FFTWindow.rectangular, False, 1, False, False, 0)
    assert len(result) == 64 // 2 + 1
    peak = max(range(len(result)), key=lambda i: result[i].value)
    assert peak == 4
    assert result[peak].value == pytest.approx(0.5)
    assert all(b.key > a.key for a, b in zip(result, result[1:]))


def test_periodogram_matches_spectrum_in_db():
    data = [Sample(i * 0.1, v) for i, v in enumerate([0.3, 1.2, -0.7, 2.1, 0.9, -1.4, 0.2, 1.7, -0.5, 0.8])]
    proc = SignalProcessor()
    spectrum = proc.fft_plot(data, FFTType.spectrum, FFTWindow.hamming, False, 1, False, False, 0)
    periodogram = proc.fft_plot(data, FFTType.periodogram, FFTWindow.hamming, False, 1, False, False, 0)
    assert [s.key for s in spectrum] == [p.key for p in periodogram]
    for s, p in zip(spectrum, periodogram):
        if s.value > 1e-12:
            assert p.value == pytest.approx(20 * math.log10(s.value))


def test_twosided_zerocenter_frequencies():
    data = _sine(3, 32, 32)
    result = SignalProcessor().fft_plot(data, FFTType.spectrum, FFTWindow.rectangular, False, 1, True, True, 0)
    assert len(result) == 32
    assert all(s.key >= 0 for s in result[: 32 // 2 + 1])
    assert all(s.key < 0 for s in result[32 // 2 + 1 :])


def test_remove_dc_of_constant_gives_zero_spectrum():
    data = [Sample(i, 7.0) for i in range(16)]
    result = SignalProcessor().fft_plot(data, FFTType.spectrum, FFTWindow.rectangular, True, 1, False, False, 0)
    assert all(s.value == pytest.approx(0.0, abs=1e-12) for s in result)


def test_pwelch_peak_of_sine():
    data = _sine(4, 64, 128)
    result = SignalProcessor().fft_plot(data, FFTType.pwelch, FFTWindow.hann, False, 4, False, False, 0)
    assert len(result) == 64 // 2 + 1
    peak = max(range(len(result)), key=lambda i: result[i].value)
    assert peak == 4


def test_pwelch_too_many_segments():
    data = _sine(1, 8, 4)
    with pytest.raises(ValueError):
        SignalProcessor().fft_plot(data, FFTType.pwelch, FFTWindow.hann, False, 10, False, False, 0)


def test_fft_plot_needs_two_samples():
    with pytest.raises(ValueError):
        SignalProcessor().fft_plot([Sample(0, 1)], FFTType.spectrum, FFTWindow.hann, False, 1, False, False, 0)


def test_strongest_frequency_low_frequency_refined():
    data = _sine(5, 1000, 1000)
    assert strongest_frequency(data, 0.0, 1000.0) == pytest.approx(5.0)


def test_strongest_frequency_high_frequency():
    data = _sine(50, 1000, 200)
    assert abs(strongest_frequency(data, 0.0, 1000.0) - 50) < 1


def test_rise_fall_of_trapezoid():
    values = [0, 0, 0, 10, 10, 10, 0, 0]
    data = [Sample(float(i), float(v)) for i, v in enumerate(values)]
    rise, fall = rise_fall(data)
    assert rise == pytest.approx(fall)
    assert rise == pytest.approx(0.8)


def test_rise_without_fall():
    data = [Sample(float(i), float(v)) for i, v in enumerate([0, 0, 10, 10])]
    rise, fall = rise_fall(data)
    assert rise == pytest.approx(0.8)
    assert math.isnan(fall)


def test_process_sine():
    amplitude, offset, freq = 2.0, 1.0, 5.0
    data = _sine(freq, 1000, 1000, amplitude, offset)
    m = SignalProcessor().process(data)
    assert m.samples == len(data)
    assert m.frequency == pytest.approx(freq)
    assert m.period == pytest.approx(1 / m.frequency)
    assert m.amplitude == pytest.approx(m.maximum - m.minimum)
    assert m.maximum == pytest.approx(offset + amplitude, abs=1e-6)
    assert m.minimum == pytest.approx(offset - amplitude, abs=1e-6)
    assert m.dc == pytest.approx(offset, abs=0.02)
    assert m.vrms == pytest.approx(math.sqrt(offset**2 + amplitude**2 / 2), abs=0.02)
    assert m.sample_rate == pytest.approx(1000)


def test_process_needs_two_samples():
    with pytest.raises(ValueError):
        SignalProcessor().process([Sample(0.0, 1.0)])