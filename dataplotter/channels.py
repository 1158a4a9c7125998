"""Channel layout of the plot, sample records and processing enumerations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

ANALOG_COUNT = 16
MATH_COUNT = 3
LOGIC_BITS = 32
LOGIC_GROUPS = 3
INTERPOLATION_COUNT = 2

LOGIC_COUNT = LOGIC_BITS * LOGIC_GROUPS
# Every logic bit counts as a channel; interpolation channels are not included.
ALL_COUNT = ANALOG_COUNT + MATH_COUNT + LOGIC_COUNT

CURSOR_ABSOLUTE = ANALOG_COUNT + MATH_COUNT + LOGIC_GROUPS + 2

MAX_PLOT_ZOOMOUT = 10_000_000_000
PLOT_ELEMENTS_MOUSE_DISTANCE = 10
TRACER_MOUSE_DISTANCE = 20

EXPORT_XY = -1
EXPORT_FFT = -2
EXPORT_ALL = -3
EXPORT_FREQTIME = -4


@dataclass(frozen=True)
class Sample:
    """One point of a time series: a key (time or frequency) and a value."""

    key: float
    value: float


class FFTType(IntEnum):
    spectrum = 0
    periodogram = 1
    pwelch = 2


class FFTWindow(IntEnum):
    rectangular = 0
    hamming = 1
    hann = 2
    blackman = 3


class MathOperation(IntEnum):
    add = 0
    subtract = 1
    multiply = 2
    divide = 3


def fft_index(n: int) -> int:
    """Index of FFT channel ``n`` (0 or 1) in the cursor channel list."""
    return ANALOG_COUNT + MATH_COUNT + LOGIC_GROUPS + n


def is_fft_index(index: int) -> bool:
    return index in (fft_index(0), fft_index(1))


def is_logic_index(index: int) -> bool:
    return index >= ANALOG_COUNT + MATH_COUNT and not is_fft_index(index) and index != CURSOR_ABSOLUTE


def interpolation_chid(n: int) -> int:
    """Channel id of interpolation channel ``n``."""
    return ALL_COUNT + n


def is_analog_or_math(ch: int) -> bool:
    return ch < ANALOG_COUNT + MATH_COUNT


def logic_group_of(ch: int) -> int:
    """Logic group that the logic bit channel ``ch`` belongs to."""
    return (ch - ANALOG_COUNT - MATH_COUNT) // LOGIC_BITS


def logic_group_bit(ch: int) -> int:
    """Bit position of the logic bit channel ``ch`` inside its group."""
    return (ch - ANALOG_COUNT - MATH_COUNT) % LOGIC_BITS


def math_channel_id(math_number: int) -> int:
    """Channel id of math channel ``math_number`` (numbered from 1)."""
    if not 1 <= math_number <= MATH_COUNT:
        raise ValueError(f"math channel number must be 1..{MATH_COUNT}, got {math_number}")
    return ANALOG_COUNT + math_number - 1