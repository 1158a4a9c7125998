import pytest

from dataplotter.channels import (
    ALL_COUNT,
    ANALOG_COUNT,
    CURSOR_ABSOLUTE,
    LOGIC_BITS,
    MATH_COUNT,
    fft_index,
    interpolation_chid,
    is_analog_or_math,
    is_fft_index,
    is_logic_index,
    logic_group_bit,
    logic_group_of,
    math_channel_id,
)


def test_fft_indices_are_consecutive():
    assert fft_index(1) == fft_index(0) + 1
    assert is_fft_index(fft_index(0))
    assert is_fft_index(fft_index(1))
    assert not is_fft_index(fft_index(2))


def test_logic_index_excludes_fft_and_cursor():
    first_logic = ANALOG_COUNT + MATH_COUNT
    assert is_logic_index(first_logic)
    assert not is_logic_index(first_logic - 1)
    assert not is_logic_index(fft_index(0))
    assert not is_logic_index(CURSOR_ABSOLUTE)


def test_interpolation_channels_follow_all_channels():
    assert interpolation_chid(0) == ALL_COUNT
    assert interpolation_chid(1) == ALL_COUNT + 1


def test_analog_or_math_boundary():
    assert is_analog_or_math(0)
    assert is_analog_or_math(ANALOG_COUNT + MATH_COUNT - 1)
    assert not is_analog_or_math(ANALOG_COUNT + MATH_COUNT)


@pytest.mark.parametrize("group", [0, 1, 2])
@pytest.mark.parametrize("bit", [0, 5, LOGIC_BITS - 1])
def test_logic_group_and_bit_round_trip(group, bit):
    ch = ANALOG_COUNT + MATH_COUNT + group * LOGIC_BITS + bit
    assert logic_group_of(ch) == group
    assert logic_group_bit(ch) == bit


def test_math_channel_ids():
    ids = [math_channel_id(n) for n in range(1, MATH_COUNT + 1)]
    assert ids[0] == ANALOG_COUNT
    assert ids == list(range(ANALOG_COUNT, ANALOG_COUNT + MATH_COUNT))
    assert all(is_analog_or_math(i) for i in ids)


@pytest.mark.parametrize("bad", [0, MATH_COUNT + 1, -1])
def test_math_channel_id_out_of_range(bad):
    with pytest.raises(ValueError):
        math_channel_id(bad)