import pytest

from dataplotter.channels import Sample
from dataplotter.interpolator import Interpolator, fir_filter


def series(values, step=1.0):
    return [Sample(i * step, float(v)) for i, v in enumerate(values)]


def test_fir_identity():
    x = [1.0, -2.0, 3.0, 4.0]
    assert fir_filter(x, [1.0]) == x


def test_fir_two_taps():
    x = [1.0, 2.0, 3.0]
    assert fir_filter(x, [1.0, 1.0]) == [x[1] + x[0], x[2] + x[1]]


def test_fir_output_length():
    x = list(range(10))
    assert len(fir_filter(x, [0.25] * 4)) == len(x) - 4 + 1
    assert fir_filter([1.0], [1.0, 1.0, 1.0]) == []


def test_interpolate_without_filter_raises():
    with pytest.raises(ValueError):
        Interpolator().interpolate(0, series([1, 2, 3]), (0.0, 2.0), False)


def test_interpolate_empty_data_raises():
    interpolator = Interpolator()
    interpolator.set_filter([1.0], 1)
    with pytest.raises(ValueError):
        interpolator.interpolate(0, [], (0.0, 1.0), False)


def test_identity_filter_keeps_data():
    interpolator = Interpolator()
    interpolator.set_filter([1.0], 1)
    data = series([1, 3, -2, 5, 0])
    result = interpolator.interpolate(4, data, (0.0, 4.0), True)
    assert result.filtered is True
    assert result.interpolated == data
    assert result.original == data
    assert (result.channel, result.from_buffer) == (4, True)


def test_upsampling_doubles_points():
    interpolator = Interpolator()
    interpolator.set_filter([1.0, 1.0], 2)
    values = [1.0, 2.0, 3.0, 4.0]
    data = series(values, 0.5)
    result = interpolator.interpolate(0, data, (0.0, 1.5), False)
    assert len(result.interpolated) == 2 * len(values) - 1
    assert [s.key for s in result.interpolated[::2]] == [s.key for s in data]
    assert [s.value for s in result.interpolated[::2]] == [2 * v for v in values]
    keys = [s.key for s in result.interpolated]
    assert keys == sorted(keys)


def test_too_few_samples_returns_copy():
    interpolator = Interpolator()
    interpolator.set_filter([0.1] * 20, 1)
    data = series([1, 2, 3])
    result = interpolator.interpolate(1, data, (0.0, 2.0), False)
    assert result.filtered is False
    assert result.interpolated == data


def test_too_many_samples_returns_copy():
    interpolator = Interpolator()
    interpolator.set_filter([1.0], 1)
    data = series([0] * 2500, 0.001)
    result = interpolator.interpolate(0, data, (0.0, 2.5), False)
    assert result.filtered is False
    assert result.interpolated == data


def test_only_part_around_visible_range_is_used():
    interpolator = Interpolator()
    interpolator.set_filter([1.0], 1)
    data = series(range(100))
    result = interpolator.interpolate(0, data, (40.0, 50.0), False)
    keys = [s.key for s in result.interpolated]
    assert result.filtered is True
    assert len(keys) < len(data)
    assert keys[0] <= 40.0 - 5.0
    assert keys[-1] >= 50.0 + 5.0


def test_load_filter_adds_csv_extension(tmp_path):
    (tmp_path / "fir.csv").write_text("0.25,0.5,0.25\n")
    interpolator = Interpolator()
    interpolator.load_filter_from_file(tmp_path / "fir", 4)
    assert interpolator.coefficients == (0.25, 0.5, 0.25)
    assert interpolator.upsampling == 4


def test_loaded_identity_filter(tmp_path):
    path = tmp_path / "identity.csv"
    path.write_text("1")
    interpolator = Interpolator()
    interpolator.load_filter_from_file(path, 1)
    data = series([2, 4, 6])
    assert interpolator.interpolate(0, data, (0.0, 2.0), False).interpolated == data


def test_missing_filter_file_raises(tmp_path):
    interpolator = Interpolator()
    with pytest.raises(FileNotFoundError):
        interpolator.load_filter_from_file(tmp_path / "missing.csv", 8)
    assert interpolator.coefficients == ()


def test_invalid_upsampling_raises():
    with pytest.raises(ValueError):
        Interpolator().set_filter([1.0], 0)